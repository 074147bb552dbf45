"""Identifier and timestamp primitives shared by producers and the orchestrator."""
