"""Experiment proposal generation from funnel metrics."""
