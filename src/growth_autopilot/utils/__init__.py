"""Leaf utilities: canonical JSON, hashing, caching and filesystem helpers."""
