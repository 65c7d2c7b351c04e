"""Scope registry, resolution and data teardown."""
