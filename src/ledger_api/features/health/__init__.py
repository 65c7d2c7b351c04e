"""Liveness reporting."""
