"""Spending categories."""
