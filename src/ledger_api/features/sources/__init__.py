"""Money sources (accounts) scoped like every other data row."""
