"""Tags, unique by name within a scope."""
