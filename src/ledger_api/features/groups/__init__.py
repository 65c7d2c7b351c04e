"""Groups: shared scopes with owner-managed membership."""
