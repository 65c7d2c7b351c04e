"""User accounts: registration, profile and deletion."""
