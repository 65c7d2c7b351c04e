"""Income and expense records with their tag sets."""
