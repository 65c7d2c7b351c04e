"""Password login, token issuance and server-side sessions."""
