"""Security helpers: password hashing and signed tokens."""

from .hashing import hash_password, verify_password
from .tokens import TokenPayload, create_signed_token, decode_signed_token, decode_token

__all__ = [
    "TokenPayload",
    "create_signed_token",
    "decode_signed_token",
    "decode_token",
    "hash_password",
    "verify_password",
]
