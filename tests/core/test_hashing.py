from __future__ import annotations

import pytest

from ledger_api.core.security import hash_password, verify_password


def test_hash_and_verify_roundtrip() -> None:
    hashed = hash_password("correct horse")
    assert hashed.startswith("scrypt$")
    assert verify_password("correct horse", hashed)
    assert not verify_password("wrong horse", hashed)


def test_hashes_are_salted() -> None:
    assert hash_password("same") != hash_password("same")


def test_empty_password_is_rejected() -> None:
    with pytest.raises(ValueError):
        hash_password("")


@pytest.mark.parametrize("stored", ["", "plain", "bcrypt$1$2$3$4$5", "scrypt$x$8$1$a$b"])
def test_malformed_hashes_never_verify(stored: str) -> None:
    assert verify_password("anything", stored) is False
