from __future__ import annotations

import pytest

from ledger_api.core.rbac import MEMBER_ROLES, InvalidRoleError, Role, roles_at_least


def test_ladder_ordering() -> None:
    assert Role.OWNER.satisfies(Role.WRITE)
    assert Role.OWNER.satisfies(Role.VIEW)
    assert Role.WRITE.satisfies(Role.VIEW)
    assert not Role.VIEW.satisfies(Role.WRITE)
    assert not Role.WRITE.satisfies(Role.OWNER)


def test_roles_at_least() -> None:
    assert roles_at_least(Role.VIEW) == frozenset(Role)
    assert roles_at_least(Role.WRITE) == {Role.WRITE, Role.OWNER}
    assert roles_at_least(Role.OWNER) == {Role.OWNER}


def test_parse_normalizes_case_and_whitespace() -> None:
    assert Role.parse(" Write ") is Role.WRITE
    assert Role.parse(Role.VIEW) is Role.VIEW


@pytest.mark.parametrize("value", ["admin", "", None, 3])
def test_parse_rejects_unknown_roles(value: object) -> None:
    with pytest.raises(InvalidRoleError):
        Role.parse(value)


def test_parse_respects_allowed_set() -> None:
    with pytest.raises(InvalidRoleError) as excinfo:
        Role.parse("owner", allowed=MEMBER_ROLES)
    assert "allowed: view, write" in str(excinfo.value)
