"""
Role permission table tests.

Verifies:
- Every role/key pair matches the fixed table
- Unknown roles behave exactly like staff
- Unknown permission keys are always denied
"""

import pytest

from kmdash.permissions import (
    PERMISSION_KEYS,
    Role,
    get_granted_keys,
    get_km_insight,
    get_permission_definition,
    get_role_permissions,
    has_permission,
    validate_permission_key,
)


EXPECTED = {
    "admin": {
        "dashboard": True, "inventaris": True, "analitik": True, "vendor": True,
        "pengetahuan": True, "users": True, "settings": True,
    },
    "manager": {
        "dashboard": True, "inventaris": True, "analitik": True, "vendor": True,
        "pengetahuan": True, "users": False, "settings": False,
    },
    "staff": {
        "dashboard": False, "inventaris": True, "analitik": False, "vendor": False,
        "pengetahuan": True, "users": False, "settings": False,
    },
}


def test_permission_keys_are_the_seven_areas():
    assert set(PERMISSION_KEYS) == {
        "dashboard", "inventaris", "analitik", "vendor", "pengetahuan", "users", "settings",
    }


@pytest.mark.parametrize("role", ["admin", "manager", "staff"])
def test_role_record_matches_table(role):
    assert get_role_permissions(role) == EXPECTED[role]


@pytest.mark.parametrize("role", ["admin", "manager", "staff"])
@pytest.mark.parametrize("key", sorted(EXPECTED["admin"].keys()))
def test_has_permission_matches_table(role, key):
    assert has_permission(role, key) is EXPECTED[role][key]


@pytest.mark.parametrize("role", ["owner", "", "superuser", None, 42])
def test_unknown_role_behaves_as_staff(role):
    assert get_role_permissions(role) == EXPECTED["staff"]
    assert Role.parse(role) is Role.STAFF


def test_role_parse_is_case_insensitive():
    assert Role.parse(" Admin ") is Role.ADMIN
    assert Role.parse("MANAGER") is Role.MANAGER
    assert Role.parse(Role.ADMIN) is Role.ADMIN


@pytest.mark.parametrize("role", ["admin", "manager", "staff"])
def test_unknown_key_is_denied(role):
    assert has_permission(role, "superpowers") is False
    assert has_permission(role, "") is False


def test_returned_record_is_a_copy():
    record = get_role_permissions("staff")
    record["users"] = True
    assert has_permission("staff", "users") is False


def test_granted_keys_keep_table_order():
    assert get_granted_keys("staff") == ["inventaris", "pengetahuan"]
    assert get_granted_keys(Role.ADMIN) == list(PERMISSION_KEYS)


def test_permission_definitions():
    assert validate_permission_key("analitik")
    assert not validate_permission_key("reports")
    definition = get_permission_definition("vendor")
    assert definition["key"] == "vendor"
    assert get_permission_definition("nope") is None


def test_km_insight_per_role():
    assert "akses penuh" in get_km_insight("admin")
    assert "strategic insights" in get_km_insight(Role.MANAGER)
    assert get_km_insight("owner") == get_km_insight("staff")
