"""Tests for permission resolution"""
import pytest
from fastapi.testclient import TestClient

from lexiom_admin.repositories.role_repository import RoleRepository
from lexiom_admin.services.rbac import authorize, is_authorized


@pytest.mark.parametrize(
    "is_super_admin, granted, required, expected",
    [
        (True, set(), {"audit:read"}, True),
        (False, set(), set(), True),
        (False, {"audit:read"}, {"audit:read"}, True),
        (False, {"modules:read"}, {"audit:read", "modules:read"}, True),
        (False, {"modules:read"}, {"audit:read"}, False),
        (False, set(), {"audit:read"}, False),
    ],
)
def test_is_authorized(is_super_admin, granted, required, expected):
    assert is_authorized(is_super_admin, frozenset(granted), frozenset(required)) is expected


def test_is_authorized_is_pure():
    """Test the same inputs always give the same answer and inputs are not mutated"""
    granted = {"modules:read"}
    required = {"audit:read"}

    results = {is_authorized(False, granted, required) for _ in range(3)}

    assert results == {False}
    assert granted == {"modules:read"}
    assert required == {"audit:read"}


def test_role_without_grants_resolves_to_empty_set(db, make_role):
    role = make_role("viewer")
    assert RoleRepository(db).granted_permissions(role.id) == set()


def test_ungranted_rows_do_not_count(db, make_role):
    role = make_role("viewer", permissions=["audit:read", "modules:read"])
    role.grants[0].granted = False
    db.commit()

    assert len(RoleRepository(db).granted_permissions(role.id)) == 1


def test_inactive_role_grants_nothing(db, make_role):
    role = make_role("auditor", permissions=["audit:read"], is_active=False)

    assert RoleRepository(db).granted_permissions(role.id) == set()
    assert authorize(RoleRepository(db), role.id, False, frozenset({"audit:read"})) is False


def test_grant_change_visible_on_next_call(db, make_role, make_permission):
    roles = RoleRepository(db)
    role = make_role("auditor")
    required = frozenset({"audit:read"})

    assert authorize(roles, role.id, False, required) is False

    roles.replace_grants(role, [make_permission("audit:read")])

    assert authorize(roles, role.id, False, required) is True


def test_missing_permission_is_forbidden(client: TestClient, make_admin, make_role, auth_headers):
    user = make_admin(role=make_role("editor", permissions=["templates:read"]))

    response = client.get("/audit-logs", headers=auth_headers(user))
    assert response.status_code == 403
    assert response.json() == {"error": "insufficient_permissions", "message": "Insufficient permissions"}


def test_any_listed_permission_is_enough(client: TestClient, make_admin, make_role, auth_headers):
    user = make_admin(role=make_role("auditor", permissions=["audit:read"]))

    response = client.get("/audit-logs", headers=auth_headers(user))
    assert response.status_code == 200


def test_user_without_role_is_forbidden(client: TestClient, make_admin, auth_headers):
    user = make_admin()

    response = client.get("/modules", headers=auth_headers(user))
    assert response.status_code == 403


def test_super_admin_bypasses_grants(client: TestClient, super_admin, auth_headers):
    response = client.get("/modules", headers=auth_headers(super_admin))
    assert response.status_code == 200


def test_grant_change_takes_effect_on_next_request(
    client: TestClient, db, make_admin, make_role, make_permission, auth_headers
):
    """Test a granted permission works on the very next request of the same token"""
    role = make_role("auditor")
    headers = auth_headers(make_admin(role=role))

    assert client.get("/audit-logs", headers=headers).status_code == 403

    RoleRepository(db).replace_grants(role, [make_permission("audit:read")])

    assert client.get("/audit-logs", headers=headers).status_code == 200

    RoleRepository(db).replace_grants(role, [])

    assert client.get("/audit-logs", headers=headers).status_code == 403


def test_me_lists_effective_permissions(client: TestClient, make_admin, make_role, auth_headers):
    user = make_admin(role=make_role("auditor", permissions=["audit:read", "modules:read"]))

    response = client.get("/admin/me", headers=auth_headers(user))
    assert response.status_code == 200
    assert response.json()["permissions"] == ["audit:read", "modules:read"]
