"""Tests for the permission-gated resources and the audit events they write"""
import pytest
from fastapi.testclient import TestClient

from lexiom_admin.models.audit_log import AuditLog
from lexiom_admin.models.legal_module import LegalModule
from lexiom_admin.models.legal_template import LegalTemplate
from lexiom_admin.models.role import Role
from lexiom_admin.utils.clock import utcnow


@pytest.fixture
def contracts_module(db) -> LegalModule:
    module = LegalModule(identifier="contracts", name="Contracts", category="civil", is_active=False)
    db.add(module)
    db.add(LegalModule(identifier="disputes", name="Disputes", category="civil", dependencies=["contracts"]))
    db.commit()
    db.refresh(module)
    return module


@pytest.fixture
def template(db, super_admin) -> LegalTemplate:
    template = LegalTemplate(name="NDA", category="contracts", content="Confidential...", created_by=super_admin.id)
    db.add(template)
    db.commit()
    db.refresh(template)
    return template


def _events(db, action):
    return db.query(AuditLog).filter(AuditLog.action == action).all()


# ===== Modules =====

def test_list_modules(client: TestClient, contracts_module, make_admin, make_role, auth_headers):
    user = make_admin(role=make_role("viewer", permissions=["modules:read"]))

    response = client.get("/modules", headers=auth_headers(user))
    assert response.status_code == 200
    assert {m["identifier"] for m in response.json()["modules"]} == {"contracts", "disputes"}


def test_toggle_module_writes_one_audit_event(client: TestClient, db, contracts_module, super_admin, auth_headers):
    start = utcnow()

    response = client.post("/modules/contracts/toggle", json={"enabled": True}, headers=auth_headers(super_admin))
    assert response.status_code == 200
    assert response.json() == {"success": True}

    db.refresh(contracts_module)
    assert contracts_module.is_active is True

    events = db.query(AuditLog).all()
    assert len(events) == 1
    assert events[0].action == "module_activated"
    assert events[0].resource_type == "legal_module"
    assert events[0].resource_id == "contracts"
    assert events[0].user_id == super_admin.id
    assert events[0].old_values == {"is_active": False}
    assert events[0].new_values == {"is_active": True}
    assert events[0].created_at >= start


def test_deactivate_module(client: TestClient, db, contracts_module, super_admin, auth_headers):
    headers = auth_headers(super_admin)
    client.post("/modules/contracts/toggle", json={"enabled": True}, headers=headers)
    client.post("/modules/contracts/toggle", json={"enabled": False}, headers=headers)

    assert len(_events(db, "module_activated")) == 1
    assert len(_events(db, "module_deactivated")) == 1


def test_toggle_requires_update_permission(client: TestClient, db, contracts_module, make_admin, make_role, auth_headers):
    user = make_admin(role=make_role("viewer", permissions=["modules:read"]))

    response = client.post("/modules/contracts/toggle", json={"enabled": True}, headers=auth_headers(user))
    assert response.status_code == 403
    assert db.query(AuditLog).count() == 0


def test_toggle_unknown_module(client: TestClient, super_admin, auth_headers):
    response = client.post("/modules/nope/toggle", json={"enabled": True}, headers=auth_headers(super_admin))
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


def test_toggle_survives_audit_failure(client: TestClient, db, contracts_module, super_admin, auth_headers, failing_audit):
    """Test the primary change commits and the response is unchanged when auditing fails"""
    response = client.post("/modules/contracts/toggle", json={"enabled": True}, headers=auth_headers(super_admin))
    assert response.status_code == 200

    db.refresh(contracts_module)
    assert contracts_module.is_active is True


def test_update_module_config(client: TestClient, db, contracts_module, super_admin, auth_headers):
    response = client.put(
        "/modules/contracts/config", json={"config": {"max_documents": 10}}, headers=auth_headers(super_admin)
    )
    assert response.status_code == 200

    db.refresh(contracts_module)
    assert contracts_module.config == {"max_documents": 10}
    (event,) = _events(db, "module_config_updated")
    assert event.new_values == {"config": {"max_documents": 10}}


def test_module_dependencies(client: TestClient, contracts_module, super_admin, auth_headers):
    response = client.get("/modules/contracts/dependencies", headers=auth_headers(super_admin))
    assert response.status_code == 200
    assert response.json() == {"identifier": "contracts", "dependencies": [], "dependents": ["disputes"]}


# ===== Roles =====

def test_create_role_writes_one_audit_event(client: TestClient, db, super_admin, make_permission, auth_headers):
    make_permission("audit:read")
    start = utcnow()

    response = client.post(
        "/roles",
        json={"name": "Auditor", "identifier": "auditor", "permissions": ["audit:read"]},
        headers=auth_headers(super_admin),
    )
    assert response.status_code == 201

    role = response.json()["role"]
    assert role["permissions"] == ["audit:read"]

    (event,) = _events(db, "role_created")
    assert event.resource_type == "role"
    assert event.resource_id == role["id"]
    assert event.created_at >= start
    assert db.query(AuditLog).count() == 1


def test_create_role_with_unknown_permission(client: TestClient, db, super_admin, auth_headers):
    response = client.post(
        "/roles",
        json={"name": "Auditor", "identifier": "auditor", "permissions": ["audit:nuke"]},
        headers=auth_headers(super_admin),
    )
    assert response.status_code == 400
    assert db.query(Role).count() == 0


def test_create_duplicate_role(client: TestClient, make_role, super_admin, auth_headers):
    make_role("auditor")

    response = client.post("/roles", json={"name": "Auditor", "identifier": "auditor"}, headers=auth_headers(super_admin))
    assert response.status_code == 400


def test_replace_role_permissions(client: TestClient, db, make_role, make_permission, super_admin, auth_headers):
    role = make_role("auditor", permissions=["audit:read"])
    make_permission("modules:read")

    response = client.put(
        f"/roles/{role.id}/permissions", json={"permissions": ["modules:read"]}, headers=auth_headers(super_admin)
    )
    assert response.status_code == 200
    assert response.json()["role"]["permissions"] == ["modules:read"]

    (event,) = _events(db, "role_permissions_updated")
    assert event.old_values == {"permissions": ["audit:read"]}
    assert event.new_values == {"permissions": ["modules:read"]}


def test_delete_role(client: TestClient, db, make_role, make_admin, super_admin, auth_headers):
    role = make_role("auditor")
    holder = make_admin(email="holder@lexiom.test", role=role)
    role_id = role.id

    response = client.delete(f"/roles/{role_id}", headers=auth_headers(super_admin))
    assert response.status_code == 200

    assert db.get(Role, role_id) is None
    db.refresh(holder)
    assert holder.role_id is None
    assert len(_events(db, "role_deleted")) == 1


def test_list_roles_and_permissions(client: TestClient, make_role, make_admin, auth_headers):
    user = make_admin(role=make_role("admin_viewer", permissions=["permissions:read"]))
    headers = auth_headers(user)

    roles = client.get("/roles", headers=headers)
    assert roles.status_code == 200
    assert roles.json()["roles"][0]["identifier"] == "admin_viewer"

    permissions = client.get("/permissions", headers=headers)
    assert [p["name"] for p in permissions.json()["permissions"]] == ["permissions:read"]


# ===== Legal templates =====

def test_create_template(client: TestClient, db, make_admin, make_role, auth_headers):
    user = make_admin(role=make_role("writer", permissions=["templates:create"]))

    response = client.post(
        "/legal-templates",
        json={"name": "Lease", "category": "real_estate", "content": "This lease..."},
        headers=auth_headers(user),
    )
    assert response.status_code == 201

    data = response.json()["template"]
    assert data["is_approved"] is False
    assert data["created_by"] == user.id
    assert len(_events(db, "legal_template_created")) == 1


def test_update_template(client: TestClient, db, template, super_admin, auth_headers):
    response = client.put(f"/legal-templates/{template.id}", json={"name": "Mutual NDA"}, headers=auth_headers(super_admin))
    assert response.status_code == 200
    assert response.json()["template"]["name"] == "Mutual NDA"

    (event,) = _events(db, "legal_template_updated")
    assert event.old_values == {"name": "NDA"}
    assert event.new_values == {"name": "Mutual NDA"}


def test_approve_template_writes_one_audit_event(client: TestClient, db, template, super_admin, auth_headers):
    start = utcnow()

    response = client.post(f"/legal-templates/{template.id}/approve", headers=auth_headers(super_admin))
    assert response.status_code == 200

    data = response.json()["template"]
    assert data["is_approved"] is True
    assert data["approved_by"] == super_admin.id

    events = db.query(AuditLog).all()
    assert len(events) == 1
    assert events[0].action == "legal_template_approved"
    assert events[0].resource_type == "legal_template"
    assert events[0].resource_id == template.id
    assert events[0].created_at >= start


def test_delete_template(client: TestClient, db, template, make_admin, make_role, auth_headers):
    template_id = template.id
    reader = make_admin(email="reader@lexiom.test", role=make_role("reader", permissions=["templates:read"]))
    deleter = make_admin(email="deleter@lexiom.test", role=make_role("deleter", permissions=["templates:delete"]))

    assert client.delete(f"/legal-templates/{template_id}", headers=auth_headers(reader)).status_code == 403
    assert client.delete(f"/legal-templates/{template_id}", headers=auth_headers(deleter)).status_code == 200

    assert db.get(LegalTemplate, template_id) is None
    assert len(_events(db, "legal_template_deleted")) == 1


def test_template_not_found(client: TestClient, super_admin, auth_headers):
    response = client.post("/legal-templates/missing/approve", headers=auth_headers(super_admin))
    assert response.status_code == 404
