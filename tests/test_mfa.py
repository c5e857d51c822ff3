"""Tests for MFA enrollment"""
from datetime import timedelta

import pyotp
from fastapi.testclient import TestClient

from lexiom_admin.models.audit_log import AuditLog
from lexiom_admin.models.mfa_enrollment import MFAEnrollment
from lexiom_admin.utils.clock import utcnow


def _setup(client: TestClient, headers: dict) -> str:
    response = client.post("/admin/mfa/setup", headers=headers)
    assert response.status_code == 200
    return response.json()["secret"]


def test_setup_returns_secret_and_qr_code(client: TestClient, db, make_admin, auth_headers):
    user = make_admin()

    response = client.post("/admin/mfa/setup", headers=auth_headers(user))
    assert response.status_code == 200

    data = response.json()
    assert len(data["secret"]) == 32
    assert data["qrCode"].startswith("data:image/png;base64,")
    assert data["otpauthUrl"].startswith("otpauth://totp/")
    assert data["secret"] in data["otpauthUrl"]

    # Pending only: login still works without a code
    db.refresh(user)
    assert user.mfa_enabled is False
    assert user.mfa_secret is None


def test_setup_requires_authentication(client: TestClient):
    assert client.post("/admin/mfa/setup").status_code == 401


def test_confirm_enables_mfa(client: TestClient, db, make_admin, auth_headers):
    user = make_admin()
    headers = auth_headers(user)
    secret = _setup(client, headers)

    response = client.post("/admin/mfa/verify", json={"totpCode": pyotp.TOTP(secret).now()}, headers=headers)
    assert response.status_code == 200
    assert response.json() == {"success": True, "mfa_enabled": True}

    db.refresh(user)
    assert user.mfa_enabled is True
    assert user.mfa_secret == secret
    assert db.get(MFAEnrollment, user.id) is None

    events = db.query(AuditLog).filter(AuditLog.action == "mfa_enabled").all()
    assert len(events) == 1
    assert events[0].resource_id == user.id


def test_confirm_succeeds_once_per_setup(client: TestClient, make_admin, auth_headers):
    headers = auth_headers(make_admin())
    secret = _setup(client, headers)
    code = pyotp.TOTP(secret).now()

    first = client.post("/admin/mfa/verify", json={"totpCode": code}, headers=headers)
    second = client.post("/admin/mfa/verify", json={"totpCode": code}, headers=headers)

    assert first.status_code == 200
    assert second.status_code == 400
    assert second.json()["message"] == "No pending MFA setup"


def test_wrong_code_keeps_pending_secret(client: TestClient, make_admin, auth_headers):
    headers = auth_headers(make_admin())
    secret = _setup(client, headers)
    valid = pyotp.TOTP(secret).now()
    wrong = "000000" if valid != "000000" else "111111"

    response = client.post("/admin/mfa/verify", json={"totpCode": wrong}, headers=headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid MFA code"

    response = client.post("/admin/mfa/verify", json={"totpCode": valid}, headers=headers)
    assert response.status_code == 200


def test_expired_pending_setup(client: TestClient, db, make_admin, auth_headers):
    user = make_admin()
    headers = auth_headers(user)
    secret = _setup(client, headers)

    enrollment = db.get(MFAEnrollment, user.id)
    enrollment.created_at = utcnow() - timedelta(hours=1)
    db.commit()

    response = client.post("/admin/mfa/verify", json={"totpCode": pyotp.TOTP(secret).now()}, headers=headers)
    assert response.status_code == 400
    assert db.get(MFAEnrollment, user.id) is None


def test_setup_again_replaces_pending_secret(client: TestClient, make_admin, auth_headers):
    headers = auth_headers(make_admin())
    old_secret = _setup(client, headers)
    new_secret = _setup(client, headers)

    assert old_secret != new_secret
    response = client.post("/admin/mfa/verify", json={"totpCode": pyotp.TOTP(new_secret).now()}, headers=headers)
    assert response.status_code == 200


def test_setup_when_already_enabled(client: TestClient, make_admin, auth_headers):
    user = make_admin(mfa_secret=pyotp.random_base32())

    response = client.post("/admin/mfa/setup", headers=auth_headers(user))
    assert response.status_code == 400


def test_malformed_code_is_rejected(client: TestClient, make_admin, auth_headers):
    headers = auth_headers(make_admin())
    _setup(client, headers)

    response = client.post("/admin/mfa/verify", json={"totpCode": "12"}, headers=headers)
    assert response.status_code == 400
    assert response.json()["error"] == "validation_error"


def test_disable_mfa(client: TestClient, db, make_admin, auth_headers):
    user = make_admin(mfa_secret=pyotp.random_base32())

    response = client.post("/admin/mfa/disable", headers=auth_headers(user))
    assert response.status_code == 200
    assert response.json()["mfa_enabled"] is False

    db.refresh(user)
    assert user.mfa_enabled is False
    assert user.mfa_secret is None
    assert db.query(AuditLog).filter(AuditLog.action == "mfa_disabled").count() == 1

    # No code needed any more
    response = client.post("/admin/login", json={"email": user.email, "password": "Correct-Horse-9"})
    assert response.status_code == 200


def test_disable_when_not_enabled(client: TestClient, db, make_admin, auth_headers):
    """Test disabling MFA on an account without it is rejected and leaves no audit row"""
    user = make_admin()

    response = client.post("/admin/mfa/disable", headers=auth_headers(user))
    assert response.status_code == 400
    assert response.json()["message"] == "MFA is not enabled"

    assert db.query(AuditLog).filter(AuditLog.action == "mfa_disabled").count() == 0


def test_enrolled_secret_is_used_at_login(client: TestClient, make_admin, auth_headers):
    user = make_admin()
    headers = auth_headers(user)
    secret = _setup(client, headers)
    client.post("/admin/mfa/verify", json={"totpCode": pyotp.TOTP(secret).now()}, headers=headers)

    without_code = client.post("/admin/login", json={"email": user.email, "password": "Correct-Horse-9"})
    assert without_code.status_code == 400
    assert without_code.json()["mfaRequired"] is True

    with_code = client.post(
        "/admin/login",
        json={"email": user.email, "password": "Correct-Horse-9", "mfaCode": pyotp.TOTP(secret).now()},
    )
    assert with_code.status_code == 200
