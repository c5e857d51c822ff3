"""Pytest configuration and fixtures"""
import os
from typing import Callable, Generator, Iterable, List, Optional

# Configure before the application modules read settings
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from lexiom_admin.api.deps import get_audit_sink
from lexiom_admin.database import Base, get_db
from lexiom_admin.main import app
from lexiom_admin.middleware.rate_limit import limiter
from lexiom_admin.models.admin_user import AdminUser
from lexiom_admin.models.audit_log import AuditLog
from lexiom_admin.models.role import Permission, Role, RolePermission
from lexiom_admin.utils.jwt_utils import create_session_token
from lexiom_admin.utils.passwords import hash_password

TEST_DATABASE_URL = os.environ["DATABASE_URL"]

engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

DEFAULT_PASSWORD = "Correct-Horse-9"


class InMemoryAuditSink:
    """Collects audit events instead of writing them"""

    def __init__(self) -> None:
        self.entries: List[AuditLog] = []

    def append(self, entry: AuditLog) -> None:
        self.entries.append(entry)


class FailingAuditSink:
    """Audit store that is always down"""

    def append(self, entry: AuditLog) -> None:
        raise RuntimeError("audit store unavailable")


@pytest.fixture(autouse=True)
def reset_rate_limits() -> Generator[None, None, None]:
    """Every test starts with empty rate-limit windows"""
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db: Session) -> Generator[TestClient, None, None]:
    """Create test client with database session override"""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def failing_audit(client: TestClient) -> Generator[FailingAuditSink, None, None]:
    """Route every audit write of ``client`` to a sink that raises"""
    sink = FailingAuditSink()
    app.dependency_overrides[get_audit_sink] = lambda: sink
    yield sink
    app.dependency_overrides.pop(get_audit_sink, None)


@pytest.fixture
def make_permission(db: Session) -> Callable[[str], Permission]:
    def _make(name: str) -> Permission:
        permission = db.query(Permission).filter(Permission.name == name).first()
        if permission is None:
            permission = Permission(name=name, category=name.split(":")[0])
            db.add(permission)
            db.commit()
            db.refresh(permission)
        return permission

    return _make


@pytest.fixture
def make_role(db: Session, make_permission) -> Callable[..., Role]:
    def _make(identifier: str = "content_manager", permissions: Iterable[str] = (), is_active: bool = True) -> Role:
        role = Role(name=identifier.replace("_", " ").title(), identifier=identifier, is_active=is_active)
        db.add(role)
        db.commit()
        for name in permissions:
            db.add(RolePermission(role_id=role.id, permission_id=make_permission(name).id, granted=True))
        db.commit()
        db.refresh(role)
        return role

    return _make


@pytest.fixture
def make_admin(db: Session) -> Callable[..., AdminUser]:
    def _make(
        email: str = "admin@lexiom.test",
        password: str = DEFAULT_PASSWORD,
        role: Optional[Role] = None,
        is_super_admin: bool = False,
        is_active: bool = True,
        mfa_secret: Optional[str] = None,
    ) -> AdminUser:
        user = AdminUser(
            email=email,
            password_hash=hash_password(password),
            full_name="Test Admin",
            role_id=role.id if role else None,
            is_super_admin=is_super_admin,
            is_active=is_active,
            mfa_enabled=mfa_secret is not None,
            mfa_secret=mfa_secret,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def super_admin(make_admin) -> AdminUser:
    return make_admin(email="root@lexiom.test", is_super_admin=True)


@pytest.fixture
def auth_headers() -> Callable[[AdminUser], dict]:
    """Bearer headers for a user, without going through the login route"""

    def _headers(user: AdminUser) -> dict:
        token = create_session_token(user.id, user.email, user.is_super_admin)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def memory_audit() -> InMemoryAuditSink:
    return InMemoryAuditSink()
