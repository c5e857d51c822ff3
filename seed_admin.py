"""
Bootstrap seeder for the Lexiom admin panel

Creates, if missing:
- the permission catalogue (``resource:action`` names)
- the default roles and their grants
- the default legal modules
- an initial super-admin account

Safe to run repeatedly: existing rows are left untouched.

    SEED_ADMIN_EMAIL=admin@lexiom.com SEED_ADMIN_PASSWORD=... python seed_admin.py

When SEED_ADMIN_PASSWORD is not set a random password is generated and printed once.
"""
import os
import secrets
from typing import Dict, List

from sqlalchemy.orm import Session

from lexiom_admin.database import Base, SessionLocal, engine
from lexiom_admin.models import AdminUser, LegalModule, Permission, Role, RolePermission
from lexiom_admin.utils.passwords import hash_password

# Permission catalogue: category -> actions
PERMISSIONS: Dict[str, List[str]] = {
    "modules": ["read", "update"],
    "permissions": ["read", "update"],
    "templates": ["read", "create", "update", "delete"],
    "audit": ["read"],
    "plans": ["read", "create", "update", "delete"],
    "users": ["read", "create", "update"],
    "settings": ["read", "update"],
    "analytics": ["read"],
    "system": ["read", "update"],
}

# Default roles. Super-admins bypass grants, so no super_admin role is needed.
ROLES = [
    {
        "identifier": "admin",
        "name": "Administrator",
        "description": "Day-to-day administration of the platform",
        "permissions": [
            "modules:read", "modules:update", "settings:read", "settings:update",
            "users:read", "users:create", "users:update", "plans:read", "plans:update",
            "templates:read", "templates:create", "templates:update", "templates:delete",
            "audit:read",
        ],
    },
    {
        "identifier": "content_manager",
        "name": "Content Manager",
        "description": "Manages legal templates and content",
        "permissions": [
            "templates:read", "templates:create", "templates:update", "templates:delete",
            "settings:read", "modules:read",
        ],
    },
    {
        "identifier": "system_analyst",
        "name": "System Analyst",
        "description": "Reads configuration, reports and the audit trail",
        "permissions": ["settings:read", "modules:read", "analytics:read", "audit:read"],
    },
    {
        "identifier": "support",
        "name": "Technical Support",
        "description": "Support and maintenance",
        "permissions": ["settings:read", "modules:read", "audit:read", "users:read"],
    },
]

MODULES = [
    {"identifier": "processes", "name": "Legal Processes", "category": "core", "is_core": True},
    {"identifier": "documents", "name": "Documents", "category": "core", "is_core": True},
    {"identifier": "clients", "name": "Clients", "category": "core", "is_core": True},
    {"identifier": "calendar", "name": "Calendar", "category": "core", "is_core": True},
    {"identifier": "kanban", "name": "Kanban", "category": "productivity", "dependencies": ["processes"]},
    {"identifier": "legal_ai", "name": "Legal AI", "category": "ai", "dependencies": ["documents"]},
    {"identifier": "templates", "name": "Templates", "category": "documents", "dependencies": ["documents"]},
    {"identifier": "analytics", "name": "Analytics", "category": "reporting"},
    {"identifier": "compliance", "name": "Compliance", "category": "security"},
]


def seed_permissions(db: Session) -> Dict[str, Permission]:
    """Create the permission catalogue"""
    existing = {p.name: p for p in db.query(Permission).all()}
    for category, actions in PERMISSIONS.items():
        for action in actions:
            name = f"{category}:{action}"
            if name not in existing:
                existing[name] = Permission(name=name, category=category)
                db.add(existing[name])
    db.commit()
    print(f"  ✓ {len(existing)} permissions")
    return existing


def seed_roles(db: Session, permissions: Dict[str, Permission]) -> None:
    """Create default roles with their grants"""
    for role_def in ROLES:
        if db.query(Role).filter(Role.identifier == role_def["identifier"]).first():
            print(f"  - role {role_def['identifier']} exists, skipped")
            continue
        role = Role(identifier=role_def["identifier"], name=role_def["name"], description=role_def["description"])
        role.grants = [RolePermission(permission_id=permissions[name].id) for name in role_def["permissions"]]
        db.add(role)
        db.commit()
        print(f"  ✓ role {role_def['identifier']} ({len(role_def['permissions'])} permissions)")


def seed_modules(db: Session) -> None:
    """Create default legal modules"""
    for module_def in MODULES:
        if db.query(LegalModule).filter(LegalModule.identifier == module_def["identifier"]).first():
            continue
        db.add(LegalModule(**{"config": {}, "dependencies": [], **module_def}))
    db.commit()
    print(f"  ✓ {len(MODULES)} modules")


def seed_super_admin(db: Session) -> None:
    """Create the initial super-admin account"""
    email = os.getenv("SEED_ADMIN_EMAIL", "admin@lexiom.com")
    if db.query(AdminUser).filter(AdminUser.email == email).first():
        print(f"  - super-admin {email} exists, skipped")
        return

    password = os.getenv("SEED_ADMIN_PASSWORD")
    generated = password is None
    if generated:
        password = secrets.token_urlsafe(16)

    db.add(AdminUser(
        email=email,
        password_hash=hash_password(password),
        full_name="Super Administrator",
        is_super_admin=True,
    ))
    db.commit()

    print(f"  ✓ super-admin {email}")
    if generated:
        print(f"    generated password: {password}  (shown once, change it after first login)")


def main():
    """Main seeding function"""
    print("\n" + "=" * 60)
    print("Lexiom admin bootstrap")
    print("=" * 60 + "\n")

    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        permissions = seed_permissions(db)
        seed_roles(db, permissions)
        seed_modules(db)
        seed_super_admin(db)
    finally:
        db.close()

    print("\nDone.\n")


if __name__ == "__main__":
    main()
