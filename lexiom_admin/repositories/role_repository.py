"""Repository for roles, permissions and grants."""
from typing import Iterable, List, Optional, Set

from sqlalchemy import select
from sqlalchemy.orm import Session

from lexiom_admin.models.role import Permission, Role, RolePermission


class RoleRepository:
    """Data access layer for RBAC state."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def granted_permissions(self, role_id: Optional[str]) -> Set[str]:
        """Current granted permission names for a role.

        No role, an inactive role, or a role without grant rows all resolve to
        the empty set. Always reads the store; nothing is cached.
        """
        if not role_id:
            return set()

        rows = self.db.execute(
            select(Permission.name)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .join(Role, Role.id == RolePermission.role_id)
            .where(
                RolePermission.role_id == role_id,
                RolePermission.granted.is_(True),
                Role.is_active.is_(True),
            )
        ).scalars()
        return set(rows)

    def list_roles(self) -> List[Role]:
        return list(self.db.execute(select(Role).order_by(Role.name)).scalars())

    def get(self, role_id: str) -> Optional[Role]:
        return self.db.get(Role, role_id)

    def get_by_identifier(self, identifier: str) -> Optional[Role]:
        return self.db.execute(select(Role).where(Role.identifier == identifier)).scalar_one_or_none()

    def list_permissions(self) -> List[Permission]:
        return list(
            self.db.execute(select(Permission).order_by(Permission.category, Permission.name)).scalars()
        )

    def get_permissions_by_name(self, names: Iterable[str]) -> List[Permission]:
        names = set(names)
        if not names:
            return []
        return list(self.db.execute(select(Permission).where(Permission.name.in_(names))).scalars())

    def create(self, role: Role) -> Role:
        self.db.add(role)
        self.db.commit()
        self.db.refresh(role)
        return role

    def replace_grants(self, role: Role, permissions: List[Permission]) -> None:
        """Make ``permissions`` the complete granted set of ``role``."""
        role.grants.clear()
        self.db.flush()
        for permission in permissions:
            role.grants.append(RolePermission(permission_id=permission.id, granted=True))
        self.db.commit()
        self.db.refresh(role)

    def delete(self, role: Role) -> None:
        self.db.delete(role)
        self.db.commit()
