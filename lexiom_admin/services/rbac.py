"""Role-based permission resolution"""
from typing import AbstractSet, Optional

from lexiom_admin.repositories.role_repository import RoleRepository


def is_authorized(is_super_admin: bool, granted: AbstractSet[str], required: AbstractSet[str]) -> bool:
    """Allow/deny decision for one request.

    - super-admins bypass every check
    - an empty ``required`` set means "any authenticated admin"
    - otherwise any one of the required permissions is enough
    """
    if is_super_admin:
        return True
    if not required:
        return True
    return not granted.isdisjoint(required)


def authorize(
    roles: RoleRepository,
    role_id: Optional[str],
    is_super_admin: bool,
    required: AbstractSet[str],
) -> bool:
    """Resolve the role's current grants and decide.

    Grants are read fresh on every call so a grant change is visible on the
    very next request.
    """
    if is_super_admin or not required:
        return True
    return is_authorized(False, roles.granted_permissions(role_id), required)
