"""Permission repository — read-only queries over stored grants."""

from sqla_abac.repository._grants import GrantLookup, PermissionRepository

__all__ = ["GrantLookup", "PermissionRepository"]
