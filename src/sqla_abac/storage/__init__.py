"""Storage schema and connection helpers for grants, conditions and audit."""

from sqla_abac.storage._engine import make_session_factory, make_storage_engine
from sqla_abac.storage._models import AuditLog, AuthzBase, Grant, GrantCondition

__all__ = [
    "AuditLog",
    "AuthzBase",
    "Grant",
    "GrantCondition",
    "make_session_factory",
    "make_storage_engine",
]
