"""sqla-abac — Attribute-based authorization for SQLAlchemy applications.

Grants stored in the database say which subject may perform which action
on which resource type.  Conditions attached to a grant are evaluated
against the live resource instance (e.g. "only the organization's owner
may delete it").

Example::

    from sqla_abac import AuthorizationEngine, ParsedPath, resource

    @resource("organization", owner="owner_account_id")
    class Organization(Base):
        ...

    engine = AuthorizationEngine(SessionLocal)
    engine.check(
        remote_addr, headers, uri, account_id,
        ParsedPath("organization", "17"), "DELETE",
    )  # raises PermissionDenied unless allowed
"""

from importlib.metadata import PackageNotFoundError, version

from sqla_abac._action import resolve_action
from sqla_abac._audit import AuditRecord, AuditWriter, SQLAlchemyAuditWriter
from sqla_abac._types import Action, ConditionValueType, ModelAttrib, ParsedPath
from sqla_abac.conditions import (
    Condition,
    ConditionRegistry,
    Login,
    Owner,
    condition,
)
from sqla_abac.config._config import AuthzConfig, configure
from sqla_abac.engine import AuthorizationEngine, AuthzRequest
from sqla_abac.exceptions import (
    AuditWriteError,
    AuthzError,
    InvalidRequestShape,
    PermissionDenied,
    StorageUnavailable,
    UnknownConditionName,
    UnsupportedConditionValue,
    UnsupportedResourceType,
)
from sqla_abac.explain import explain_check
from sqla_abac.repository import GrantLookup, PermissionRepository
from sqla_abac.resources import (
    MappedResourceProvider,
    ResourceModel,
    ResourceProvider,
    ResourceRegistry,
    resource,
)
from sqla_abac.storage import AuthzBase, Grant, GrantCondition, make_storage_engine

try:
    __version__ = version("sqla-abac")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = [
    "__version__",
    "Action",
    "AuditRecord",
    "AuditWriteError",
    "AuditWriter",
    "AuthorizationEngine",
    "AuthzBase",
    "AuthzConfig",
    "AuthzError",
    "AuthzRequest",
    "Condition",
    "ConditionRegistry",
    "ConditionValueType",
    "Grant",
    "GrantCondition",
    "GrantLookup",
    "InvalidRequestShape",
    "Login",
    "MappedResourceProvider",
    "ModelAttrib",
    "Owner",
    "ParsedPath",
    "PermissionDenied",
    "PermissionRepository",
    "ResourceModel",
    "ResourceProvider",
    "ResourceRegistry",
    "SQLAlchemyAuditWriter",
    "StorageUnavailable",
    "UnknownConditionName",
    "UnsupportedConditionValue",
    "UnsupportedResourceType",
    "condition",
    "configure",
    "explain_check",
    "make_storage_engine",
    "resolve_action",
    "resource",
]
