"""Exception hierarchy for sqla-abac.

Every exception carries a structured ``code`` and a ``status_code`` hint
that callers can map onto an HTTP response.
"""

from __future__ import annotations

from collections.abc import Iterable

__all__ = [
    "AuditWriteError",
    "AuthzError",
    "InvalidRequestShape",
    "PermissionDenied",
    "StorageUnavailable",
    "UnknownConditionName",
    "UnsupportedConditionValue",
    "UnsupportedResourceType",
]


class AuthzError(Exception):
    """Base exception for all sqla-abac errors."""

    code: str = "AUTHZ_ERROR"
    status_code: int = 403


class PermissionDenied(AuthzError):  # noqa: N818
    """The subject may not perform the requested action.

    The message deliberately carries no diagnostic detail; the reason the
    engine reached this outcome is available on ``__cause__`` (when the
    denial was triggered by another fault) and in the audit record.

    Attributes:
        subject: The subject that was denied (``None`` if anonymous).
        action: The resolved action string.
        resource_type: The resource type named by the request.

    Example::

        try:
            engine.check(...)
        except PermissionDenied as exc:
            return JSONResponse({"code": exc.code}, status_code=exc.status_code)
    """

    code = "AUTHZ_PERMISSION_DENIED"

    def __init__(
        self,
        *,
        subject: object = None,
        action: str = "",
        resource_type: str = "",
        message: str | None = None,
    ) -> None:
        self.subject = subject
        self.action = action
        self.resource_type = resource_type
        super().__init__(message or "Permission denied")


class InvalidRequestShape(AuthzError):
    """The request lacks a component its action requires.

    Raised when the controller is missing, or when the resource id
    cannot be coerced to the resource's primary key type.
    """

    code = "AUTHZ_INVALID_REQUEST"


class UnknownConditionName(AuthzError):
    """A stored condition name is not registered.

    Attributes:
        name: The unrecognized condition name.
    """

    code = "MODEL_ATTRIBUTE_NOT_DEFINED"

    def __init__(self, *, name: str) -> None:
        self.name = name
        super().__init__(f"Condition {name!r} is not defined")


class UnsupportedConditionValue(AuthzError):
    """A stored condition literal is outside the condition's value type.

    Attributes:
        value: The unrecognized literal.
    """

    code = "AUTHZ_CONDITION_VALUE_NOT_DEFINED"

    def __init__(self, *, value: str, condition: str | None = None) -> None:
        self.value = value
        self.condition = condition
        target = f" for condition {condition!r}" if condition else ""
        super().__init__(f"Condition value {value!r} is not defined{target}")


class UnsupportedResourceType(AuthzError):
    """No attribute provider is registered for a resource type.

    This is a configuration fault; :meth:`ResourceRegistry.validate`
    reports it at startup.

    Attributes:
        resource_types: The unregistered resource type tags.
    """

    code = "AUTHZ_RESOURCE_TYPE_NOT_SUPPORTED"
    status_code = 500

    def __init__(self, *, resource_types: Iterable[str]) -> None:
        self.resource_types = tuple(sorted(resource_types))
        names = ", ".join(repr(t) for t in self.resource_types)
        super().__init__(f"No resource provider registered for {names}")


class StorageUnavailable(AuthzError):
    """Grant, condition or resource storage could not be read.

    Always a backend fault, never an ordinary denial.
    """

    code = "AUTHZ_STORAGE_UNAVAILABLE"
    status_code = 503


class AuditWriteError(AuthzError):
    """An audit record could not be persisted."""

    code = "AUTHZ_AUDIT_WRITE_FAILED"
    status_code = 500
