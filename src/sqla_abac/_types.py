"""Shared enums, value types and type aliases for sqla-abac."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Literal

from sqla_abac.exceptions import UnsupportedConditionValue

__all__ = [
    "Action",
    "ConditionValueType",
    "ModelAttrib",
    "OnUnknownCondition",
    "OnUnrecognizedValue",
    "ParsedPath",
    "SubjectId",
]

# Authenticated actor identity; ``None`` for anonymous requests.
SubjectId = int | None

# Valid values for AuthzConfig.on_unknown_condition.
OnUnknownCondition = Literal["deny", "skip"]

# Valid values for AuthzConfig.on_unrecognized_value.
OnUnrecognizedValue = Literal["deny", "allow"]


class Action(enum.Enum):
    """Requested action, derived from the request shape.

    The value is the string stored in ``Grant.action``.
    """

    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    VIEW = "view"


class ConditionValueType(enum.Enum):
    """Kind of literal a condition accepts."""

    BOOLEAN = "boolean"

    @classmethod
    def parse(cls, literal: str) -> ConditionValueType:
        """Return the value type *literal* belongs to.

        Raises:
            UnsupportedConditionValue: If *literal* is not a recognized
                value of any type.

        Example::

            ConditionValueType.parse("true")   # ConditionValueType.BOOLEAN
            ConditionValueType.parse("maybe")  # raises
        """
        if literal in ("true", "false"):
            return cls.BOOLEAN
        raise UnsupportedConditionValue(value=literal)

    def accepts(self, literal: str) -> bool:
        """Return ``True`` if *literal* parses as a value of this type."""
        try:
            return ConditionValueType.parse(literal) is self
        except UnsupportedConditionValue:
            return False


class ModelAttrib(str, enum.Enum):
    """Resource attributes the built-in conditions read.

    Members compare equal to their string value, so resource providers
    may key attribute mappings by either form.  Condition names map onto
    attributes through :class:`~sqla_abac.ConditionRegistry`.
    """

    OWNER = "owner"
    LOGIN = "login"


@dataclass(frozen=True, slots=True)
class ParsedPath:
    """Resource type and instance id extracted by the routing layer.

    Attributes:
        controller: The resource-type name (``"organization"``), if any.
        id: The resource-instance identifier as it appeared in the path.

    Example::

        ParsedPath(controller="organization", id="17")
    """

    controller: str | None = None
    id: str | None = None
