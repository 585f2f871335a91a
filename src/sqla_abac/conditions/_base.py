"""Condition interface and ConditionRegistration metadata."""

from __future__ import annotations

import abc
from dataclasses import dataclass

from sqla_abac._types import ConditionValueType

__all__ = ["Condition", "ConditionRegistration"]


class Condition(abc.ABC):
    """A predicate over one resource attribute, the subject and a literal.

    Subclasses must be stateless; a single instance is shared by every
    check that evaluates the condition.
    """

    @abc.abstractmethod
    def validate(self, attribute: int | None, subject: str | None, literal: str) -> bool:
        """Return ``True`` if the condition holds.

        Args:
            attribute: The resource attribute value, ``None`` when absent.
            subject: The subject id as a string, ``None`` when anonymous.
            literal: The value stored with the condition.
        """

    @abc.abstractmethod
    def value_type(self) -> ConditionValueType:
        """Return the kind of literal this condition accepts."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


@dataclass(frozen=True, slots=True)
class ConditionRegistration:
    """A condition registered under the name stored in grant conditions.

    Attributes:
        name: The stored condition name (e.g. ``"isOwner"``).
        attribute: The resource attribute key passed to
            ``ResourceModel.get_attr``.
        condition: The validator.
        description: Human-readable description (used by explain).
    """

    name: str
    attribute: str
    condition: Condition
    description: str = ""
