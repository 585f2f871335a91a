"""Built-in conditions: Owner, Login, and function-backed conditions."""

from __future__ import annotations

from collections.abc import Callable

from sqla_abac._types import ConditionValueType
from sqla_abac.conditions._base import Condition

__all__ = ["FunctionCondition", "Login", "Owner"]


class Owner(Condition):
    """Subject owns (``"true"``) or does not own (``"false"``) the resource.

    The attribute is the owning account id.  An anonymous subject never
    satisfies the condition.  A literal other than ``"true"``/``"false"``
    passes; the engine rejects such literals before they reach the
    validator unless ``on_unrecognized_value="allow"``.

    Example::

        Owner().validate(7, "7", "true")     # True
        Owner().validate(None, "7", "false")  # True
    """

    def validate(self, attribute: int | None, subject: str | None, literal: str) -> bool:
        if subject is None:
            return False
        if literal == "true":
            return attribute is not None and str(attribute) == subject
        if literal == "false":
            return attribute is None or str(attribute) != subject
        return True

    def value_type(self) -> ConditionValueType:
        return ConditionValueType.BOOLEAN


class Login(Condition):
    """Subject is authenticated; attribute and literal are ignored."""

    def validate(self, attribute: int | None, subject: str | None, literal: str) -> bool:
        return subject is not None

    def value_type(self) -> ConditionValueType:
        return ConditionValueType.BOOLEAN


class FunctionCondition(Condition):
    """Adapts a plain function into a :class:`Condition`.

    Created by the :func:`~sqla_abac.conditions.condition` decorator.
    """

    def __init__(
        self,
        fn: Callable[[int | None, str | None, str], bool],
        *,
        value_type: ConditionValueType = ConditionValueType.BOOLEAN,
    ) -> None:
        self._fn = fn
        self._value_type = value_type

    def validate(self, attribute: int | None, subject: str | None, literal: str) -> bool:
        return bool(self._fn(attribute, subject, literal))

    def value_type(self) -> ConditionValueType:
        return self._value_type

    def __repr__(self) -> str:
        return f"FunctionCondition({getattr(self._fn, '__name__', '<lambda>')!r})"
