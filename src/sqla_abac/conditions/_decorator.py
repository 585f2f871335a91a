"""@condition decorator — register function-backed conditions."""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from sqla_abac._types import ConditionValueType
from sqla_abac.conditions._builtin import FunctionCondition
from sqla_abac.conditions._registry import ConditionRegistry, get_default_condition_registry

__all__ = ["condition"]

F = TypeVar("F", bound=Callable[[int | None, str | None, str], bool])


def condition(
    name: str,
    *,
    attribute: str,
    value_type: ConditionValueType = ConditionValueType.BOOLEAN,
    registry: ConditionRegistry | None = None,
) -> Callable[[F], F]:
    """Decorator that registers a validator function under *name*.

    The decorated function receives ``(attribute, subject, literal)`` and
    returns a bool.  It is returned unchanged.

    Args:
        name: The condition name stored alongside grants.
        attribute: The resource attribute key the condition reads.
        value_type: The kind of literal the condition accepts.
        registry: Optional custom registry.  Defaults to the global one.

    Example::

        @condition("isMember", attribute="org")
        def is_member(attribute, subject, literal):
            return subject is not None and attribute is not None
    """

    def decorator(fn: F) -> F:
        target = registry if registry is not None else get_default_condition_registry()
        target.register(
            name,
            FunctionCondition(fn, value_type=value_type),
            attribute=attribute,
            description=fn.__doc__ or "",
        )
        return fn

    return decorator
