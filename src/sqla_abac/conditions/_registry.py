"""ConditionRegistry — maps stored condition names to validators."""

from __future__ import annotations

from sqla_abac._types import ModelAttrib
from sqla_abac.conditions._base import Condition, ConditionRegistration
from sqla_abac.conditions._builtin import Login, Owner
from sqla_abac.exceptions import UnknownConditionName

__all__ = ["ConditionRegistry", "get_default_condition_registry"]


class ConditionRegistry:
    """Registry of condition names recognized by the engine.

    Thread-safe for reads after startup.  A name not present in the
    registry is an unknown condition and fails closed at check time.

    Example::

        registry = ConditionRegistry.with_builtins()
        registry.register("isAuthor", Owner(), attribute="author")
        registration = registry.resolve("isAuthor")
    """

    def __init__(self) -> None:
        self._conditions: dict[str, ConditionRegistration] = {}

    @classmethod
    def with_builtins(cls) -> ConditionRegistry:
        """Return a registry holding ``isOwner`` and ``isLoggedIn``."""
        registry = cls()
        registry.register(
            "isOwner",
            Owner(),
            attribute=ModelAttrib.OWNER,
            description="Subject owns the resource",
        )
        registry.register(
            "isLoggedIn",
            Login(),
            attribute=ModelAttrib.LOGIN,
            description="Subject is authenticated",
        )
        return registry

    def register(
        self,
        name: str,
        condition: Condition,
        *,
        attribute: str,
        description: str = "",
    ) -> None:
        """Register *condition* under *name*, reading *attribute*.

        Raises:
            ValueError: If *name* is already registered.
        """
        if name in self._conditions:
            raise ValueError(f"Condition {name!r} is already registered")
        self._conditions[name] = ConditionRegistration(
            name=name,
            attribute=str(getattr(attribute, "value", attribute)),
            condition=condition,
            description=description,
        )

    def resolve(self, name: str) -> ConditionRegistration:
        """Return the registration for *name*.

        Raises:
            UnknownConditionName: If *name* is not registered.
        """
        try:
            return self._conditions[name]
        except KeyError:
            raise UnknownConditionName(name=name) from None

    def has_condition(self, name: str) -> bool:
        """Check whether *name* is registered."""
        return name in self._conditions

    def names(self) -> list[str]:
        """Return the registered names in registration order."""
        return list(self._conditions)

    def clear(self) -> None:
        """Remove all registrations (built-ins included)."""
        self._conditions.clear()


# Module-level default registry (singleton), pre-loaded with the built-ins.
_default_registry = ConditionRegistry.with_builtins()


def get_default_condition_registry() -> ConditionRegistry:
    """Return the global default condition registry.

    Used by ``@condition`` and by engines created without an explicit
    registry.
    """
    return _default_registry
