"""ResourceRegistry — resource type tag -> attribute provider."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy.orm import Session

from sqla_abac.exceptions import UnsupportedResourceType
from sqla_abac.resources._base import ResourceModel, ResourceProvider

__all__ = ["ResourceRegistry", "get_default_resource_registry"]


class ResourceRegistry:
    """Closed mapping from resource type tags to providers.

    Built at application startup.  Adding a resource type means
    registering a provider; the engine itself never changes.

    Example::

        registry = ResourceRegistry()
        registry.register(
            "user", MappedResourceProvider("user", User, {"owner": "account_id"})
        )
        registry.validate(["user"])
    """

    def __init__(self) -> None:
        self._providers: dict[str, ResourceProvider] = {}

    def register(self, resource_type: str, provider: ResourceProvider) -> None:
        """Register *provider* for *resource_type*.

        Raises:
            ValueError: If the tag is already registered.
            TypeError: If *provider* does not satisfy ``ResourceProvider``.
        """
        if resource_type in self._providers:
            raise ValueError(f"Resource type {resource_type!r} is already registered")
        if not isinstance(provider, ResourceProvider):
            raise TypeError(f"{provider!r} does not implement ResourceProvider.load()")
        self._providers[resource_type] = provider

    def lookup(self, resource_type: str) -> ResourceProvider:
        """Return the provider for *resource_type*.

        Raises:
            UnsupportedResourceType: If no provider is registered.
        """
        try:
            return self._providers[resource_type]
        except KeyError:
            raise UnsupportedResourceType(resource_types=[resource_type]) from None

    def get_model(self, session: Session, resource_type: str, resource_id: str) -> ResourceModel:
        """Load one resource instance through its provider."""
        return self.lookup(resource_type).load(session, resource_id)

    def has_resource(self, resource_type: str) -> bool:
        """Check whether *resource_type* has a provider."""
        return resource_type in self._providers

    def resource_types(self) -> set[str]:
        """Return every registered tag."""
        return set(self._providers)

    def validate(self, resource_types: Iterable[str]) -> None:
        """Fail fast if any of *resource_types* has no provider.

        Call at startup with every resource type grants may name, e.g.
        ``SELECT DISTINCT resource_type FROM authz_grants``.

        Raises:
            UnsupportedResourceType: Listing every missing tag.
        """
        missing = {t for t in resource_types if t not in self._providers}
        if missing:
            raise UnsupportedResourceType(resource_types=missing)

    def clear(self) -> None:
        """Remove all providers."""
        self._providers.clear()


# Module-level default registry (singleton).
_default_registry = ResourceRegistry()


def get_default_resource_registry() -> ResourceRegistry:
    """Return the global default resource registry used by ``@resource``."""
    return _default_registry
