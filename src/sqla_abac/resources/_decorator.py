"""@resource decorator — expose a mapped class to conditions."""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from sqla_abac.resources._base import MappedResourceProvider
from sqla_abac.resources._registry import ResourceRegistry, get_default_resource_registry

__all__ = ["resource"]

T = TypeVar("T", bound=type)


def resource(
    resource_type: str,
    *,
    registry: ResourceRegistry | None = None,
    **attributes: str,
) -> Callable[[T], T]:
    """Class decorator that registers a mapped class as a resource type.

    Keyword arguments map attribute keys to mapped attribute names.

    Example::

        @resource("organization", owner="owner_account_id")
        class Organization(Base):
            __tablename__ = "organizations"
            id: Mapped[int] = mapped_column(primary_key=True)
            owner_account_id: Mapped[int]
    """

    def decorator(cls: T) -> T:
        target = registry if registry is not None else get_default_resource_registry()
        target.register(resource_type, MappedResourceProvider(resource_type, cls, attributes))
        return cls

    return decorator
