"""Resource attribute providers — load resource instances for conditions."""

from sqla_abac.resources._base import MappedResourceProvider, ResourceModel, ResourceProvider
from sqla_abac.resources._decorator import resource
from sqla_abac.resources._registry import ResourceRegistry, get_default_resource_registry

__all__ = [
    "MappedResourceProvider",
    "ResourceModel",
    "ResourceProvider",
    "ResourceRegistry",
    "get_default_resource_registry",
    "resource",
]
