"""ResourceModel and the providers that build it."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import DataError, InvalidRequestError
from sqlalchemy.orm import Session

from sqla_abac.exceptions import InvalidRequestShape

__all__ = ["MappedResourceProvider", "ResourceModel", "ResourceProvider"]

# Signed 64-bit range shared by BIGINT columns and the SQLite INTEGER type.
_BIGINT_MIN = -(2**63)
_BIGINT_MAX = 2**63 - 1


@dataclass(frozen=True, slots=True)
class ResourceModel:
    """Attribute snapshot of one resource instance, built per check.

    Attributes:
        resource_type: The resource type tag (``"organization"``).
        resource_id: The primary key the instance was loaded by.
        attributes: Attribute key -> value.  Keys with no value, and keys
            the provider does not map, read as absent.
        found: ``False`` if no row exists for ``resource_id``.

    Example::

        model = ResourceModel("organization", 17, {"owner": 42})
        model.get_attr(ModelAttrib.OWNER)  # 42
        model.get_attr(ModelAttrib.LOGIN)  # None
    """

    resource_type: str
    resource_id: Any
    attributes: Mapping[str, int | None] = field(default_factory=dict)
    found: bool = True

    def get_attr(self, attrib: str) -> int | None:
        """Return the value of *attrib*, or ``None`` if absent."""
        return self.attributes.get(getattr(attrib, "value", attrib))


@runtime_checkable
class ResourceProvider(Protocol):
    """Loads one instance of a resource type and exposes its attributes.

    Any object with a matching ``load`` method satisfies this protocol.
    """

    def load(self, session: Session, resource_id: str) -> ResourceModel: ...


class MappedResourceProvider:
    """Provider backed by a SQLAlchemy mapped class.

    Loads the row with ``session.get`` and reads each mapped attribute
    from the instance.  The id from the request path is coerced to the
    primary key's Python type first.

    Args:
        resource_type: The resource type tag.
        model: A mapped class with a single-column primary key.
        attributes: Attribute key -> mapped attribute name on *model*.

    Example::

        provider = MappedResourceProvider(
            "organization", Organization, {"owner": "owner_account_id"}
        )
        model = provider.load(session, "17")
    """

    def __init__(
        self,
        resource_type: str,
        model: type,
        attributes: Mapping[str, str],
    ) -> None:
        mapper = sa_inspect(model)
        if len(mapper.primary_key) != 1:
            raise ValueError(
                f"{model.__name__} must have a single-column primary key to be "
                f"used as a resource"
            )
        for attr_name in attributes.values():
            try:
                mapper.get_property(attr_name)
            except InvalidRequestError:
                raise ValueError(
                    f"{model.__name__} has no mapped attribute {attr_name!r}"
                ) from None
        self.resource_type = resource_type
        self.model = model
        self.attributes = {str(getattr(k, "value", k)): v for k, v in attributes.items()}
        try:
            self._pk_type: type | None = mapper.primary_key[0].type.python_type
        except NotImplementedError:
            self._pk_type = None

    def _invalid_id(self, resource_id: str) -> InvalidRequestShape:
        return InvalidRequestShape(
            f"Resource id {resource_id!r} is not a valid {self.resource_type} id"
        )

    def _coerce_id(self, resource_id: str) -> Any:
        if self._pk_type is None or isinstance(resource_id, self._pk_type):
            return resource_id
        try:
            pk = self._pk_type(resource_id)
        except (TypeError, ValueError):
            raise self._invalid_id(resource_id) from None
        # One spelling per row: "017", " 17 " and "1_7" are rejected.
        if str(pk) != resource_id:
            raise self._invalid_id(resource_id)
        if self._pk_type is int and not _BIGINT_MIN <= pk <= _BIGINT_MAX:
            raise self._invalid_id(resource_id)
        return pk

    def load(self, session: Session, resource_id: str) -> ResourceModel:
        pk = self._coerce_id(resource_id)
        try:
            instance = session.get(self.model, pk)
        except (OverflowError, DataError):
            raise self._invalid_id(resource_id) from None
        if instance is None:
            return ResourceModel(
                resource_type=self.resource_type,
                resource_id=pk,
                attributes={},
                found=False,
            )
        return ResourceModel(
            resource_type=self.resource_type,
            resource_id=pk,
            attributes={key: getattr(instance, name) for key, name in self.attributes.items()},
        )

    def __repr__(self) -> str:
        return f"MappedResourceProvider({self.resource_type!r}, {self.model.__name__})"
