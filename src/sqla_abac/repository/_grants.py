"""PermissionRepository — grant and condition lookup."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import ColumnElement, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sqla_abac._types import Action
from sqla_abac.exceptions import StorageUnavailable
from sqla_abac.storage._models import Grant, GrantCondition

__all__ = ["GrantLookup", "PermissionRepository"]


@dataclass(frozen=True, slots=True)
class GrantLookup:
    """Grants matching one (subject, resource type, action) request.

    Attributes:
        grant_ids: Ids of every matching grant.
        conditions: ``(name, literal)`` pairs across all matching grants,
            ordered by grant id then condition id.
    """

    grant_ids: frozenset[int]
    conditions: tuple[tuple[str, str], ...]

    @property
    def granted(self) -> bool:
        """``True`` if at least one grant matched."""
        return bool(self.grant_ids)


def _subject_filter(subject: int | None) -> ColumnElement[bool]:
    # NULL-subject grants apply to everyone, anonymous requesters included.
    if subject is None:
        return Grant.subject.is_(None)
    return or_(Grant.subject == subject, Grant.subject.is_(None))


class PermissionRepository:
    """Read-only query surface over ``authz_grants`` and their conditions.

    Example::

        repo = PermissionRepository()
        with session_factory() as session:
            lookup = repo.find_grants(session, 42, "organization", Action.DELETE)
    """

    def find_grants(
        self,
        session: Session,
        subject: int | None,
        resource_type: str,
        action: Action | str,
    ) -> GrantLookup:
        """Return matching grant ids and the union of their conditions.

        Raises:
            StorageUnavailable: If either query fails, including when no
                pooled connection becomes free in time.
        """
        action_name = action.value if isinstance(action, Action) else action
        criteria = (
            Grant.resource_type == resource_type,
            Grant.action == action_name,
            _subject_filter(subject),
        )
        grants_stmt = select(Grant.id).where(*criteria)
        conditions_stmt = (
            select(GrantCondition.name, GrantCondition.value)
            .join(Grant, GrantCondition.grant_id == Grant.id)
            .where(*criteria)
            .order_by(Grant.id, GrantCondition.id)
        )
        try:
            grant_ids = frozenset(session.scalars(grants_stmt).all())
            rows = session.execute(conditions_stmt).all()
        except SQLAlchemyError as exc:
            raise StorageUnavailable("Permission storage is unavailable") from exc
        return GrantLookup(
            grant_ids=grant_ids,
            conditions=tuple((name, value) for name, value in rows),
        )
