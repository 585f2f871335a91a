"""Mapped tables read (grants, conditions) and written (audit) by the engine.

Grants and conditions are created by an external administrative path;
the engine never writes them.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

__all__ = ["AuditLog", "AuthzBase", "Grant", "GrantCondition"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuthzBase(DeclarativeBase):
    """Declarative base holding the sqla-abac tables.

    Create them alongside application tables with
    ``AuthzBase.metadata.create_all(engine)``.
    """


class Grant(AuthzBase):
    """Permission for a subject to perform an action on a resource type.

    A NULL ``subject`` applies to every requester, anonymous included.
    """

    __tablename__ = "authz_grants"
    __table_args__ = (Index("ix_authz_grants_lookup", "resource_type", "action", "subject"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    subject: Mapped[int | None] = mapped_column(Integer, nullable=True)
    resource_type: Mapped[str] = mapped_column(String(100))
    action: Mapped[str] = mapped_column(String(20))

    conditions: Mapped[list[GrantCondition]] = relationship(
        "GrantCondition",
        back_populates="grant",
        order_by="GrantCondition.id",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return (
            f"Grant(id={self.id!r}, subject={self.subject!r}, "
            f"resource_type={self.resource_type!r}, action={self.action!r})"
        )


class GrantCondition(AuthzBase):
    """Named condition attached to a grant, with its literal value."""

    __tablename__ = "authz_grant_conditions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    grant_id: Mapped[int] = mapped_column(
        ForeignKey("authz_grants.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(100))
    value: Mapped[str] = mapped_column(String(100))

    grant: Mapped[Grant] = relationship("Grant", back_populates="conditions")

    def __repr__(self) -> str:
        return f"GrantCondition(name={self.name!r}, value={self.value!r})"


class AuditLog(AuthzBase):
    """One denied authorization check."""

    __tablename__ = "authz_audit_log"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    code: Mapped[str] = mapped_column(String(64))
    subject: Mapped[int | None] = mapped_column(Integer, nullable=True)
    request_url: Mapped[str] = mapped_column(Text)
    request_path: Mapped[str] = mapped_column(Text)
    remote_addr: Mapped[str] = mapped_column(String(64))
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
