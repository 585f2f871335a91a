"""Shared test fixtures for sqla-abac tests."""

from __future__ import annotations

from collections.abc import Iterable

import pytest
from sqlalchemy import Integer, String, create_engine, select
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

from sqla_abac._types import Action, ModelAttrib, ParsedPath
from sqla_abac.conditions._registry import ConditionRegistry
from sqla_abac.config._config import AuthzConfig
from sqla_abac.engine._engine import AuthorizationEngine
from sqla_abac.engine._request import AuthzRequest
from sqla_abac.resources._base import MappedResourceProvider
from sqla_abac.resources._registry import ResourceRegistry
from sqla_abac.storage._models import AuditLog, AuthzBase
from sqla_abac.testing._fixtures import isolated_authz_state  # noqa: F401
from sqla_abac.testing._seed import grant_permission
from sqla_abac.testing._writers import MemoryAuditWriter

# ---------------------------------------------------------------------------
# Application models the engine reads attributes from
# ---------------------------------------------------------------------------


class ResourceBase(DeclarativeBase):
    pass


class User(ResourceBase):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    account_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    name: Mapped[str] = mapped_column(String(100), default="")


class Organization(ResourceBase):
    __tablename__ = "organizations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    owner_account_id: Mapped[int] = mapped_column(Integer)
    name: Mapped[str] = mapped_column(String(100), default="")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def make_request(
    subject: int | None,
    controller: str | None,
    resource_id: str | None,
    method: str,
    *,
    remote_addr: str = "203.0.113.7",
    user_agent: str | None = "pytest-agent/1.0",
) -> AuthzRequest:
    """Build an AuthzRequest whose URI mirrors the parsed path."""
    parts = [p for p in (controller, resource_id) if p is not None]
    headers = {"User-Agent": user_agent} if user_agent is not None else {}
    return AuthzRequest(
        remote_addr=remote_addr,
        headers=headers,
        uri="https://api.example.com/" + "/".join(parts) + "?lang=en",
        subject=subject,
        path=ParsedPath(controller=controller, id=resource_id),
        method=method,
    )


class Seeder:
    """Writes fixture rows in short committed transactions."""

    def __init__(self, factory: sessionmaker) -> None:
        self._factory = factory

    def grant(
        self,
        subject: int | None,
        resource_type: str,
        action: Action | str,
        conditions: Iterable[tuple[str, str]] = (),
    ) -> int:
        with self._factory() as session:
            grant = grant_permission(
                session,
                subject=subject,
                resource_type=resource_type,
                action=action,
                conditions=conditions,
            )
            session.commit()
            return grant.id

    def add(self, *objects: object) -> None:
        with self._factory() as session:
            session.add_all(objects)
            session.commit()

    def audit_rows(self) -> list[AuditLog]:
        with self._factory() as session:
            return list(session.scalars(select(AuditLog).order_by(AuditLog.id)))


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def db_engine():
    """In-memory SQLite shared across threads, with all tables."""
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    AuthzBase.metadata.create_all(eng)
    ResourceBase.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(db_engine) -> sessionmaker:
    return sessionmaker(bind=db_engine, expire_on_commit=False)


@pytest.fixture()
def seed(session_factory) -> Seeder:
    return Seeder(session_factory)


@pytest.fixture()
def conditions() -> ConditionRegistry:
    return ConditionRegistry.with_builtins()


@pytest.fixture()
def resources() -> ResourceRegistry:
    registry = ResourceRegistry()
    registry.register(
        "user",
        MappedResourceProvider("user", User, {ModelAttrib.OWNER: "account_id"}),
    )
    registry.register(
        "organization",
        MappedResourceProvider(
            "organization", Organization, {ModelAttrib.OWNER: "owner_account_id"}
        ),
    )
    return registry


@pytest.fixture()
def memory_audit() -> MemoryAuditWriter:
    return MemoryAuditWriter()


@pytest.fixture()
def engine(session_factory, conditions, resources, memory_audit) -> AuthorizationEngine:
    """Engine wired to the in-memory database with default config."""
    return AuthorizationEngine(
        session_factory,
        conditions=conditions,
        resources=resources,
        audit_writer=memory_audit,
        config=AuthzConfig(),
    )
