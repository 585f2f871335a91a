"""Audit records for denied checks, plus decision logging."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sqla_abac.exceptions import AuditWriteError
from sqla_abac.storage._models import AuditLog

__all__ = [
    "AuditRecord",
    "AuditWriter",
    "SQLAlchemyAuditWriter",
    "log_audit_failure",
    "log_decision",
    "log_grant_lookup",
]

logger = logging.getLogger("sqla_abac")
audit_logger = logging.getLogger("sqla_abac.audit")


@dataclass(frozen=True, slots=True)
class AuditRecord:
    """A denied request, as written to the audit log.

    Attributes:
        request_url: The full request URI.
        request_path: The path component of the URI.
        remote_addr: The client address.
        user_agent: The ``User-Agent`` header, if sent.
        code: The fault code that caused the denial.
        subject: The requesting subject, ``None`` if anonymous.
    """

    request_url: str
    request_path: str
    remote_addr: str
    user_agent: str | None
    code: str
    subject: int | None = None


@runtime_checkable
class AuditWriter(Protocol):
    """Persists audit records.

    Implementations raise :class:`~sqla_abac.exceptions.AuditWriteError`
    when a record cannot be stored.
    """

    def write(self, record: AuditRecord) -> None: ...


class SQLAlchemyAuditWriter:
    """Inserts audit records into ``authz_audit_log``.

    Each record is written in its own short transaction, independent of
    the session the check read grants with.

    Example::

        writer = SQLAlchemyAuditWriter(session_factory)
        writer.write(record)
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def write(self, record: AuditRecord) -> None:
        try:
            with self._session_factory() as session, session.begin():
                session.add(
                    AuditLog(
                        code=record.code,
                        subject=record.subject,
                        request_url=record.request_url,
                        request_path=record.request_path,
                        remote_addr=record.remote_addr,
                        user_agent=record.user_agent,
                    )
                )
        except SQLAlchemyError as exc:
            raise AuditWriteError("Could not write audit record") from exc


def log_decision(
    *,
    subject: int | None,
    action: str,
    resource_type: str | None,
    allowed: bool,
    code: str | None = None,
) -> None:
    """Log an authorization decision.

    Logged at INFO; see :func:`log_grant_lookup` for DEBUG detail.

    Example::

        log_decision(
            subject=42,
            action="delete",
            resource_type="organization",
            allowed=False,
            code="AUTHZ_PERMISSION_DENIED",
        )
    """
    verdict = "allow" if allowed else f"deny ({code})"
    logger.info(
        "Authorization decision: subject=%r %s %s -> %s",
        subject,
        action,
        resource_type,
        verdict,
    )


def log_grant_lookup(
    *,
    resource_type: str,
    action: str,
    grant_ids: frozenset[int],
    conditions: tuple[tuple[str, str], ...],
) -> None:
    """Log the grants and conditions a check matched, at DEBUG."""
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "Grants matched for %s.%s: %s, conditions=%s",
            resource_type,
            action,
            sorted(grant_ids),
            list(conditions),
        )


def log_audit_failure(record: AuditRecord, exc: BaseException) -> None:
    """Log a failed audit write at ERROR; the denial itself stands."""
    audit_logger.error(
        "AUDIT_WRITE_FAILED code=%s subject=%r path=%s remote=%s: %s",
        record.code,
        record.subject,
        record.request_path,
        record.remote_addr,
        exc,
        exc_info=exc,
    )
