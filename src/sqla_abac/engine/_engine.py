"""AuthorizationEngine — grant lookup plus attribute-based conditions."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from concurrent.futures import Executor

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sqla_abac._action import resolve_action
from sqla_abac._audit import (
    AuditRecord,
    AuditWriter,
    SQLAlchemyAuditWriter,
    log_audit_failure,
    log_decision,
    log_grant_lookup,
)
from sqla_abac._types import Action, ParsedPath
from sqla_abac.conditions._registry import ConditionRegistry, get_default_condition_registry
from sqla_abac.config._config import AuthzConfig, get_global_config
from sqla_abac.engine._request import AuthzRequest
from sqla_abac.exceptions import (
    AuthzError,
    InvalidRequestShape,
    PermissionDenied,
    StorageUnavailable,
    UnknownConditionName,
    UnsupportedConditionValue,
    UnsupportedResourceType,
)
from sqla_abac.repository._grants import PermissionRepository
from sqla_abac.resources._base import ResourceModel
from sqla_abac.resources._registry import ResourceRegistry, get_default_resource_registry

__all__ = ["AuthorizationEngine", "denial_code"]

logger = logging.getLogger("sqla_abac.engine")

AuditFailureHandler = Callable[[AuditRecord, Exception], None]


def denial_code(denial: AuthzError) -> str:
    """Return the fault code that explains *denial*.

    A ``PermissionDenied`` raised because of another fault reports that
    fault's code (e.g. ``MODEL_ATTRIBUTE_NOT_DEFINED``).
    """
    cause = denial.__cause__
    if isinstance(cause, AuthzError):
        return cause.code
    return denial.code


class AuthorizationEngine:
    """Decides whether a subject may act on a resource instance.

    A check resolves the action from the request shape, looks up grants
    for (subject, resource type, action), and, when the matching grants
    carry conditions, evaluates them in order against the live resource
    until one holds.  Every denial writes one audit record; allowed
    requests write none.

    Each check acquires one session from *session_factory* and releases
    it on every exit path.  Engines hold no per-check state and may be
    shared between threads.

    Args:
        session_factory: Callable returning a new ``Session``, typically a
            ``sessionmaker``.
        conditions: Condition registry.  Defaults to the global registry.
        resources: Resource registry.  Defaults to the global registry.
        repository: Grant repository.
        audit_writer: Where denial records go.  Defaults to
            :class:`~sqla_abac.SQLAlchemyAuditWriter` on *session_factory*.
        config: Engine configuration.  Defaults to the global config,
            read on every check.
        on_audit_failure: Called with the record and error when an audit
            write fails.  The denial is raised regardless.
        executor: Worker pool for :meth:`acheck`.  Defaults to the event
            loop's default executor.

    Example::

        engine = AuthorizationEngine(SessionLocal, resources=resources)
        engine.check(
            "10.0.0.5",
            {"User-Agent": "curl/8.0"},
            "/organization/17",
            42,
            ParsedPath("organization", "17"),
            "DELETE",
        )
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        conditions: ConditionRegistry | None = None,
        resources: ResourceRegistry | None = None,
        repository: PermissionRepository | None = None,
        audit_writer: AuditWriter | None = None,
        config: AuthzConfig | None = None,
        on_audit_failure: AuditFailureHandler | None = None,
        executor: Executor | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._conditions = (
            conditions if conditions is not None else get_default_condition_registry()
        )
        self._resources = resources if resources is not None else get_default_resource_registry()
        self._repository = repository if repository is not None else PermissionRepository()
        self._audit_writer = (
            audit_writer if audit_writer is not None else SQLAlchemyAuditWriter(session_factory)
        )
        self._config = config
        self._on_audit_failure = on_audit_failure
        self._executor = executor

    @property
    def config(self) -> AuthzConfig:
        return self._config if self._config is not None else get_global_config()

    @property
    def session_factory(self) -> Callable[[], Session]:
        return self._session_factory

    @property
    def conditions(self) -> ConditionRegistry:
        return self._conditions

    @property
    def resources(self) -> ResourceRegistry:
        return self._resources

    @property
    def repository(self) -> PermissionRepository:
        return self._repository

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def check(
        self,
        remote_addr: str,
        headers: Mapping[str, str],
        uri: str,
        subject: int | None,
        path: ParsedPath,
        method: str,
    ) -> None:
        """Allow (return ``None``) or deny (raise) one request.

        Raises:
            PermissionDenied: The subject may not perform the action.
            InvalidRequestShape: The request lacks a resource type or
                carries a malformed resource id.
            StorageUnavailable: Grant or resource storage failed.  Not a
                denial, and not audited.
        """
        self.check_request(
            AuthzRequest(
                remote_addr=remote_addr,
                headers=headers,
                uri=uri,
                subject=subject,
                path=path,
                method=method,
            )
        )

    def check_request(self, request: AuthzRequest) -> None:
        """Same as :meth:`check`, taking a prepared :class:`AuthzRequest`."""
        config = self.config
        action = resolve_action(request.path.id is not None, request.method)
        try:
            self._run(request, action, config)
        except (PermissionDenied, InvalidRequestShape) as denial:
            self._audit(request, denial, config)
            if config.log_decisions:
                log_decision(
                    subject=request.subject,
                    action=action.value,
                    resource_type=request.path.controller,
                    allowed=False,
                    code=denial_code(denial),
                )
            raise
        if config.log_decisions:
            log_decision(
                subject=request.subject,
                action=action.value,
                resource_type=request.path.controller,
                allowed=True,
            )

    def can(self, request: AuthzRequest) -> bool:
        """Return ``True`` if *request* is allowed.

        Denials are still audited.  ``StorageUnavailable`` propagates.
        """
        try:
            self.check_request(request)
        except (PermissionDenied, InvalidRequestShape):
            return False
        return True

    async def acheck(
        self,
        remote_addr: str,
        headers: Mapping[str, str],
        uri: str,
        subject: int | None,
        path: ParsedPath,
        method: str,
    ) -> None:
        """Async :meth:`check`, run on a worker thread."""
        await self.acheck_request(
            AuthzRequest(
                remote_addr=remote_addr,
                headers=headers,
                uri=uri,
                subject=subject,
                path=path,
                method=method,
            )
        )

    async def acheck_request(self, request: AuthzRequest) -> None:
        """Run :meth:`check_request` off the event loop, with a timeout.

        The blocking storage reads run in the engine's executor so a slow
        check cannot stall other requests on the loop.

        Raises:
            StorageUnavailable: If the check exceeds
                ``config.check_timeout`` seconds.
        """
        timeout = self.config.check_timeout
        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(self._executor, self.check_request, request)
        try:
            await asyncio.wait_for(future, timeout)
        except asyncio.TimeoutError as exc:
            logger.error(
                "Authorization check for %s %s timed out after %ss",
                request.method,
                request.request_path,
                timeout,
            )
            raise StorageUnavailable(f"Authorization check exceeded {timeout}s") from exc

    # ------------------------------------------------------------------
    # Decision
    # ------------------------------------------------------------------

    def _run(self, request: AuthzRequest, action: Action, config: AuthzConfig) -> None:
        resource_type = request.path.controller
        if resource_type is None:
            raise InvalidRequestShape("Request does not name a resource type")
        try:
            with self._session_factory() as session:
                self._decide(session, request, resource_type, action, config)
        except SQLAlchemyError as exc:
            raise StorageUnavailable("Authorization storage is unavailable") from exc

    def _decide(
        self,
        session: Session,
        request: AuthzRequest,
        resource_type: str,
        action: Action,
        config: AuthzConfig,
    ) -> None:
        lookup = self._repository.find_grants(session, request.subject, resource_type, action)
        if config.log_decisions:
            log_grant_lookup(
                resource_type=resource_type,
                action=action.value,
                grant_ids=lookup.grant_ids,
                conditions=lookup.conditions,
            )

        if not lookup.granted:
            raise self._denied(request, action)
        if not lookup.conditions:
            return

        try:
            model = self.load_model(session, resource_type, request.path.id)
        except UnsupportedResourceType as exc:
            logger.error(
                "No resource provider registered for %r; denying %s request",
                resource_type,
                action.value,
            )
            raise self._denied(request, action) from exc

        subject = request.subject_str
        for name, literal in lookup.conditions:
            try:
                registration = self._conditions.resolve(name)
            except UnknownConditionName as exc:
                if config.on_unknown_condition == "skip":
                    logger.warning(
                        "Skipping unknown condition %r on %s.%s",
                        name,
                        resource_type,
                        action.value,
                    )
                    continue
                # Later conditions are not examined.
                raise self._denied(request, action) from exc

            condition = registration.condition
            if config.on_unrecognized_value == "deny" and not condition.value_type().accepts(
                literal
            ):
                raise self._denied(request, action) from UnsupportedConditionValue(
                    value=literal, condition=name
                )

            attribute = model.get_attr(registration.attribute)
            if condition.validate(attribute, subject, literal):
                return

        raise self._denied(request, action)

    def load_model(
        self, session: Session, resource_type: str, resource_id: str | None
    ) -> ResourceModel:
        """Load the resource a request names through its provider.

        Raises:
            UnsupportedResourceType: If *resource_type* has no provider.
            InvalidRequestShape: If *resource_id* is malformed.
        """
        if resource_id is None:
            # Collection requests have no instance; every attribute is absent.
            self._resources.lookup(resource_type)
            return ResourceModel(resource_type=resource_type, resource_id=None, found=False)
        return self._resources.get_model(session, resource_type, resource_id)

    @staticmethod
    def _denied(request: AuthzRequest, action: Action) -> PermissionDenied:
        return PermissionDenied(
            subject=request.subject,
            action=action.value,
            resource_type=request.path.controller or "",
        )

    def _audit(self, request: AuthzRequest, denial: AuthzError, config: AuthzConfig) -> None:
        if not config.audit_denials:
            return
        record = AuditRecord(
            request_url=request.uri,
            request_path=request.request_path,
            remote_addr=request.remote_addr,
            user_agent=request.user_agent,
            code=denial_code(denial),
            subject=request.subject,
        )
        try:
            self._audit_writer.write(record)
        except Exception as exc:  # noqa: BLE001
            # Any writer fault is logged; the denial already made stands.
            log_audit_failure(record, exc)
            if self._on_audit_failure is None:
                return
            try:
                self._on_audit_failure(record, exc)
            except Exception:  # noqa: BLE001
                logger.exception("on_audit_failure handler raised for %s", record.code)
