"""explain_check() — report how the engine would decide a request."""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from sqla_abac._action import resolve_action
from sqla_abac._types import ParsedPath
from sqla_abac.engine._engine import AuthorizationEngine
from sqla_abac.exceptions import (
    InvalidRequestShape,
    PermissionDenied,
    StorageUnavailable,
    UnknownConditionName,
    UnsupportedConditionValue,
    UnsupportedResourceType,
)
from sqla_abac.explain._models import CheckExplanation, ConditionEvaluation

__all__ = ["explain_check"]


def explain_check(
    engine: AuthorizationEngine,
    *,
    subject: int | None,
    path: ParsedPath,
    method: str,
) -> CheckExplanation:
    """Explain why *subject* would be allowed or denied.

    Reads grants and the resource exactly as :meth:`AuthorizationEngine.check`
    does, but evaluates every condition instead of stopping at the first
    decisive one, writes no audit record and raises nothing for a denial.

    Args:
        engine: The engine whose registries, repository and config apply.
        subject: The requesting subject, ``None`` for anonymous.
        path: Resource type and id.
        method: HTTP method.

    Returns:
        A ``CheckExplanation`` with per-condition results and the verdict.

    Raises:
        StorageUnavailable: If storage cannot be read.

    Example::

        explanation = explain_check(
            engine, subject=42, path=ParsedPath("organization", "17"), method="DELETE"
        )
        print(explanation)
    """
    config = engine.config
    action = resolve_action(path.id is not None, method)

    def explanation(
        allowed: bool,
        deny_reason: str | None,
        grant_ids: frozenset[int] = frozenset(),
        conditions: list[ConditionEvaluation] | None = None,
    ) -> CheckExplanation:
        return CheckExplanation(
            subject=subject,
            action=action.value,
            resource_type=path.controller,
            resource_id=path.id,
            grant_ids=sorted(grant_ids),
            conditions=conditions or [],
            allowed=allowed,
            deny_reason=deny_reason,
        )

    if path.controller is None:
        return explanation(False, InvalidRequestShape.code)

    subject_str = None if subject is None else str(subject)
    try:
        with engine.session_factory() as session:
            lookup = engine.repository.find_grants(session, subject, path.controller, action)
            if not lookup.granted:
                return explanation(False, PermissionDenied.code)
            if not lookup.conditions:
                return explanation(True, None, lookup.grant_ids)

            try:
                model = engine.load_model(session, path.controller, path.id)
            except (UnsupportedResourceType, InvalidRequestShape) as exc:
                return explanation(False, exc.code, lookup.grant_ids)

            evaluations: list[ConditionEvaluation] = []
            # The first decisive outcome in storage order is the verdict.
            verdict: tuple[bool, str | None] | None = None
            for name, literal in lookup.conditions:
                try:
                    registration = engine.conditions.resolve(name)
                except UnknownConditionName as exc:
                    evaluations.append(ConditionEvaluation(name, literal, None, False, exc.code))
                    if verdict is None and config.on_unknown_condition == "deny":
                        verdict = (False, exc.code)
                    continue

                condition = registration.condition
                if config.on_unrecognized_value == "deny" and not condition.value_type().accepts(
                    literal
                ):
                    code = UnsupportedConditionValue.code
                    evaluations.append(ConditionEvaluation(name, literal, None, False, code))
                    if verdict is None:
                        verdict = (False, code)
                    continue

                attribute = model.get_attr(registration.attribute)
                validated = condition.validate(attribute, subject_str, literal)
                evaluations.append(ConditionEvaluation(name, literal, attribute, validated))
                if validated and verdict is None:
                    verdict = (True, None)
    except SQLAlchemyError as exc:
        raise StorageUnavailable("Authorization storage is unavailable") from exc

    allowed, reason = verdict if verdict is not None else (False, PermissionDenied.code)
    return explanation(allowed, reason, lookup.grant_ids, evaluations)
