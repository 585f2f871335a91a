"""Data models for explain output."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

__all__ = ["CheckExplanation", "ConditionEvaluation"]


@dataclass(frozen=True, slots=True)
class ConditionEvaluation:
    """Result of evaluating one stored condition.

    Attributes:
        name: Stored condition name.
        value: Stored literal.
        attribute: The resource attribute the condition read, if it got
            that far.
        validated: Whether the condition held.
        error: Fault code if the condition could not be evaluated.
    """

    name: str
    value: str
    attribute: int | None
    validated: bool
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dictionary."""
        return {
            "name": self.name,
            "value": self.value,
            "attribute": self.attribute,
            "validated": self.validated,
            "error": self.error,
        }


@dataclass(frozen=True, slots=True)
class CheckExplanation:
    """Explanation of how the engine would decide one request.

    Attributes:
        subject: The requesting subject.
        action: The resolved action string.
        resource_type: The requested resource type.
        resource_id: The requested resource id.
        grant_ids: Ids of matching grants (sorted).
        conditions: Every condition, evaluated without short-circuiting.
        allowed: The verdict ``check()`` would reach.
        deny_reason: Fault code of the denial, ``None`` when allowed.
    """

    subject: int | None
    action: str
    resource_type: str | None
    resource_id: str | None
    grant_ids: list[int]
    conditions: list[ConditionEvaluation]
    allowed: bool
    deny_reason: str | None

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dictionary."""
        return {
            "subject": self.subject,
            "action": self.action,
            "resource_type": self.resource_type,
            "resource_id": self.resource_id,
            "grant_ids": list(self.grant_ids),
            "conditions": [c.to_dict() for c in self.conditions],
            "allowed": self.allowed,
            "deny_reason": self.deny_reason,
        }

    def __str__(self) -> str:
        verdict = "ALLOW" if self.allowed else f"DENY ({self.deny_reason})"
        lines = [
            f"{self.action} {self.resource_type}/{self.resource_id} "
            f"by subject {self.subject!r}: {verdict}",
            f"  grants: {self.grant_ids or 'none'}",
        ]
        for c in self.conditions:
            status = c.error or ("pass" if c.validated else "fail")
            lines.append(f"  - {c.name}={c.value!r} (attribute={c.attribute!r}): {status}")
        return "\n".join(lines)
