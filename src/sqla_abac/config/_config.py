"""Layered configuration for sqla-abac."""

from __future__ import annotations

from dataclasses import dataclass

from sqla_abac._types import OnUnknownCondition, OnUnrecognizedValue

__all__ = [
    "AuthzConfig",
    "configure",
    "get_global_config",
    "_reset_global_config",
    "_set_global_config",
]

_VALID_UNKNOWN_CONDITION: set[str] = {"deny", "skip"}
_VALID_UNRECOGNIZED_VALUE: set[str] = {"deny", "allow"}


@dataclass(frozen=True, slots=True)
class AuthzConfig:
    """Engine configuration with merge semantics (global -> engine).

    Attributes:
        on_unknown_condition: Behavior when a stored condition name is not
            registered.  ``"deny"`` denies the whole check immediately
            without examining later conditions.  ``"skip"`` logs a warning
            and moves on to the next condition.
        on_unrecognized_value: Behavior when a condition literal is outside
            the condition's value type.  ``"deny"`` raises
            ``UnsupportedConditionValue`` (fail-closed).  ``"allow"`` hands
            the literal to the validator unchanged.
        check_timeout: Seconds an async check may take before it fails
            with ``StorageUnavailable``.
        log_decisions: Emit INFO/DEBUG logs for every decision.
        audit_denials: Write an audit record for every denial.

    Example::

        config = AuthzConfig(on_unknown_condition="skip")
        merged = config.merge(check_timeout=1.5)
    """

    on_unknown_condition: OnUnknownCondition = "deny"
    on_unrecognized_value: OnUnrecognizedValue = "deny"
    check_timeout: float = 5.0
    log_decisions: bool = False
    audit_denials: bool = True

    def __post_init__(self) -> None:
        if self.on_unknown_condition not in _VALID_UNKNOWN_CONDITION:
            raise ValueError(
                f"on_unknown_condition must be one of {_VALID_UNKNOWN_CONDITION!r}, "
                f"got {self.on_unknown_condition!r}"
            )
        if self.on_unrecognized_value not in _VALID_UNRECOGNIZED_VALUE:
            raise ValueError(
                f"on_unrecognized_value must be one of {_VALID_UNRECOGNIZED_VALUE!r}, "
                f"got {self.on_unrecognized_value!r}"
            )
        if self.check_timeout <= 0:
            raise ValueError(f"check_timeout must be positive, got {self.check_timeout!r}")

    def merge(
        self,
        *,
        on_unknown_condition: OnUnknownCondition | None = None,
        on_unrecognized_value: OnUnrecognizedValue | None = None,
        check_timeout: float | None = None,
        log_decisions: bool | None = None,
        audit_denials: bool | None = None,
    ) -> AuthzConfig:
        """Return a new config with non-None overrides applied.

        Example::

            base = AuthzConfig()
            strict = base.merge(on_unrecognized_value="deny")
        """
        return AuthzConfig(
            on_unknown_condition=(
                on_unknown_condition
                if on_unknown_condition is not None
                else self.on_unknown_condition
            ),
            on_unrecognized_value=(
                on_unrecognized_value
                if on_unrecognized_value is not None
                else self.on_unrecognized_value
            ),
            check_timeout=(check_timeout if check_timeout is not None else self.check_timeout),
            log_decisions=(log_decisions if log_decisions is not None else self.log_decisions),
            audit_denials=(audit_denials if audit_denials is not None else self.audit_denials),
        )


# ---------------------------------------------------------------------------
# Global configuration singleton
# ---------------------------------------------------------------------------

_global_config = AuthzConfig()


def get_global_config() -> AuthzConfig:
    """Return the current global configuration."""
    return _global_config


def configure(
    *,
    on_unknown_condition: OnUnknownCondition | None = None,
    on_unrecognized_value: OnUnrecognizedValue | None = None,
    check_timeout: float | None = None,
    log_decisions: bool | None = None,
    audit_denials: bool | None = None,
) -> AuthzConfig:
    """Update the global configuration by merging overrides.

    Only non-None values are applied.  Engines created without an explicit
    config read the global config on every check.

    Example::

        configure(log_decisions=True)
    """
    global _global_config
    _global_config = _global_config.merge(
        on_unknown_condition=on_unknown_condition,
        on_unrecognized_value=on_unrecognized_value,
        check_timeout=check_timeout,
        log_decisions=log_decisions,
        audit_denials=audit_denials,
    )
    return _global_config


def _set_global_config(cfg: AuthzConfig) -> None:
    """Replace global config with an exact snapshot. For testing only."""
    global _global_config
    _global_config = cfg


def _reset_global_config() -> None:
    """Reset global config to defaults. For testing only."""
    global _global_config
    _global_config = AuthzConfig()
