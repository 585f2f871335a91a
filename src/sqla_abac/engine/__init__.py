"""Authorization engine — the single decision point."""

from sqla_abac.engine._engine import AuthorizationEngine, denial_code
from sqla_abac.engine._request import AuthzRequest

__all__ = ["AuthorizationEngine", "AuthzRequest", "denial_code"]
