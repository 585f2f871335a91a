"""FastAPI integration for sqla-abac."""

from __future__ import annotations

try:
    import fastapi as _fastapi_check  # noqa: F401  # pyright: ignore[reportUnusedImport]

    del _fastapi_check
except ImportError as exc:
    raise ImportError(
        "FastAPI integration requires fastapi. Install it with: pip install sqla-abac[fastapi]"
    ) from exc

from sqla_abac.integrations.fastapi._dependencies import (
    AuthzDep,
    get_authz_engine,
    get_subject,
    request_from_starlette,
)
from sqla_abac.integrations.fastapi._errors import install_error_handlers

__all__ = [
    "AuthzDep",
    "get_authz_engine",
    "get_subject",
    "install_error_handlers",
    "request_from_starlette",
]
