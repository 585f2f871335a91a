"""Flask integration for sqla-abac."""

from __future__ import annotations

try:
    import flask as _flask_check  # noqa: F401  # pyright: ignore[reportUnusedImport]

    del _flask_check
except ImportError as exc:
    raise ImportError(
        "Flask integration requires flask. Install it with: pip install sqla-abac[flask]"
    ) from exc

from sqla_abac.integrations.flask._extension import AuthzExtension

__all__ = ["AuthzExtension"]
