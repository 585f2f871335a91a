"""Exception handlers for FastAPI integration."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from sqla_abac.exceptions import AuthzError

__all__ = ["install_error_handlers"]


def install_error_handlers(app: FastAPI) -> None:
    """Install an exception handler for sqla-abac errors on a FastAPI app.

    Every :class:`~sqla_abac.exceptions.AuthzError` becomes a JSON response
    ``{"code": ..., "detail": ...}`` with the exception's ``status_code``:

    - ``PermissionDenied`` / ``InvalidRequestShape`` -> 403 Forbidden
    - ``UnsupportedResourceType`` -> 500 Internal Server Error
    - ``StorageUnavailable`` -> 503 Service Unavailable

    Args:
        app: The FastAPI application instance.

    Example::

        app = FastAPI()
        install_error_handlers(app)
    """

    @app.exception_handler(AuthzError)
    async def authz_error_handler(  # pyright: ignore[reportUnusedFunction]
        request: object, exc: AuthzError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"code": exc.code, "detail": str(exc)},
        )
