"""FastAPI dependencies for sqla-abac authorization."""

from __future__ import annotations

from typing import Any

from fastapi import Depends, Request

from sqla_abac._types import ParsedPath
from sqla_abac.engine._engine import AuthorizationEngine
from sqla_abac.engine._request import AuthzRequest

__all__ = ["AuthzDep", "get_authz_engine", "get_subject", "request_from_starlette"]


# ---------------------------------------------------------------------------
# Sentinel dependency functions for DI-based configuration
# ---------------------------------------------------------------------------


def get_subject(request: Request) -> int | None:
    """Sentinel dependency — override via ``app.dependency_overrides[get_subject]``.

    The override returns the subject id established by the application's
    authentication layer, or ``None`` for anonymous requests.

    Example::

        from sqla_abac.integrations.fastapi import get_subject

        app.dependency_overrides[get_subject] = current_account_id
    """
    raise NotImplementedError(
        "Override get_subject via app.dependency_overrides[get_subject]. "
        "See sqla-abac docs for configuration guide."
    )


def get_authz_engine(request: Request) -> AuthorizationEngine:
    """Sentinel dependency — override via ``app.dependency_overrides[get_authz_engine]``.

    Example::

        app.dependency_overrides[get_authz_engine] = lambda: engine
    """
    raise NotImplementedError(
        "Override get_authz_engine via app.dependency_overrides[get_authz_engine]. "
        "See sqla-abac docs for configuration guide."
    )


# ---------------------------------------------------------------------------
# Request translation
# ---------------------------------------------------------------------------


def request_from_starlette(
    request: Request,
    subject: int | None,
    *,
    controller: str | None = None,
    controller_param: str = "controller",
    id_param: str = "id",
) -> AuthzRequest:
    """Build an :class:`AuthzRequest` from a Starlette request.

    The resource type is *controller* when given, else the path parameter
    named *controller_param*.  The resource id is the path parameter named
    *id_param*, if the route has one.
    """
    params = request.path_params
    resource_type = controller if controller is not None else params.get(controller_param)
    resource_id = params.get(id_param)
    return AuthzRequest(
        remote_addr=request.client.host if request.client is not None else "",
        headers=request.headers,
        uri=str(request.url),
        subject=subject,
        path=ParsedPath(
            controller=None if resource_type is None else str(resource_type),
            id=None if resource_id is None else str(resource_id),
        ),
        method=request.method,
    )


# ---------------------------------------------------------------------------
# Dependency builder
# ---------------------------------------------------------------------------


def AuthzDep(
    *,
    controller: str | None = None,
    controller_param: str = "controller",
    id_param: str = "id",
) -> Any:
    """FastAPI dependency that authorizes the current request.

    Resolves the subject and engine from the ``get_subject`` and
    ``get_authz_engine`` sentinels and runs
    :meth:`AuthorizationEngine.acheck_request` off the event loop.  A
    denial propagates as the engine's exception; install
    :func:`install_error_handlers` to turn it into a response.

    Args:
        controller: Fixed resource type for the route.  When ``None`` the
            resource type is read from the *controller_param* path param.
        controller_param: Path parameter holding the resource type.
        id_param: Path parameter holding the resource id.

    Returns:
        A FastAPI ``Depends`` instance.

    Example::

        @app.delete(
            "/organization/{id}",
            dependencies=[AuthzDep(controller="organization")],
        )
        async def delete_organization(id: int) -> None:
            ...
    """

    async def _authorize(
        request: Request,
        subject: int | None = Depends(get_subject),
        engine: AuthorizationEngine = Depends(get_authz_engine),
    ) -> None:
        await engine.acheck_request(
            request_from_starlette(
                request,
                subject,
                controller=controller,
                controller_param=controller_param,
                id_param=id_param,
            )
        )

    return Depends(_authorize)
