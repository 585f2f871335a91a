"""Flask extension for sqla-abac authorization."""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Flask, current_app, jsonify, request

from sqla_abac._types import ParsedPath
from sqla_abac.engine._engine import AuthorizationEngine
from sqla_abac.engine._request import AuthzRequest
from sqla_abac.exceptions import AuthzError

__all__ = ["AuthzExtension"]

F = TypeVar("F", bound=Callable[..., Any])


class AuthzExtension:
    """Flask extension that authorizes requests with an engine.

    Registers an error handler for sqla-abac exceptions and provides
    :meth:`authorize` and the :meth:`require` view decorator.  Supports
    the Flask app-factory pattern via ``init_app()``.

    Args:
        app: Optional Flask application.  If provided, calls ``init_app()``
            immediately.
        engine: The authorization engine.
        subject_provider: A callable ``() -> int | None`` returning the
            authenticated subject.  Called within request context.
        controller_param: View argument holding the resource type.
        id_param: View argument holding the resource id.

    Example::

        app = Flask(__name__)
        authz = AuthzExtension(app, engine=engine, subject_provider=current_account_id)

        @app.delete("/organization/<id>")
        @authz.require("organization")
        def delete_organization(id):
            ...
    """

    def __init__(
        self,
        app: Flask | None = None,
        *,
        engine: AuthorizationEngine,
        subject_provider: Callable[[], int | None],
        controller_param: str = "controller",
        id_param: str = "id",
    ) -> None:
        self._engine = engine
        self._subject_provider = subject_provider
        self._controller_param = controller_param
        self._id_param = id_param

        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        """Initialize the extension with a Flask application.

        Stores the engine on ``app.extensions["sqla_abac"]`` and registers
        the error handler for authorization exceptions.
        """
        app.extensions["sqla_abac"] = {
            "engine": self._engine,
            "subject_provider": self._subject_provider,
        }

        @app.errorhandler(AuthzError)
        def handle_authz_error(exc: AuthzError):  # pyright: ignore[reportUnusedFunction]
            return jsonify({"code": exc.code, "detail": str(exc)}), exc.status_code

    def authorize(self, controller: str | None = None) -> None:
        """Authorize the current request, raising on denial.

        Must be called within a Flask request context.

        Args:
            controller: Fixed resource type.  Defaults to the view
                argument named by ``controller_param``.
        """
        ext_state: dict[str, Any] = current_app.extensions["sqla_abac"]
        engine: AuthorizationEngine = ext_state["engine"]
        subject = ext_state["subject_provider"]()

        view_args = request.view_args or {}
        resource_type = controller if controller is not None else view_args.get(
            self._controller_param
        )
        resource_id = view_args.get(self._id_param)

        engine.check_request(
            AuthzRequest(
                remote_addr=request.remote_addr or "",
                headers=request.headers,
                uri=request.url,
                subject=subject,
                path=ParsedPath(
                    controller=None if resource_type is None else str(resource_type),
                    id=None if resource_id is None else str(resource_id),
                ),
                method=request.method,
            )
        )

    def require(self, controller: str | None = None) -> Callable[[F], F]:
        """View decorator that calls :meth:`authorize` before the view."""

        def decorator(view: F) -> F:
            @functools.wraps(view)
            def wrapper(*args: Any, **kwargs: Any) -> Any:
                self.authorize(controller)
                return view(*args, **kwargs)

            return wrapper  # type: ignore[return-value]

        return decorator
