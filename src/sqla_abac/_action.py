"""Action resolution from request shape."""

from __future__ import annotations

from sqla_abac._types import Action

__all__ = ["resolve_action"]

_ACTIONS: dict[tuple[bool, str], Action] = {
    (True, "GET"): Action.VIEW,
    (False, "POST"): Action.CREATE,
    (True, "POST"): Action.EDIT,
    (True, "DELETE"): Action.DELETE,
}


def resolve_action(resource_id_present: bool, method: str) -> Action:
    """Map (resource-id presence, HTTP method) to the requested action.

    Total and pure: every combination not listed resolves to
    ``Action.VIEW``.

    Example::

        resolve_action(True, "DELETE")   # Action.DELETE
        resolve_action(False, "DELETE")  # Action.VIEW
    """
    return _ACTIONS.get((resource_id_present, method), Action.VIEW)
