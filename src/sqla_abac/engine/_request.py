"""AuthzRequest — the request facts an authorization check consumes."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from urllib.parse import urlsplit

from sqla_abac._types import ParsedPath

__all__ = ["AuthzRequest"]


@dataclass(frozen=True, slots=True)
class AuthzRequest:
    """Everything the engine needs to know about one incoming request.

    Attributes:
        remote_addr: Client address as reported by the server.
        headers: Request headers.  Lookups are case-insensitive.
        uri: The full request URI.
        subject: The authenticated subject id, ``None`` if anonymous.
        path: Resource type and id parsed from the route.
        method: HTTP method, upper-case.

    Example::

        request = AuthzRequest(
            remote_addr="10.0.0.5",
            headers={"User-Agent": "curl/8.0"},
            uri="https://api.example.com/organization/17",
            subject=42,
            path=ParsedPath(controller="organization", id="17"),
            method="DELETE",
        )
    """

    remote_addr: str
    headers: Mapping[str, str] = field(default_factory=dict)
    uri: str = ""
    subject: int | None = None
    path: ParsedPath = field(default_factory=ParsedPath)
    method: str = "GET"

    def header(self, name: str) -> str | None:
        """Return header *name* regardless of case, or ``None``."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None

    @property
    def user_agent(self) -> str | None:
        return self.header("User-Agent")

    @property
    def request_path(self) -> str:
        return urlsplit(self.uri).path

    @property
    def subject_str(self) -> str | None:
        """The subject as passed to condition validators."""
        return None if self.subject is None else str(self.subject)
