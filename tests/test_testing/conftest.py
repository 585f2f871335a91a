"""Import fixtures from sqla_abac.testing for test discovery."""

from sqla_abac.testing._fixtures import audit_writer, authz_config

__all__ = ["audit_writer", "authz_config"]
