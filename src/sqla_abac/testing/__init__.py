"""sqla-abac testing utilities — audit writers, seeding, assertions, fixtures.

Provides test helpers for verifying authorization decisions:

- **Audit writers**: ``MemoryAuditWriter`` records denials in memory,
  ``FailingAuditWriter`` simulates an audit outage.
- **Seeding**: ``grant_permission`` inserts a grant with its conditions.
- **Assertion helpers**: ``assert_allowed``, ``assert_denied``.
- **Fixtures**: ``authz_config``, ``audit_writer``, ``isolated_authz_state``.

Example::

    from sqla_abac.testing import assert_denied

    def test_non_owner_cannot_delete(engine):
        assert_denied(engine, subject=99, path=ParsedPath("organization", "17"),
                      method="DELETE")
"""

from sqla_abac.testing._assertions import assert_allowed, assert_denied
from sqla_abac.testing._fixtures import audit_writer, authz_config, isolated_authz_state
from sqla_abac.testing._isolation import isolated_authz
from sqla_abac.testing._seed import grant_permission
from sqla_abac.testing._writers import FailingAuditWriter, MemoryAuditWriter

__all__ = [
    "FailingAuditWriter",
    "MemoryAuditWriter",
    "assert_allowed",
    "assert_denied",
    "audit_writer",
    "authz_config",
    "grant_permission",
    "isolated_authz",
    "isolated_authz_state",
]
