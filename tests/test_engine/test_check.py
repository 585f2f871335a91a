"""Tests for AuthorizationEngine decisions."""

from __future__ import annotations

import logging

import pytest

from sqla_abac._types import Action, ParsedPath
from sqla_abac.conditions._builtin import FunctionCondition
from sqla_abac.config._config import AuthzConfig, configure
from sqla_abac.engine._engine import AuthorizationEngine, denial_code
from sqla_abac.exceptions import (
    InvalidRequestShape,
    PermissionDenied,
    UnknownConditionName,
    UnsupportedConditionValue,
    UnsupportedResourceType,
)
from tests.conftest import Organization, User, make_request


class SpyCondition(FunctionCondition):
    """Condition that records each evaluation and returns a fixed result."""

    def __init__(self, result: bool) -> None:
        self.calls: list[tuple[object, object, str]] = []

        def record(attribute, subject, literal):
            self.calls.append((attribute, subject, literal))
            return result

        super().__init__(record)


def _engine_with(session_factory, conditions, resources, audit, **config) -> AuthorizationEngine:
    return AuthorizationEngine(
        session_factory,
        conditions=conditions,
        resources=resources,
        audit_writer=audit,
        config=AuthzConfig(**config),
    )


class TestOwnerScenario:
    """Owner 42 may delete organization 17; subject 99 may not."""

    @pytest.fixture(autouse=True)
    def _seed(self, seed):
        seed.add(Organization(id=17, owner_account_id=42))
        seed.grant(42, "organization", Action.DELETE, [("isOwner", "true")])
        seed.grant(99, "organization", Action.DELETE, [("isOwner", "true")])

    def test_owner_allowed(self, engine, memory_audit):
        engine.check_request(make_request(42, "organization", "17", "DELETE"))
        assert memory_audit.records == []

    def test_non_owner_denied(self, engine, memory_audit):
        with pytest.raises(PermissionDenied) as exc_info:
            engine.check_request(make_request(99, "organization", "17", "DELETE"))
        exc = exc_info.value
        assert exc.subject == 99
        assert exc.action == "delete"
        assert exc.resource_type == "organization"
        assert len(memory_audit.records) == 1
        record = memory_audit.records[0]
        assert record.code == "AUTHZ_PERMISSION_DENIED"
        assert record.request_path == "/organization/17"
        assert record.remote_addr == "203.0.113.7"
        assert record.user_agent == "pytest-agent/1.0"
        assert record.subject == 99

    def test_check_positional_signature(self, engine):
        engine.check(
            "10.0.0.5",
            {"User-Agent": "curl/8.0"},
            "/organization/17",
            42,
            ParsedPath("organization", "17"),
            "DELETE",
        )

    def test_other_action_not_granted(self, engine):
        with pytest.raises(PermissionDenied):
            engine.check_request(make_request(42, "organization", "17", "GET"))

    def test_missing_row_denies_owner_true(self, engine):
        with pytest.raises(PermissionDenied):
            engine.check_request(make_request(42, "organization", "18", "DELETE"))


class TestGrants:
    def test_no_grant_denied(self, engine, memory_audit):
        with pytest.raises(PermissionDenied) as exc_info:
            engine.check_request(make_request(42, "user", "1", "GET"))
        assert exc_info.value.__cause__ is None
        assert [r.code for r in memory_audit.records] == ["AUTHZ_PERMISSION_DENIED"]

    def test_unconditional_grant_allowed(self, engine, seed, memory_audit):
        seed.grant(42, "user", Action.VIEW)
        engine.check_request(make_request(42, "user", "1", "GET"))
        assert memory_audit.records == []

    def test_unconditional_grant_needs_no_provider(self, engine, seed):
        seed.grant(42, "report", Action.VIEW)
        engine.check_request(make_request(42, "report", "9", "GET"))

    def test_wildcard_grant_allows_anonymous(self, engine, seed):
        seed.grant(None, "user", Action.VIEW)
        engine.check_request(make_request(None, "user", "1", "GET"))

    def test_anonymous_not_matched_by_subject_grant(self, engine, seed):
        seed.grant(42, "user", Action.VIEW)
        with pytest.raises(PermissionDenied):
            engine.check_request(make_request(None, "user", "1", "GET"))

    def test_action_resolved_from_shape(self, engine, seed):
        seed.grant(42, "user", Action.CREATE)
        engine.check_request(make_request(42, "user", None, "POST"))
        with pytest.raises(PermissionDenied):
            engine.check_request(make_request(42, "user", "1", "POST"))


class TestConditions:
    def test_any_condition_suffices(self, engine, seed):
        seed.add(User(id=1, account_id=7))
        seed.grant(42, "user", Action.EDIT, [("isOwner", "true"), ("isLoggedIn", "true")])
        engine.check_request(make_request(42, "user", "1", "POST"))

    def test_all_conditions_fail(self, engine, seed, memory_audit):
        seed.add(User(id=1, account_id=7))
        seed.grant(42, "user", Action.EDIT, [("isOwner", "true")])
        with pytest.raises(PermissionDenied) as exc_info:
            engine.check_request(make_request(42, "user", "1", "POST"))
        assert exc_info.value.__cause__ is None
        assert len(memory_audit.records) == 1

    def test_evaluation_stops_at_first_success(
        self, session_factory, conditions, resources, memory_audit, seed
    ):
        spy = SpyCondition(True)
        conditions.register("isSpy", spy, attribute="owner")
        engine = _engine_with(session_factory, conditions, resources, memory_audit)
        seed.add(User(id=1, account_id=42))
        seed.grant(42, "user", Action.VIEW, [("isOwner", "true"), ("isSpy", "true")])
        engine.check_request(make_request(42, "user", "1", "GET"))
        assert spy.calls == []

    def test_conditions_evaluated_in_order(
        self, session_factory, conditions, resources, memory_audit, seed
    ):
        spy = SpyCondition(True)
        conditions.register("isSpy", spy, attribute="owner")
        engine = _engine_with(session_factory, conditions, resources, memory_audit)
        seed.add(User(id=1, account_id=7))
        seed.grant(42, "user", Action.VIEW, [("isOwner", "true"), ("isSpy", "true")])
        engine.check_request(make_request(42, "user", "1", "GET"))
        assert spy.calls == [(7, "42", "true")]

    def test_owner_false_allows_non_owner(self, engine, seed):
        seed.add(User(id=1, account_id=7))
        seed.grant(42, "user", Action.VIEW, [("isOwner", "false")])
        engine.check_request(make_request(42, "user", "1", "GET"))

    def test_anonymous_fails_owner_and_login(self, engine, seed):
        seed.add(User(id=1, account_id=7))
        seed.grant(None, "user", Action.VIEW, [("isOwner", "false"), ("isLoggedIn", "true")])
        with pytest.raises(PermissionDenied):
            engine.check_request(make_request(None, "user", "1", "GET"))

    def test_login_on_collection_create(self, engine, seed):
        seed.grant(None, "organization", Action.CREATE, [("isLoggedIn", "true")])
        engine.check_request(make_request(42, "organization", None, "POST"))

    def test_owner_on_collection_create_denied(self, engine, seed):
        seed.grant(42, "organization", Action.CREATE, [("isOwner", "true")])
        with pytest.raises(PermissionDenied):
            engine.check_request(make_request(42, "organization", None, "POST"))


class TestUnknownCondition:
    def test_unknown_name_short_circuits(
        self, session_factory, conditions, resources, memory_audit, seed
    ):
        spy = SpyCondition(True)
        conditions.register("isSpy", spy, attribute="owner")
        engine = _engine_with(session_factory, conditions, resources, memory_audit)
        seed.add(User(id=1, account_id=42))
        seed.grant(42, "user", Action.VIEW, [("isAdmin", "true"), ("isSpy", "true")])
        with pytest.raises(PermissionDenied) as exc_info:
            engine.check_request(make_request(42, "user", "1", "GET"))
        assert isinstance(exc_info.value.__cause__, UnknownConditionName)
        assert exc_info.value.__cause__.name == "isAdmin"
        assert spy.calls == []
        assert [r.code for r in memory_audit.records] == ["MODEL_ATTRIBUTE_NOT_DEFINED"]

    def test_unknown_name_after_failed_condition(self, engine, seed, memory_audit):
        seed.add(User(id=1, account_id=7))
        seed.grant(42, "user", Action.VIEW, [("isOwner", "true"), ("isAdmin", "true")])
        with pytest.raises(PermissionDenied) as exc_info:
            engine.check_request(make_request(42, "user", "1", "GET"))
        assert denial_code(exc_info.value) == "MODEL_ATTRIBUTE_NOT_DEFINED"

    def test_skip_moves_to_next_condition(
        self, session_factory, conditions, resources, memory_audit, seed, caplog
    ):
        engine = _engine_with(
            session_factory, conditions, resources, memory_audit, on_unknown_condition="skip"
        )
        seed.add(User(id=1, account_id=42))
        seed.grant(42, "user", Action.VIEW, [("isAdmin", "true"), ("isOwner", "true")])
        with caplog.at_level(logging.WARNING, logger="sqla_abac.engine"):
            engine.check_request(make_request(42, "user", "1", "GET"))
        assert "isAdmin" in caplog.text
        assert memory_audit.records == []

    def test_skip_all_unknown_denies(
        self, session_factory, conditions, resources, memory_audit, seed
    ):
        engine = _engine_with(
            session_factory, conditions, resources, memory_audit, on_unknown_condition="skip"
        )
        seed.add(User(id=1, account_id=42))
        seed.grant(42, "user", Action.VIEW, [("isAdmin", "true")])
        with pytest.raises(PermissionDenied) as exc_info:
            engine.check_request(make_request(42, "user", "1", "GET"))
        assert exc_info.value.__cause__ is None


class TestUnrecognizedValue:
    def test_denied_by_default(self, engine, seed, memory_audit):
        seed.add(User(id=1, account_id=7))
        seed.grant(42, "user", Action.VIEW, [("isOwner", "maybe")])
        with pytest.raises(PermissionDenied) as exc_info:
            engine.check_request(make_request(42, "user", "1", "GET"))
        cause = exc_info.value.__cause__
        assert isinstance(cause, UnsupportedConditionValue)
        assert cause.value == "maybe"
        assert cause.condition == "isOwner"
        assert [r.code for r in memory_audit.records] == ["AUTHZ_CONDITION_VALUE_NOT_DEFINED"]

    def test_allow_mode_passes_literal_to_validator(
        self, session_factory, conditions, resources, memory_audit, seed
    ):
        engine = _engine_with(
            session_factory, conditions, resources, memory_audit, on_unrecognized_value="allow"
        )
        seed.add(User(id=1, account_id=7))
        seed.grant(42, "user", Action.VIEW, [("isOwner", "maybe")])
        engine.check_request(make_request(42, "user", "1", "GET"))


class TestRequestShape:
    def test_missing_controller(self, engine, memory_audit):
        with pytest.raises(InvalidRequestShape):
            engine.check_request(make_request(42, None, None, "GET"))
        assert [r.code for r in memory_audit.records] == ["AUTHZ_INVALID_REQUEST"]

    def test_malformed_id(self, engine, seed, memory_audit):
        seed.grant(42, "user", Action.VIEW, [("isOwner", "true")])
        with pytest.raises(InvalidRequestShape):
            engine.check_request(make_request(42, "user", "abc", "GET"))
        assert [r.code for r in memory_audit.records] == ["AUTHZ_INVALID_REQUEST"]

    def test_oversized_id(self, engine, seed, memory_audit):
        seed.grant(42, "organization", Action.DELETE, [("isOwner", "true")])
        with pytest.raises(InvalidRequestShape):
            engine.check_request(make_request(42, "organization", "9" * 40, "DELETE"))
        assert [r.code for r in memory_audit.records] == ["AUTHZ_INVALID_REQUEST"]

    def test_non_canonical_id(self, engine, seed, memory_audit):
        seed.add(Organization(id=17, owner_account_id=42))
        seed.grant(42, "organization", Action.DELETE, [("isOwner", "true")])
        with pytest.raises(InvalidRequestShape):
            engine.check_request(make_request(42, "organization", "017", "DELETE"))
        engine.check_request(make_request(42, "organization", "17", "DELETE"))
        assert [r.code for r in memory_audit.records] == ["AUTHZ_INVALID_REQUEST"]


class TestUnsupportedResource:
    def test_conditional_grant_on_unregistered_type(self, engine, seed, memory_audit, caplog):
        seed.grant(42, "invoice", Action.VIEW, [("isOwner", "true")])
        with caplog.at_level(logging.ERROR, logger="sqla_abac.engine"):
            with pytest.raises(PermissionDenied) as exc_info:
                engine.check_request(make_request(42, "invoice", "1", "GET"))
        assert isinstance(exc_info.value.__cause__, UnsupportedResourceType)
        assert "invoice" in caplog.text
        assert [r.code for r in memory_audit.records] == ["AUTHZ_RESOURCE_TYPE_NOT_SUPPORTED"]

    def test_collection_request_on_unregistered_type(self, engine, seed):
        seed.grant(42, "invoice", Action.CREATE, [("isLoggedIn", "true")])
        with pytest.raises(PermissionDenied) as exc_info:
            engine.check_request(make_request(42, "invoice", None, "POST"))
        assert isinstance(exc_info.value.__cause__, UnsupportedResourceType)


class TestCan:
    def test_allowed(self, engine, seed):
        seed.grant(42, "user", Action.VIEW)
        assert engine.can(make_request(42, "user", "1", "GET")) is True

    def test_denied_still_audited(self, engine, memory_audit):
        assert engine.can(make_request(42, "user", "1", "GET")) is False
        assert len(memory_audit.records) == 1

    def test_invalid_shape_is_false(self, engine):
        assert engine.can(make_request(42, None, None, "GET")) is False


class TestLoadModel:
    def test_instance(self, engine, seed, session_factory):
        seed.add(User(id=1, account_id=7))
        with session_factory() as session:
            model = engine.load_model(session, "user", "1")
        assert model.found is True
        assert model.get_attr("owner") == 7

    def test_collection_has_no_attributes(self, engine, session_factory):
        with session_factory() as session:
            model = engine.load_model(session, "user", None)
        assert model.found is False
        assert model.resource_id is None
        assert model.get_attr("owner") is None

    def test_collection_of_unregistered_type(self, engine, session_factory):
        with session_factory() as session, pytest.raises(UnsupportedResourceType):
            engine.load_model(session, "invoice", None)


class TestGlobalConfig:
    def test_engine_without_config_reads_global(
        self, isolated_authz_state, session_factory, conditions, resources, memory_audit, seed
    ):
        engine = AuthorizationEngine(
            session_factory,
            conditions=conditions,
            resources=resources,
            audit_writer=memory_audit,
        )
        seed.add(User(id=1, account_id=42))
        seed.grant(42, "user", Action.VIEW, [("isAdmin", "true"), ("isOwner", "true")])
        with pytest.raises(PermissionDenied):
            engine.check_request(make_request(42, "user", "1", "GET"))

        configure(on_unknown_condition="skip")
        engine.check_request(make_request(42, "user", "1", "GET"))

    def test_engine_uses_default_registries(self, isolated_authz_state, session_factory):
        _, conditions, resources = isolated_authz_state
        engine = AuthorizationEngine(session_factory)
        assert engine.conditions is conditions
        assert engine.resources is resources


class TestDenialCode:
    def test_plain_denial(self):
        assert denial_code(PermissionDenied()) == "AUTHZ_PERMISSION_DENIED"

    def test_denial_with_cause(self):
        denial = PermissionDenied()
        denial.__cause__ = UnknownConditionName(name="isAdmin")
        assert denial_code(denial) == "MODEL_ATTRIBUTE_NOT_DEFINED"

    def test_non_authz_cause_ignored(self):
        denial = PermissionDenied()
        denial.__cause__ = KeyError("x")
        assert denial_code(denial) == "AUTHZ_PERMISSION_DENIED"

    def test_invalid_request(self):
        assert denial_code(InvalidRequestShape("no controller")) == "AUTHZ_INVALID_REQUEST"
