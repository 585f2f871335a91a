"""Condition registry — named attribute predicates attached to grants."""

from sqla_abac.conditions._base import Condition, ConditionRegistration
from sqla_abac.conditions._builtin import FunctionCondition, Login, Owner
from sqla_abac.conditions._decorator import condition
from sqla_abac.conditions._registry import ConditionRegistry, get_default_condition_registry

__all__ = [
    "Condition",
    "ConditionRegistration",
    "ConditionRegistry",
    "FunctionCondition",
    "Login",
    "Owner",
    "condition",
    "get_default_condition_registry",
]
