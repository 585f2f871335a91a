"""Explain module — dry-run authorization checks without side effects."""

from sqla_abac.explain._check import explain_check
from sqla_abac.explain._models import CheckExplanation, ConditionEvaluation

__all__ = ["CheckExplanation", "ConditionEvaluation", "explain_check"]
