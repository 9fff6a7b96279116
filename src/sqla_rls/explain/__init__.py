"""Explain mode — structured insight into compiled rule sets."""

from sqla_rls.explain._models import PolicySetExplanation, ResourceExplanation, RuleExplanation
from sqla_rls.explain._rules import explain_rules

__all__ = [
    "PolicySetExplanation",
    "ResourceExplanation",
    "RuleExplanation",
    "explain_rules",
]
