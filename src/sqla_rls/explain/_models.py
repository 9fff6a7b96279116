"""Data models for explain output."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

__all__ = [
    "PolicySetExplanation",
    "ResourceExplanation",
    "RuleExplanation",
]


@dataclass(frozen=True, slots=True)
class RuleExplanation:
    """How a single compiled rule will be installed.

    Attributes:
        name: Policy name.
        action: The row-security command.
        role: Logical role name.
        principal: Database role the policy is granted to.
        clause_kind: ``"using"`` or ``"check"``.
        predicate: Human-readable predicate name.
        predicate_sql: Rendered SQL condition.
    """

    name: str
    action: str
    role: str
    principal: str
    clause_kind: str
    predicate: str
    predicate_sql: str

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dictionary."""
        return {
            "name": self.name,
            "action": self.action,
            "role": self.role,
            "principal": self.principal,
            "clause_kind": self.clause_kind,
            "predicate": self.predicate,
            "predicate_sql": self.predicate_sql,
        }


@dataclass(frozen=True, slots=True)
class ResourceExplanation:
    """All rules guarding one resource.

    Attributes:
        resource: The resource name.
        rules: Per-rule explanations in compiled order.
        denied: For each role, the actions it has no rule for (and so
            cannot perform once row security is enabled).
    """

    resource: str
    rules: list[RuleExplanation]
    denied: dict[str, list[str]]

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dictionary."""
        return {
            "resource": self.resource,
            "rules": [r.to_dict() for r in self.rules],
            "denied": {role: list(actions) for role, actions in self.denied.items()},
        }


@dataclass(frozen=True, slots=True)
class PolicySetExplanation:
    """Explanation of a full compiled rule set.

    Attributes:
        resources: Per-resource explanations in first-seen order.
        rule_count: Total number of rules.
    """

    resources: list[ResourceExplanation]
    rule_count: int

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dictionary."""
        return {
            "resources": [r.to_dict() for r in self.resources],
            "rule_count": self.rule_count,
        }

    def __str__(self) -> str:
        """Return a human-readable multi-line explanation."""
        lines: list[str] = [f"Row-level security: {self.rule_count} rule(s)"]
        for resource in self.resources:
            lines.append("")
            lines.append(f"  Resource: {resource.resource}")
            for rule in resource.rules:
                lines.append(f"    - {rule.name} [{rule.action} to {rule.role}]: {rule.predicate}")
                lines.append(f"      {rule.clause_kind.upper()}: {rule.predicate_sql}")
            for role, actions in resource.denied.items():
                if actions:
                    lines.append(f"    DENIED to {role}: {', '.join(actions)}")
        return "\n".join(lines)
