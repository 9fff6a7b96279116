"""PolicyIntent, PolicyRule and PolicySet — compiler inputs and outputs."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from sqla_rls._types import Action, ClauseKind, IntentValue
from sqla_rls.exceptions import ConflictError
from sqla_rls.predicate._ast import Predicate
from sqla_rls.roles._registry import Role

__all__ = ["PolicyIntent", "PolicyRule", "PolicySet", "merge_rules"]


@dataclass(frozen=True, slots=True)
class PolicyIntent:
    """Declarative ``{read, modify}`` request for one resource and role.

    Attributes:
        resource: The resource name.
        role: The role name or ``Role``.
        read: ``True``, ``False``, a predicate, or ``None`` (absent).
        modify: ``True``, ``False``, a predicate, or ``None`` (absent).
    """

    resource: str
    role: str | Role
    read: IntentValue = None
    modify: IntentValue = None


@dataclass(frozen=True, slots=True)
class PolicyRule:
    """One compiled, action-scoped row-security permission.

    Attributes:
        resource: The guarded resource.
        action: ``"select"``, ``"insert"``, ``"update"`` or ``"delete"``.
        role: The logical role name.
        principal: The database role the policy is granted to.
        predicate: The guarding predicate.
        clause_kind: ``"using"`` for select/delete, ``"check"`` for insert/update.
        name: Explicit policy name; ``None`` uses the configured template.
    """

    resource: str
    action: Action
    role: str
    principal: str
    predicate: Predicate
    clause_kind: ClauseKind
    name: str | None = None

    @property
    def key(self) -> tuple[str, str, str]:
        """The ``(resource, action, role)`` uniqueness key."""
        return (self.resource, self.action, self.role)

    def __str__(self) -> str:
        return (
            f"{self.resource}.{self.action} to {self.role} "
            f"{self.clause_kind} {self.predicate.name}"
        )


class PolicySet:
    """Immutable, ordered collection of rules with unique keys.

    Example::

        rules = PolicySet(compile_crud("posts", role="anonymous", read=True))
        rules = rules.extend(compile_crud("posts", role="authenticated", read=True))
        len(rules)  # 2
    """

    __slots__ = ("_rules", "_index")

    def __init__(self, rules: Iterable[PolicyRule] = ()) -> None:
        index: dict[tuple[str, str, str], PolicyRule] = {}
        ordered: list[PolicyRule] = []
        for rule in rules:
            if rule.key in index:
                raise ConflictError(resource=rule.resource, action=rule.action, role=rule.role)
            index[rule.key] = rule
            ordered.append(rule)
        self._rules: tuple[PolicyRule, ...] = tuple(ordered)
        self._index = index

    def extend(self, rules: Iterable[PolicyRule]) -> PolicySet:
        """Return a new set with *rules* appended.

        Raises:
            ConflictError: If any incoming rule repeats an existing key. The
                original set is unchanged.
        """
        return PolicySet((*self._rules, *rules))

    def lookup(self, resource: str, action: str, role: str) -> PolicyRule | None:
        return self._index.get((resource, action, role))

    def for_resource(self, resource: str) -> tuple[PolicyRule, ...]:
        """Return the rules guarding *resource*, in compiled order."""
        return tuple(r for r in self._rules if r.resource == resource)

    def resources(self) -> list[str]:
        """Return guarded resource names in first-seen order."""
        return list(dict.fromkeys(r.resource for r in self._rules))

    @property
    def rules(self) -> tuple[PolicyRule, ...]:
        return self._rules

    def __iter__(self) -> Iterator[PolicyRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PolicySet):
            return NotImplemented
        return self._rules == other._rules

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"PolicySet({len(self._rules)} rules)"


def merge_rules(*rule_lists: Iterable[PolicyRule]) -> PolicySet:
    """Concatenate rule lists in call order into a ``PolicySet``.

    Raises:
        ConflictError: On the first duplicate ``(resource, action, role)``.

    Example::

        merge_rules(
            compile_crud("posts", role="anonymous", read=True),
            compile_crud("posts", role="authenticated", read=True, modify=own),
        )
    """
    return PolicySet(rule for rules in rule_lists for rule in rules)
