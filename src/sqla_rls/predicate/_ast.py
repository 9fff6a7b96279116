"""Predicate expression tree for row-security conditions.

Predicates are plain immutable data. They never touch a database; the
compiler serializes them to SQLAlchemy expressions and the evaluator
checks them against in-memory rows.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

__all__ = [
    "And",
    "Constant",
    "MemberOfJoin",
    "Not",
    "Or",
    "OwnsRow",
    "Predicate",
    "always_allow",
    "always_deny",
]


class Predicate:
    """Base class for predicate nodes.

    Supports ``&`` (AND), ``|`` (OR), and ``~`` (NOT) composition.

    Example::

        own = owns_row("posts", "user_id", graph=graph)
        combined = own | always_deny
        combined.name  # "(owns_row(posts.user_id) | always_deny)"
    """

    __slots__ = ()

    def __and__(self, other: Predicate) -> Predicate:
        return And(operands=(*_operands(self, And), *_operands(other, And)))

    def __or__(self, other: Predicate) -> Predicate:
        return Or(operands=(*_operands(self, Or), *_operands(other, Or)))

    def __invert__(self) -> Predicate:
        return Not(operand=self)

    @property
    def name(self) -> str:
        """The human-readable name of this predicate."""
        raise NotImplementedError

    def children(self) -> tuple[Predicate, ...]:
        return ()

    def leaves(self) -> Iterator[Predicate]:
        """Yield every non-composite node, depth first."""
        kids = self.children()
        if not kids:
            yield self
            return
        for child in kids:
            yield from child.leaves()


def _operands(pred: Predicate, kind: type) -> tuple[Predicate, ...]:
    if not isinstance(pred, Predicate):
        raise TypeError(f"Cannot combine a predicate with {type(pred).__name__}")
    if isinstance(pred, kind):
        return pred.children()
    return (pred,)


@dataclass(frozen=True, slots=True)
class Constant(Predicate):
    """Unconditional allow (``True``) or deny (``False``)."""

    value: bool

    @property
    def name(self) -> str:
        return "always_allow" if self.value else "always_deny"


@dataclass(frozen=True, slots=True)
class OwnsRow(Predicate):
    """The current principal's identity equals ``resource.attribute``."""

    resource: str
    attribute: str

    @property
    def name(self) -> str:
        return f"owns_row({self.resource}.{self.attribute})"


@dataclass(frozen=True, slots=True)
class MemberOfJoin(Predicate):
    """The current principal appears in a linking resource.

    True when some ``link_resource`` row has ``link_fk_to_self`` equal to
    the evaluated row's ``row_attribute`` and ``link_fk_to_identity`` equal
    to the current principal's identity.
    """

    resource: str
    row_attribute: str
    link_resource: str
    link_fk_to_self: str
    link_fk_to_identity: str

    @property
    def name(self) -> str:
        return (
            f"member_of_join({self.link_resource}.{self.link_fk_to_identity} "
            f"where {self.link_resource}.{self.link_fk_to_self} = "
            f"{self.resource}.{self.row_attribute})"
        )


@dataclass(frozen=True, slots=True)
class And(Predicate):
    operands: tuple[Predicate, ...]

    @property
    def name(self) -> str:
        return "(" + " & ".join(p.name for p in self.operands) + ")"

    def children(self) -> tuple[Predicate, ...]:
        return self.operands


@dataclass(frozen=True, slots=True)
class Or(Predicate):
    operands: tuple[Predicate, ...]

    @property
    def name(self) -> str:
        return "(" + " | ".join(p.name for p in self.operands) + ")"

    def children(self) -> tuple[Predicate, ...]:
        return self.operands


@dataclass(frozen=True, slots=True)
class Not(Predicate):
    operand: Predicate

    @property
    def name(self) -> str:
        return f"~{self.operand.name}"

    def children(self) -> tuple[Predicate, ...]:
        return (self.operand,)


# Built-in predicates

always_allow: Predicate = Constant(True)
always_deny: Predicate = Constant(False)
