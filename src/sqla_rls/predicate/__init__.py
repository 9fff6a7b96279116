"""Predicates — row conditions over the current principal."""

from sqla_rls.predicate._ast import (
    And,
    Constant,
    MemberOfJoin,
    Not,
    Or,
    OwnsRow,
    Predicate,
    always_allow,
    always_deny,
)
from sqla_rls.predicate._builders import member_of_join, owns_row
from sqla_rls.predicate._eval import evaluate

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
    "evaluate",
    "member_of_join",
    "owns_row",
]
