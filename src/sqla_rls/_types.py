"""Shared type aliases for sqla-rls."""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal, Union

if TYPE_CHECKING:
    from sqla_rls.predicate._ast import Predicate

__all__ = [
    "ACTIONS",
    "Action",
    "ClauseKind",
    "IntentValue",
    "MODIFY_ACTIONS",
    "RoleKind",
]

# Row-security commands a compiled rule can target.
Action = Literal["select", "insert", "update", "delete"]

# ``using`` guards rows that must already match; ``check`` guards new rows.
ClauseKind = Literal["using", "check"]

# Semantic kinds of roles.
RoleKind = Literal["anonymous", "authenticated", "custom"]

# Valid values for the ``read`` and ``modify`` halves of an intent.
IntentValue = Union[bool, "Predicate", None]

# Canonical emission order.
ACTIONS: tuple[Action, ...] = ("select", "insert", "update", "delete")

# Actions derived from ``modify``; always emitted together.
MODIFY_ACTIONS: tuple[Action, ...] = ("insert", "update", "delete")
