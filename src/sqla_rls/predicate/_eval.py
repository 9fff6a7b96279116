"""In-memory predicate evaluator.

Checks a predicate against a single row and a principal identity without
a database, following SQL's NULL semantics: a comparison involving a
missing identity or a NULL column never matches.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from sqla_rls.exceptions import ValidationError
from sqla_rls.predicate._ast import And, Constant, MemberOfJoin, Not, Or, OwnsRow, Predicate

__all__ = ["evaluate"]

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]


def evaluate(
    predicate: Predicate,
    row: Row,
    principal: Any,
    *,
    tables: Mapping[str, Iterable[Row]] | None = None,
) -> bool:
    """Evaluate *predicate* for *principal* against *row*.

    Args:
        predicate: The predicate to evaluate.
        row: Column values of the guarded row.
        principal: The current principal's identity (``None`` for anonymous).
        tables: Rows of linking resources, keyed by resource name, used by
            ``MemberOfJoin``. A missing resource counts as empty.

    Returns:
        ``True`` if the predicate holds, ``False`` otherwise.

    Example::

        pred = owns_row("posts", "user_id", graph=graph)
        evaluate(pred, {"id": 1, "user_id": 10}, 10)  # True
        evaluate(pred, {"id": 1, "user_id": 11}, 10)  # False
    """
    return _eval(predicate, row, principal, tables or {})


def _eval(
    pred: Predicate,
    row: Row,
    principal: Any,
    tables: Mapping[str, Iterable[Row]],
) -> bool:
    if isinstance(pred, Constant):
        return pred.value
    if isinstance(pred, OwnsRow):
        return _matches(principal, row.get(pred.attribute))
    if isinstance(pred, MemberOfJoin):
        return _eval_membership(pred, row, principal, tables)
    if isinstance(pred, And):
        return all(_eval(p, row, principal, tables) for p in pred.operands)
    if isinstance(pred, Or):
        return any(_eval(p, row, principal, tables) for p in pred.operands)
    if isinstance(pred, Not):
        return not _eval(pred.operand, row, principal, tables)
    raise ValidationError(f"Unsupported predicate type: {type(pred).__name__}")


def _eval_membership(
    pred: MemberOfJoin,
    row: Row,
    principal: Any,
    tables: Mapping[str, Iterable[Row]],
) -> bool:
    key = row.get(pred.row_attribute)
    if key is None or principal is None:
        return False
    if pred.link_resource not in tables:
        logger.debug(
            "No rows supplied for %r; membership %s denies",
            pred.link_resource,
            pred.name,
        )
        return False
    return any(
        _matches(key, link.get(pred.link_fk_to_self))
        and _matches(principal, link.get(pred.link_fk_to_identity))
        for link in tables[pred.link_resource]
    )


def _matches(left: Any, right: Any) -> bool:
    if left is None or right is None:
        return False
    try:
        return bool(left == right)
    except TypeError:
        return False
