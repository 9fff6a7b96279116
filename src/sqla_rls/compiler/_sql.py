"""Predicate serialization — turn predicate trees into SQLAlchemy expressions."""

from __future__ import annotations

from typing import Any

from sqlalchemy import ColumnElement, and_, false, func, literal_column, not_, or_, select, true
from sqlalchemy.dialects import postgresql
from sqlalchemy.engine import Dialect
from sqlalchemy.sql import column, table

from sqla_rls.config._config import RLSConfig, get_global_config
from sqla_rls.exceptions import ValidationError
from sqla_rls.predicate._ast import And, Constant, MemberOfJoin, Not, Or, OwnsRow, Predicate

__all__ = ["compile_predicate_sql", "to_sql_expression"]


def to_sql_expression(
    predicate: Predicate,
    *,
    config: RLSConfig | None = None,
    dialect: Dialect | None = None,
) -> ColumnElement[bool]:
    """Convert a predicate into a SQLAlchemy boolean expression.

    The current principal is rendered as a call to the configured
    ``identity_function``. Membership subqueries alias the linking table
    and refer to the guarded row by its qualified column name, so the
    expression can be placed in a ``CREATE POLICY`` clause as-is.

    Args:
        predicate: The predicate to convert.
        config: Optional config. Defaults to the global config.
        dialect: Dialect used to quote outer-row references. Defaults to
            PostgreSQL.

    Returns:
        A ``ColumnElement[bool]``.

    Example::

        expr = to_sql_expression(owns_row("posts", "user_id", graph=graph))
        # auth.user_id() = posts.user_id
    """
    cfg = config if config is not None else get_global_config()
    target_dialect = dialect if dialect is not None else postgresql.dialect()
    return _convert(predicate, _identity(cfg), target_dialect)


def compile_predicate_sql(
    predicate: Predicate,
    *,
    config: RLSConfig | None = None,
    dialect: Dialect | None = None,
) -> str:
    """Render a predicate as SQL text with literal values inlined."""
    target_dialect = dialect if dialect is not None else postgresql.dialect()
    expr = to_sql_expression(predicate, config=config, dialect=target_dialect)
    return str(expr.compile(dialect=target_dialect, compile_kwargs={"literal_binds": True}))


def _identity(config: RLSConfig) -> ColumnElement[Any]:
    fn: Any = func
    for part in config.identity_function.split("."):
        fn = getattr(fn, part)
    return fn()


def _convert(
    pred: Predicate,
    identity: ColumnElement[Any],
    dialect: Dialect,
) -> ColumnElement[bool]:
    if isinstance(pred, Constant):
        return true() if pred.value else false()

    if isinstance(pred, OwnsRow):
        guarded = table(pred.resource, column(pred.attribute))
        return identity == guarded.c[pred.attribute]

    if isinstance(pred, MemberOfJoin):
        names = dict.fromkeys((pred.link_fk_to_self, pred.link_fk_to_identity))
        link = table(pred.link_resource, *(column(n) for n in names)).alias(
            f"{pred.link_resource}_link"
        )
        preparer = dialect.identifier_preparer
        row_key = literal_column(
            f"{preparer.quote(pred.resource)}.{preparer.quote(pred.row_attribute)}"
        )
        members = select(link.c[pred.link_fk_to_identity]).where(
            link.c[pred.link_fk_to_self] == row_key
        )
        return identity.in_(members)

    if isinstance(pred, And):
        return and_(*(_convert(p, identity, dialect) for p in pred.operands))
    if isinstance(pred, Or):
        return or_(*(_convert(p, identity, dialect) for p in pred.operands))
    if isinstance(pred, Not):
        return not_(_convert(pred.operand, identity, dialect))

    raise ValidationError(f"Unsupported predicate type: {type(pred).__name__}")
