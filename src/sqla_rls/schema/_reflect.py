"""Build a SchemaGraph from SQLAlchemy table declarations."""

from __future__ import annotations

from sqlalchemy import Column, MetaData, Table

from sqla_rls.exceptions import SchemaReferenceError
from sqla_rls.schema._graph import SchemaGraph
from sqla_rls.schema._resource import Attribute

__all__ = ["graph_from_metadata"]


def graph_from_metadata(
    metadata: MetaData,
    *,
    graph: SchemaGraph | None = None,
) -> SchemaGraph:
    """Declare every table of *metadata* as a resource, with its foreign keys.

    Tables are declared in metadata order inside a single
    :meth:`SchemaGraph.batch`, so forward references between tables are
    fine and a dangling foreign key leaves *graph* untouched.

    Args:
        metadata: SQLAlchemy ``MetaData`` holding the table declarations.
        graph: Graph to declare into. Defaults to a new ``SchemaGraph``.

    Returns:
        The populated graph.

    Raises:
        SchemaReferenceError: If a foreign key targets an undeclared table or
            a column other than the target's single primary key.

    Example::

        metadata = MetaData()
        Table("posts", metadata, Column("id", Integer, primary_key=True))
        graph = graph_from_metadata(metadata)
        graph.resolve("posts").primary_key.name  # "id"
    """
    target = graph if graph is not None else SchemaGraph()
    tables_by_name = {table.name: table for table in metadata.tables.values()}

    with target.batch():
        for table in metadata.tables.values():
            target.declare_resource(table.name, [_attribute(col) for col in table.columns])
        for table in metadata.tables.values():
            for col in table.columns:
                for fk in col.foreign_keys:
                    to_table, to_column = fk.target_fullname.split(".")[-2:]
                    _check_primary_key_target(table, col, tables_by_name.get(to_table), to_column)
                    target.declare_relationship(table.name, col.name, to_table)
    return target


def _attribute(col: Column[object]) -> Attribute:
    return Attribute(
        name=col.name,
        type=type(col.type).__name__.lower(),
        nullable=bool(col.nullable),
        primary_key=col.primary_key,
    )


def _check_primary_key_target(
    table: Table,
    col: Column[object],
    to_table: Table | None,
    to_column: str,
) -> None:
    if to_table is None:
        # Reported by the graph as an undeclared resource.
        return
    keys = [c.name for c in to_table.primary_key.columns]
    if keys != [to_column]:
        raise SchemaReferenceError(
            resource=to_table.name,
            attribute=to_column,
            message=(
                f"Foreign key {table.name}.{col.name} targets {to_table.name}.{to_column}, "
                f"which is not the single primary key of {to_table.name!r}"
            ),
        )
