"""Schema graph — resources, attributes and foreign-key relationships."""

from sqla_rls.schema._graph import SchemaGraph, get_default_graph
from sqla_rls.schema._reflect import graph_from_metadata
from sqla_rls.schema._resource import Attribute, Relationship, Resource

__all__ = [
    "Attribute",
    "Relationship",
    "Resource",
    "SchemaGraph",
    "get_default_graph",
    "graph_from_metadata",
]
