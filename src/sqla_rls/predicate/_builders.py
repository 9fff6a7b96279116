"""Predicate builders that validate their references against a SchemaGraph."""

from __future__ import annotations

from sqla_rls.exceptions import SchemaReferenceError
from sqla_rls.predicate._ast import MemberOfJoin, OwnsRow
from sqla_rls.schema._graph import SchemaGraph, get_default_graph

__all__ = ["member_of_join", "owns_row"]


def owns_row(
    resource: str,
    identity_attribute: str,
    *,
    graph: SchemaGraph | None = None,
) -> OwnsRow:
    """Predicate: the current principal's identity equals the row's *identity_attribute*.

    Used for direct ownership, e.g. a post's author column.

    Args:
        resource: The resource the predicate guards.
        identity_attribute: The column holding the owner's identity.
        graph: Optional schema graph. Defaults to the global graph.

    Raises:
        SchemaReferenceError: If the resource or attribute is not declared.

    Example::

        modify = owns_row("posts", "user_id", graph=graph)
        # renders as: auth.user_id() = posts.user_id
    """
    target = graph if graph is not None else get_default_graph()
    target.resolve(resource).attribute(identity_attribute)
    return OwnsRow(resource=resource, attribute=identity_attribute)


def member_of_join(
    resource: str,
    link_resource: str,
    link_fk_to_self: str,
    link_fk_to_identity: str,
    *,
    row_attribute: str | None = None,
    graph: SchemaGraph | None = None,
) -> MemberOfJoin:
    """Predicate: the current principal is listed in a linking resource.

    Selects ``link_fk_to_identity`` from ``link_resource`` rows whose
    ``link_fk_to_self`` equals the guarded row's key. ``link_fk_to_self``
    must be a declared relationship; its target decides which key of the
    guarded row is compared:

    - when *resource* is the target itself, its primary key;
    - otherwise the single attribute of *resource* referencing the target.

    Pass *row_attribute* to pick the key explicitly.

    Args:
        resource: The resource the predicate guards.
        link_resource: The join/participant resource.
        link_fk_to_self: Link attribute referencing the guarded side.
        link_fk_to_identity: Link attribute holding member identities.
        row_attribute: Key of the guarded row to compare against.
        graph: Optional schema graph. Defaults to the global graph.

    Raises:
        SchemaReferenceError: If any resource, attribute, or relationship
            cannot be resolved, or the row key is ambiguous.

    Example::

        # chat messages are visible to the participants of their chat
        read = member_of_join(
            "chat_messages", "chat_participants", "chat_id", "user_id", graph=graph
        )
    """
    target = graph if graph is not None else get_default_graph()
    guarded = target.resolve(resource)
    link = target.resolve(link_resource)
    link.attribute(link_fk_to_identity)
    edge = target.relationship(link_resource, link_fk_to_self)

    if row_attribute is None:
        row_attribute = _infer_row_attribute(target, resource, edge.to_resource, edge.to_attribute)
    else:
        guarded.attribute(row_attribute)

    return MemberOfJoin(
        resource=resource,
        row_attribute=row_attribute,
        link_resource=link_resource,
        link_fk_to_self=link_fk_to_self,
        link_fk_to_identity=link_fk_to_identity,
    )


def _infer_row_attribute(
    graph: SchemaGraph,
    resource: str,
    joined_resource: str,
    joined_key: str,
) -> str:
    if resource == joined_resource:
        return joined_key
    candidates = graph.references(resource, joined_resource)
    if len(candidates) != 1:
        found = ", ".join(r.attribute for r in candidates) or "none"
        raise SchemaReferenceError(
            resource=resource,
            message=(
                f"Cannot infer which attribute of {resource!r} joins {joined_resource!r} "
                f"(candidates: {found}); pass row_attribute explicitly"
            ),
        )
    return candidates[0].attribute
