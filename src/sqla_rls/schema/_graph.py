"""SchemaGraph — declared resources and the foreign keys between them."""

from __future__ import annotations

import contextlib
from collections.abc import Generator, Iterable, Iterator

from sqla_rls.exceptions import ConfigError, SchemaReferenceError
from sqla_rls.schema._resource import Attribute, Relationship, Resource

__all__ = ["SchemaGraph", "get_default_graph"]


class SchemaGraph:
    """Registry of resources and relationships, resolved by name.

    Relationships are validated as soon as they are declared. Inside a
    :meth:`batch` block validation is deferred to the end of the block so
    resources may reference each other in any order; a batch that fails
    validation leaves the graph untouched.

    Example::

        graph = SchemaGraph()
        graph.declare_resource("posts", [Attribute("id", "integer", primary_key=True)])
        graph.declare_resource("comments", [
            Attribute("id", "integer", primary_key=True),
            Attribute("post_id", "integer"),
        ])
        graph.declare_relationship("comments", "post_id", "posts")
        graph.freeze()
    """

    def __init__(self) -> None:
        self._resources: dict[str, Resource] = {}
        self._relationships: dict[tuple[str, str], Relationship] = {}
        self._pending_resources: dict[str, Resource] | None = None
        self._pending_relationships: list[tuple[str, str, str]] | None = None
        self._frozen = False

    # ------------------------------------------------------------------
    # Declaration
    # ------------------------------------------------------------------

    def declare_resource(
        self,
        name: str,
        attributes: Iterable[Attribute | str],
    ) -> Resource:
        """Declare a resource with its ordered attributes.

        Plain strings are accepted as shorthand for nullable text attributes.

        Args:
            name: Unique resource name (the table name).
            attributes: Attribute declarations in column order.

        Returns:
            The declared ``Resource``.

        Raises:
            ConfigError: If the graph is frozen, the name is taken, or an
                attribute name repeats.
        """
        self._check_mutable()
        if name in self._resources or (
            self._pending_resources is not None and name in self._pending_resources
        ):
            raise ConfigError(f"Resource {name!r} is already declared", resource=name)

        attrs = tuple(a if isinstance(a, Attribute) else Attribute(a) for a in attributes)
        seen: set[str] = set()
        for attr in attrs:
            if attr.name in seen:
                raise ConfigError(
                    f"Attribute {attr.name!r} is declared twice on {name!r}",
                    resource=name,
                )
            seen.add(attr.name)

        resource = Resource(name=name, attributes=attrs)
        if self._pending_resources is not None:
            self._pending_resources[name] = resource
        else:
            self._resources[name] = resource
        return resource

    def declare_relationship(
        self,
        from_resource: str,
        attribute: str,
        to_resource: str,
    ) -> Relationship | None:
        """Declare that ``from_resource.attribute`` references ``to_resource``.

        The reference targets the primary key of ``to_resource``. Outside a
        batch the edge is validated and returned immediately; inside a batch
        it is validated when the batch closes and ``None`` is returned.

        Raises:
            SchemaReferenceError: If either resource, the attribute, or the
                target's primary key cannot be resolved.
            ConfigError: If the graph is frozen or the attribute already
                carries a relationship.
        """
        self._check_mutable()
        if self._pending_relationships is not None:
            self._pending_relationships.append((from_resource, attribute, to_resource))
            return None

        relationship = self._build_relationship(
            from_resource, attribute, to_resource, self._resources
        )
        self._relationships[(from_resource, attribute)] = relationship
        return relationship

    @contextlib.contextmanager
    def batch(self) -> Generator[SchemaGraph, None, None]:
        """Declare several resources and relationships atomically.

        Example::

            with graph.batch():
                graph.declare_resource("chat_messages", [...])
                graph.declare_relationship("chat_messages", "chat_id", "chats")
                graph.declare_resource("chats", [...])
        """
        self._check_mutable()
        if self._pending_resources is not None:
            raise ConfigError("SchemaGraph batches cannot be nested")

        self._pending_resources = {}
        self._pending_relationships = []
        try:
            yield self
            staged_resources = {**self._resources, **self._pending_resources}
            staged_relationships: dict[tuple[str, str], Relationship] = {}
            for from_resource, attribute, to_resource in self._pending_relationships:
                if (from_resource, attribute) in staged_relationships:
                    raise ConfigError(
                        f"Attribute {from_resource}.{attribute} already references a resource",
                        resource=from_resource,
                    )
                staged_relationships[(from_resource, attribute)] = self._build_relationship(
                    from_resource, attribute, to_resource, staged_resources
                )
            self._check_mutable()
            self._resources = staged_resources
            self._relationships.update(staged_relationships)
        finally:
            self._pending_resources = None
            self._pending_relationships = None

    def freeze(self) -> SchemaGraph:
        """Reject further declarations. Returns the graph for chaining."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def resolve(self, name: str) -> Resource:
        """Return the declared resource called *name*.

        Raises:
            SchemaReferenceError: If no such resource is declared.
        """
        try:
            return self._resources[name]
        except KeyError:
            raise SchemaReferenceError(resource=name) from None

    def relationship(self, resource: str, attribute: str) -> Relationship:
        """Return the relationship declared on ``resource.attribute``.

        Raises:
            SchemaReferenceError: If the resource or attribute is unknown, or
                the attribute carries no relationship.
        """
        self.resolve(resource).attribute(attribute)
        try:
            return self._relationships[(resource, attribute)]
        except KeyError:
            raise SchemaReferenceError(
                resource=resource,
                attribute=attribute,
                message=f"Attribute {resource}.{attribute} does not reference another resource",
            ) from None

    def relationships(self, resource: str | None = None) -> list[Relationship]:
        """Return declared relationships, optionally only those leaving *resource*."""
        if resource is None:
            return list(self._relationships.values())
        self.resolve(resource)
        return [r for r in self._relationships.values() if r.from_resource == resource]

    def references(self, from_resource: str, to_resource: str) -> list[Relationship]:
        """Return relationships from *from_resource* that target *to_resource*."""
        self.resolve(to_resource)
        return [r for r in self.relationships(from_resource) if r.to_resource == to_resource]

    def find_cycles(self) -> list[tuple[str, ...]]:
        """Return groups of resources that reference each other in a cycle.

        Self-referencing resources form a one-element group. Groups list
        resources in declaration order.
        """
        order = {name: i for i, name in enumerate(self._resources)}
        edges: dict[str, set[str]] = {name: set() for name in self._resources}
        for rel in self._relationships.values():
            edges[rel.from_resource].add(rel.to_resource)

        index: dict[str, int] = {}
        lowlink: dict[str, int] = {}
        stack: list[str] = []
        on_stack: set[str] = set()
        cycles: list[tuple[str, ...]] = []

        def visit(node: str) -> None:
            index[node] = lowlink[node] = len(index)
            stack.append(node)
            on_stack.add(node)
            for target in edges[node]:
                if target not in index:
                    visit(target)
                    lowlink[node] = min(lowlink[node], lowlink[target])
                elif target in on_stack:
                    lowlink[node] = min(lowlink[node], index[target])
            if lowlink[node] == index[node]:
                component: list[str] = []
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    component.append(member)
                    if member == node:
                        break
                if len(component) > 1 or node in edges[node]:
                    cycles.append(tuple(sorted(component, key=order.__getitem__)))

        for name in self._resources:
            if name not in index:
                visit(name)
        return sorted(cycles, key=lambda c: order[c[0]])

    def __contains__(self, name: object) -> bool:
        return name in self._resources

    def __iter__(self) -> Iterator[Resource]:
        return iter(list(self._resources.values()))

    def __len__(self) -> int:
        return len(self._resources)

    def __repr__(self) -> str:
        return (
            f"SchemaGraph(resources={len(self._resources)}, "
            f"relationships={len(self._relationships)}, frozen={self._frozen})"
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_mutable(self) -> None:
        if self._frozen:
            raise ConfigError("SchemaGraph is frozen; no further declarations are allowed")

    def _build_relationship(
        self,
        from_resource: str,
        attribute: str,
        to_resource: str,
        resources: dict[str, Resource],
    ) -> Relationship:
        if from_resource not in resources:
            raise SchemaReferenceError(resource=from_resource)
        resources[from_resource].attribute(attribute)
        if (from_resource, attribute) in self._relationships:
            raise ConfigError(
                f"Attribute {from_resource}.{attribute} already references a resource",
                resource=from_resource,
            )
        if to_resource not in resources:
            raise SchemaReferenceError(
                resource=to_resource,
                message=(
                    f"Resource {to_resource!r} referenced by "
                    f"{from_resource}.{attribute} is not declared"
                ),
            )
        target_key = resources[to_resource].primary_key
        if target_key is None:
            raise SchemaReferenceError(
                resource=to_resource,
                message=(
                    f"Resource {to_resource!r} has no single-column primary key "
                    f"for {from_resource}.{attribute} to reference"
                ),
            )
        return Relationship(
            from_resource=from_resource,
            attribute=attribute,
            to_resource=to_resource,
            to_attribute=target_key.name,
        )


# Module-level default graph (singleton).
_default_graph = SchemaGraph()


def get_default_graph() -> SchemaGraph:
    """Return the global default (singleton) schema graph.

    This is the graph used by the predicate builders and the compiler
    when no explicit graph is provided.
    """
    return _default_graph
