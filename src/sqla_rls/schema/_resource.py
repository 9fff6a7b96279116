"""Resource, Attribute and Relationship dataclasses."""

from __future__ import annotations

from dataclasses import dataclass

from sqla_rls.exceptions import SchemaReferenceError

__all__ = ["Attribute", "Relationship", "Resource"]


@dataclass(frozen=True, slots=True)
class Attribute:
    """A single column of a resource.

    Attributes:
        name: The column name as it appears in SQL.
        type: Semantic type name (e.g. ``"integer"``, ``"text"``, ``"uuid"``).
        nullable: Whether the column accepts NULL.
        primary_key: Whether the column is (part of) the primary key.
    """

    name: str
    type: str = "text"
    nullable: bool = True
    primary_key: bool = False


@dataclass(frozen=True, slots=True)
class Resource:
    """A declared table with its ordered attributes.

    Example::

        posts = Resource(
            name="posts",
            attributes=(Attribute("id", "integer", nullable=False, primary_key=True),),
        )
        posts.primary_key.name  # "id"
    """

    name: str
    attributes: tuple[Attribute, ...]

    def has_attribute(self, name: str) -> bool:
        return any(a.name == name for a in self.attributes)

    def attribute(self, name: str) -> Attribute:
        """Return the attribute called *name*.

        Raises:
            SchemaReferenceError: If the resource has no such attribute.
        """
        for attr in self.attributes:
            if attr.name == name:
                return attr
        raise SchemaReferenceError(resource=self.name, attribute=name)

    @property
    def primary_key(self) -> Attribute | None:
        """The single primary key attribute, or ``None`` if absent or composite."""
        keys = [a for a in self.attributes if a.primary_key]
        if len(keys) != 1:
            return None
        return keys[0]


@dataclass(frozen=True, slots=True)
class Relationship:
    """A foreign-key edge ``from_resource.attribute -> to_resource.to_attribute``."""

    from_resource: str
    attribute: str
    to_resource: str
    to_attribute: str

    def __str__(self) -> str:
        return f"{self.from_resource}.{self.attribute} -> {self.to_resource}.{self.to_attribute}"
