"""Exception hierarchy for sqla-rls."""

from __future__ import annotations

__all__ = [
    "ConfigError",
    "ConflictError",
    "RLSError",
    "SchemaReferenceError",
    "ValidationError",
]


class RLSError(Exception):
    """Base exception for all sqla-rls errors."""


class ConfigError(RLSError):
    """A role or schema declaration is not usable as configured.

    Raised for unknown or duplicate role names, illegal role kinds,
    duplicate resource declarations, and declarations made after a
    ``SchemaGraph`` has been frozen.

    Attributes:
        role: The role name involved, if any.
        resource: The resource name involved, if any.

    Example::

        try:
            roles.resolve("moderator")
        except ConfigError as exc:
            print(exc.role)  # "moderator"
    """

    def __init__(
        self,
        message: str,
        *,
        role: str | None = None,
        resource: str | None = None,
    ) -> None:
        self.role = role
        self.resource = resource
        super().__init__(message)


class SchemaReferenceError(RLSError):
    """A resource, attribute, or relationship is not declared in the graph.

    Attributes:
        resource: The resource that was looked up (or that owns the attribute).
        attribute: The missing attribute, if the lookup was for an attribute.

    Example::

        graph.declare_relationship("comments", "post_id", "posts")
        # SchemaReferenceError: Resource 'posts' is not declared
    """

    def __init__(
        self,
        *,
        resource: str,
        attribute: str | None = None,
        message: str | None = None,
    ) -> None:
        self.resource = resource
        self.attribute = attribute
        if message is None:
            if attribute is None:
                message = f"Resource {resource!r} is not declared"
            else:
                message = f"Resource {resource!r} has no attribute {attribute!r}"
        super().__init__(message)


class ValidationError(RLSError):
    """A policy intent or predicate is malformed.

    Raised when ``read``/``modify`` is neither a boolean nor a predicate,
    when a predicate is anchored to a different resource, or when a
    ``select`` rule would be emitted without a resolvable predicate.

    Attributes:
        resource: The resource being compiled.
        role: The role being compiled.
        action: The action whose rule could not be built, if known.
    """

    def __init__(
        self,
        message: str,
        *,
        resource: str | None = None,
        role: str | None = None,
        action: str | None = None,
    ) -> None:
        self.resource = resource
        self.role = role
        self.action = action
        super().__init__(message)


class ConflictError(RLSError):
    """Two compiled rules collide.

    Raised when a rule set would contain two rules for the same
    ``(resource, action, role)`` key, or when two rules render to the
    same policy name.

    Attributes:
        resource: The resource of the colliding rules.
        action: The action of the colliding rules.
        role: The role of the incoming rule.
        name: The colliding policy name, for name collisions.

    Example::

        rules = compile_crud("posts", role="anonymous", read=True)
        merge_rules(rules, rules)
        # ConflictError: Duplicate rule for (posts, select, anonymous)
    """

    def __init__(
        self,
        *,
        resource: str,
        action: str,
        role: str,
        name: str | None = None,
        message: str | None = None,
    ) -> None:
        self.resource = resource
        self.action = action
        self.role = role
        self.name = name
        if message is None:
            if name is None:
                message = f"Duplicate rule for ({resource}, {action}, {role})"
            else:
                message = (
                    f"Policy name {name!r} is already used on {resource}; "
                    f"rule ({resource}, {action}, {role}) collides"
                )
        super().__init__(message)
