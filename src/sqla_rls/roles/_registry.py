"""RoleRegistry — logical role names mapped to database principals."""

from __future__ import annotations

from dataclasses import dataclass

from sqla_rls._types import RoleKind
from sqla_rls.exceptions import ConfigError

__all__ = [
    "Role",
    "RoleRegistry",
    "anonymous_role",
    "authenticated_role",
    "get_default_role_registry",
]


@dataclass(frozen=True, slots=True)
class Role:
    """A class of acting principals.

    Attributes:
        name: Logical role name used in intents.
        kind: ``"anonymous"``, ``"authenticated"`` or ``"custom"``.
        principal: The database role policies are granted ``TO``.
    """

    name: str
    kind: RoleKind
    principal: str

    def __str__(self) -> str:
        return self.name


# Roles every registry starts with.
anonymous_role = Role(name="anonymous", kind="anonymous", principal="anonymous")
authenticated_role = Role(name="authenticated", kind="authenticated", principal="authenticated")

_BUILTIN_ROLES: tuple[Role, ...] = (anonymous_role, authenticated_role)


class RoleRegistry:
    """Registry of roles keyed by name.

    ``anonymous`` and ``authenticated`` are always present and cannot be
    replaced. Further roles must be of kind ``"custom"``.

    Example::

        roles = RoleRegistry()
        roles.register_role("moderator", principal="app_moderator")
        roles.resolve("moderator").principal  # "app_moderator"
    """

    def __init__(self) -> None:
        self._roles: dict[str, Role] = {role.name: role for role in _BUILTIN_ROLES}

    def register_role(
        self,
        name: str,
        kind: RoleKind = "custom",
        *,
        principal: str | None = None,
    ) -> Role:
        """Register a custom role.

        Args:
            name: Unique logical role name.
            kind: Must be ``"custom"``; the two built-in kinds are taken.
            principal: Database role name. Defaults to *name*.

        Returns:
            The registered ``Role``.

        Raises:
            ConfigError: If *name* is already registered or *kind* is not
                ``"custom"``.
        """
        if name in self._roles:
            raise ConfigError(f"Role {name!r} is already registered", role=name)
        if kind != "custom":
            raise ConfigError(
                f"Only custom roles can be registered; {kind!r} is predeclared",
                role=name,
            )
        role = Role(name=name, kind=kind, principal=principal or name)
        self._roles[name] = role
        return role

    def resolve(self, role: str | Role) -> Role:
        """Return the registered role for a name or ``Role``.

        A ``Role`` instance resolves only if it is the one registered under
        its name.

        Raises:
            ConfigError: If the role is not registered.
        """
        name = role.name if isinstance(role, Role) else role
        registered = self._roles.get(name)
        if registered is None or (isinstance(role, Role) and registered != role):
            raise ConfigError(f"Role {name!r} is not registered", role=name)
        return registered

    def roles(self) -> list[Role]:
        """Return all registered roles in registration order."""
        return list(self._roles.values())

    def __contains__(self, name: object) -> bool:
        return name in self._roles

    def __repr__(self) -> str:
        return f"RoleRegistry({', '.join(self._roles)})"


# Module-level default registry (singleton).
_default_role_registry = RoleRegistry()


def get_default_role_registry() -> RoleRegistry:
    """Return the global default (singleton) role registry."""
    return _default_role_registry
