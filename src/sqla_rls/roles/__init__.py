"""Roles — logical actor classes and their database principals."""

from sqla_rls.roles._registry import (
    Role,
    RoleRegistry,
    anonymous_role,
    authenticated_role,
    get_default_role_registry,
)

__all__ = [
    "Role",
    "RoleRegistry",
    "anonymous_role",
    "authenticated_role",
    "get_default_role_registry",
]
