"""Isolation utilities for global sqla-rls state in tests."""

from __future__ import annotations

import contextlib
from collections.abc import Generator

from sqla_rls.config._config import (
    RLSConfig,
    _set_global_config,  # pyright: ignore[reportPrivateUsage]
    get_global_config,
)
from sqla_rls.roles._registry import RoleRegistry, get_default_role_registry
from sqla_rls.schema._graph import SchemaGraph, get_default_graph

__all__ = ["isolated_rls"]


@contextlib.contextmanager
def isolated_rls(
    *,
    config: RLSConfig | None = None,
) -> Generator[tuple[RLSConfig, SchemaGraph, RoleRegistry], None, None]:
    """Context manager that provides isolated global sqla-rls state.

    Saves the global config, default schema graph and default role
    registry, resets them (the graph to empty, the registry to the two
    built-in roles), yields them, and restores the saved state on exit,
    even if the body raises.

    Args:
        config: Optional config to install during the block. If None,
            the defaults are used.

    Yields:
        A tuple of ``(RLSConfig, SchemaGraph, RoleRegistry)``.

    Example::

        with isolated_rls() as (cfg, graph, roles):
            graph.declare_resource("posts", [Attribute("id", primary_key=True)])
            roles.register_role("moderator")
        # "posts" and "moderator" are gone again
    """
    saved_config = get_global_config()
    graph = get_default_graph()
    roles = get_default_role_registry()
    saved_graph = (dict(graph._resources), dict(graph._relationships), graph._frozen)  # pyright: ignore[reportPrivateUsage]
    saved_roles = dict(roles._roles)  # pyright: ignore[reportPrivateUsage]

    try:
        _set_global_config(config if config is not None else RLSConfig())
        graph._resources, graph._relationships, graph._frozen = {}, {}, False  # pyright: ignore[reportPrivateUsage]
        roles._roles = dict(RoleRegistry()._roles)  # pyright: ignore[reportPrivateUsage]

        yield get_global_config(), graph, roles
    finally:
        _set_global_config(saved_config)
        graph._resources, graph._relationships, graph._frozen = saved_graph  # pyright: ignore[reportPrivateUsage]
        roles._roles = saved_roles  # pyright: ignore[reportPrivateUsage]
