"""Tests for sqla_rls.testing._fixtures — pytest fixture functions."""

from __future__ import annotations

from sqla_rls.config._config import RLSConfig
from sqla_rls.roles._registry import RoleRegistry
from sqla_rls.schema._graph import SchemaGraph, get_default_graph


class TestRLSGraphFixture:
    """rls_graph returns isolated SchemaGraph instances."""

    def test_returns_graph(self, rls_graph: SchemaGraph) -> None:
        assert isinstance(rls_graph, SchemaGraph)
        assert rls_graph is not get_default_graph()

    def test_isolated_between_tests_a(self, rls_graph: SchemaGraph) -> None:
        """Declare a resource in one test..."""
        rls_graph.declare_resource("posts", ["id"])
        assert "posts" in rls_graph

    def test_isolated_between_tests_b(self, rls_graph: SchemaGraph) -> None:
        """...and verify it does not leak to another test."""
        assert "posts" not in rls_graph


class TestRLSRolesFixture:
    def test_builtin_roles_only(self, rls_roles: RoleRegistry) -> None:
        assert [r.name for r in rls_roles.roles()] == ["anonymous", "authenticated"]


class TestRLSConfigFixture:
    def test_defaults(self, rls_config: RLSConfig) -> None:
        assert rls_config == RLSConfig()


class TestIsolatedStateFixture:
    def test_yields_default_objects(self, isolated_rls_state) -> None:
        cfg, graph, roles = isolated_rls_state
        assert cfg == RLSConfig()
        assert graph is get_default_graph()
        assert len(graph) == 0
        roles.register_role("editor")

    def test_registration_did_not_leak(self, isolated_rls_state) -> None:
        _, _, roles = isolated_rls_state
        assert "editor" not in roles
