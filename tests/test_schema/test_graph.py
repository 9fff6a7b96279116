"""Tests for schema/_graph.py — SchemaGraph."""

from __future__ import annotations

import pytest

from sqla_rls.exceptions import ConfigError, SchemaReferenceError
from sqla_rls.schema._graph import SchemaGraph, get_default_graph
from sqla_rls.schema._resource import Attribute, Relationship, Resource


def _posts(graph: SchemaGraph) -> Resource:
    return graph.declare_resource(
        "posts",
        [
            Attribute("id", "integer", nullable=False, primary_key=True),
            Attribute("title", "text", nullable=False),
            Attribute("content", "text", nullable=False),
            Attribute("user_id", "integer"),
        ],
    )


def _comments(graph: SchemaGraph) -> Resource:
    return graph.declare_resource(
        "comments",
        [
            Attribute("id", "integer", nullable=False, primary_key=True),
            Attribute("post_id", "integer"),
            Attribute("content", "text"),
            Attribute("user_id", "uuid"),
        ],
    )


class TestResource:
    """Resource is a frozen dataclass with attribute lookups."""

    def test_is_frozen(self):
        resource = Resource(name="posts", attributes=())
        with pytest.raises(AttributeError):
            resource.name = "other"  # type: ignore[misc]

    def test_attribute_lookup(self):
        graph = SchemaGraph()
        posts = _posts(graph)
        assert posts.attribute("title") == Attribute("title", "text", nullable=False)
        assert posts.has_attribute("user_id")
        assert not posts.has_attribute("author_id")

    def test_unknown_attribute_raises(self):
        posts = _posts(SchemaGraph())
        with pytest.raises(SchemaReferenceError) as exc_info:
            posts.attribute("author_id")
        assert exc_info.value.resource == "posts"
        assert exc_info.value.attribute == "author_id"

    def test_primary_key(self):
        posts = _posts(SchemaGraph())
        assert posts.primary_key is not None
        assert posts.primary_key.name == "id"

    def test_no_primary_key(self):
        resource = Resource(name="links", attributes=(Attribute("a"), Attribute("b")))
        assert resource.primary_key is None

    def test_composite_primary_key_is_not_single(self):
        resource = Resource(
            name="links",
            attributes=(Attribute("a", primary_key=True), Attribute("b", primary_key=True)),
        )
        assert resource.primary_key is None


class TestDeclareResource:
    def test_declare_and_resolve(self):
        graph = SchemaGraph()
        posts = _posts(graph)
        assert graph.resolve("posts") is posts
        assert "posts" in graph
        assert len(graph) == 1

    def test_string_attributes_shorthand(self):
        graph = SchemaGraph()
        resource = graph.declare_resource("tags", ["id", "label"])
        assert resource.attributes == (Attribute("id"), Attribute("label"))

    def test_attribute_order_is_kept(self):
        posts = _posts(SchemaGraph())
        assert [a.name for a in posts.attributes] == ["id", "title", "content", "user_id"]

    def test_duplicate_resource_raises(self):
        graph = SchemaGraph()
        _posts(graph)
        with pytest.raises(ConfigError) as exc_info:
            _posts(graph)
        assert exc_info.value.resource == "posts"

    def test_duplicate_attribute_raises(self):
        with pytest.raises(ConfigError, match="declared twice"):
            SchemaGraph().declare_resource("posts", ["id", "id"])

    def test_resolve_unknown_raises(self):
        with pytest.raises(SchemaReferenceError) as exc_info:
            SchemaGraph().resolve("posts")
        assert exc_info.value.resource == "posts"

    def test_iteration_in_declaration_order(self):
        graph = SchemaGraph()
        _posts(graph)
        _comments(graph)
        assert [r.name for r in graph] == ["posts", "comments"]


class TestDeclareRelationship:
    def test_undeclared_target_raises(self):
        graph = SchemaGraph()
        _comments(graph)
        with pytest.raises(SchemaReferenceError) as exc_info:
            graph.declare_relationship("comments", "post_id", "posts")
        assert exc_info.value.resource == "posts"
        assert graph.relationships() == []

    def test_declared_target_succeeds(self):
        graph = SchemaGraph()
        _comments(graph)
        _posts(graph)
        rel = graph.declare_relationship("comments", "post_id", "posts")
        assert rel == Relationship("comments", "post_id", "posts", "id")
        assert graph.relationship("comments", "post_id") == rel

    def test_unknown_source_raises(self):
        graph = SchemaGraph()
        _posts(graph)
        with pytest.raises(SchemaReferenceError) as exc_info:
            graph.declare_relationship("comments", "post_id", "posts")
        assert exc_info.value.resource == "comments"

    def test_unknown_attribute_raises(self):
        graph = SchemaGraph()
        _posts(graph)
        _comments(graph)
        with pytest.raises(SchemaReferenceError) as exc_info:
            graph.declare_relationship("comments", "article_id", "posts")
        assert exc_info.value.attribute == "article_id"

    def test_target_without_primary_key_raises(self):
        graph = SchemaGraph()
        graph.declare_resource("links", ["a", "b"])
        _comments(graph)
        with pytest.raises(SchemaReferenceError, match="primary key"):
            graph.declare_relationship("comments", "post_id", "links")

    def test_attribute_can_only_reference_once(self):
        graph = SchemaGraph()
        _posts(graph)
        _comments(graph)
        graph.declare_relationship("comments", "post_id", "posts")
        with pytest.raises(ConfigError, match="already references"):
            graph.declare_relationship("comments", "post_id", "posts")

    def test_relationship_without_edge_raises(self):
        graph = SchemaGraph()
        _posts(graph)
        with pytest.raises(SchemaReferenceError, match="does not reference"):
            graph.relationship("posts", "user_id")

    def test_relationships_filter(self):
        graph = SchemaGraph()
        _posts(graph)
        _comments(graph)
        graph.declare_resource("users", [Attribute("user_id", primary_key=True)])
        graph.declare_relationship("comments", "post_id", "posts")
        graph.declare_relationship("posts", "user_id", "users")
        assert [str(r) for r in graph.relationships("posts")] == ["posts.user_id -> users.user_id"]
        assert len(graph.relationships()) == 2
        assert graph.references("comments", "posts")[0].attribute == "post_id"
        assert graph.references("comments", "users") == []


class TestBatch:
    def test_forward_references_within_batch(self):
        graph = SchemaGraph()
        with graph.batch():
            _comments(graph)
            graph.declare_relationship("comments", "post_id", "posts")
            _posts(graph)
        assert graph.relationship("comments", "post_id").to_resource == "posts"

    def test_batch_resources_invisible_until_commit(self):
        graph = SchemaGraph()
        with graph.batch():
            _posts(graph)
            assert "posts" not in graph
        assert "posts" in graph

    def test_dangling_reference_discards_whole_batch(self):
        graph = SchemaGraph()
        with pytest.raises(SchemaReferenceError):
            with graph.batch():
                _comments(graph)
                graph.declare_relationship("comments", "post_id", "posts")
        assert len(graph) == 0
        assert graph.relationships() == []

    def test_exception_in_body_discards_batch(self):
        graph = SchemaGraph()
        with pytest.raises(RuntimeError):
            with graph.batch():
                _posts(graph)
                raise RuntimeError("boom")
        assert "posts" not in graph

    def test_graph_usable_after_failed_batch(self):
        graph = SchemaGraph()
        with pytest.raises(SchemaReferenceError):
            with graph.batch():
                _comments(graph)
                graph.declare_relationship("comments", "post_id", "posts")
        _posts(graph)
        _comments(graph)
        graph.declare_relationship("comments", "post_id", "posts")
        assert len(graph.relationships()) == 1

    def test_duplicate_in_batch_raises(self):
        graph = SchemaGraph()
        _posts(graph)
        with pytest.raises(ConfigError):
            with graph.batch():
                _posts(graph)

    def test_nested_batch_raises(self):
        graph = SchemaGraph()
        with pytest.raises(ConfigError, match="nested"):
            with graph.batch():
                with graph.batch():
                    pass


class TestFreeze:
    def test_frozen_rejects_declarations(self):
        graph = SchemaGraph()
        _posts(graph)
        assert graph.freeze() is graph
        assert graph.frozen
        with pytest.raises(ConfigError, match="frozen"):
            _comments(graph)
        with pytest.raises(ConfigError, match="frozen"):
            graph.declare_relationship("posts", "user_id", "posts")

    def test_freeze_inside_batch_discards_batch(self):
        graph = SchemaGraph()
        with pytest.raises(ConfigError, match="frozen"):
            with graph.batch():
                _posts(graph)
                _comments(graph)
                graph.declare_relationship("comments", "post_id", "posts")
                graph.freeze()
        assert len(graph) == 0
        assert graph.relationships() == []

    def test_frozen_still_resolves(self):
        graph = SchemaGraph()
        _posts(graph)
        graph.freeze()
        assert graph.resolve("posts").name == "posts"


class TestFindCycles:
    def test_acyclic(self):
        graph = SchemaGraph()
        _posts(graph)
        _comments(graph)
        graph.declare_relationship("comments", "post_id", "posts")
        assert graph.find_cycles() == []

    def test_self_reference(self):
        graph = SchemaGraph()
        graph.declare_resource("orgs", [Attribute("id", primary_key=True), "parent_id"])
        graph.declare_relationship("orgs", "parent_id", "orgs")
        assert graph.find_cycles() == [("orgs",)]

    def test_mutual_reference(self):
        graph = SchemaGraph()
        with graph.batch():
            graph.declare_resource("a", [Attribute("id", primary_key=True), "b_id"])
            graph.declare_resource("b", [Attribute("id", primary_key=True), "a_id"])
            graph.declare_resource("c", [Attribute("id", primary_key=True), "a_id"])
            graph.declare_relationship("a", "b_id", "b")
            graph.declare_relationship("b", "a_id", "a")
            graph.declare_relationship("c", "a_id", "a")
        assert graph.find_cycles() == [("a", "b")]


class TestDefaultGraph:
    def test_singleton(self):
        assert get_default_graph() is get_default_graph()
        assert isinstance(get_default_graph(), SchemaGraph)
