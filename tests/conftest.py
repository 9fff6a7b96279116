"""Shared test fixtures for sqla-rls tests."""

from __future__ import annotations

import pytest
from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    Table,
    Text,
    Uuid,
)

from sqla_rls.compiler._crud import PolicyCompiler
from sqla_rls.config._config import RLSConfig
from sqla_rls.roles._registry import RoleRegistry
from sqla_rls.schema._graph import SchemaGraph
from sqla_rls.schema._reflect import graph_from_metadata

# ---------------------------------------------------------------------------
# Test schema — a blog with comments and a chat with participants
# ---------------------------------------------------------------------------


def make_metadata() -> MetaData:
    """Declare the test tables on a fresh ``MetaData``."""
    metadata = MetaData()

    Table(
        "users",
        metadata,
        Column("user_id", Integer, primary_key=True),
        Column("email", Text, nullable=False, unique=True),
        Column("created_at", DateTime, nullable=False),
    )
    Table(
        "user_profiles",
        metadata,
        Column("user_id", Integer, ForeignKey("users.user_id")),
        Column("name", Text),
    )
    # chat_messages is declared before chats on purpose: forward reference
    Table(
        "chat_messages",
        metadata,
        Column("id", Integer, primary_key=True),
        Column("message", Text, nullable=False),
        Column("chat_id", Integer, ForeignKey("chats.id")),
        Column("sender", Uuid, nullable=False),
    )
    Table(
        "chat_participants",
        metadata,
        Column("chat_id", Integer, ForeignKey("chats.id")),
        Column("user_id", Integer, ForeignKey("users.user_id")),
    )
    Table(
        "chats",
        metadata,
        Column("id", Integer, primary_key=True),
        Column("title", Text, nullable=False),
    )
    Table(
        "posts",
        metadata,
        Column("id", Integer, primary_key=True),
        Column("title", Text, nullable=False),
        Column("content", Text, nullable=False),
        Column("user_id", Integer, ForeignKey("users.user_id")),
    )
    Table(
        "comments",
        metadata,
        Column("id", Integer, primary_key=True),
        Column("post_id", Integer, ForeignKey("posts.id")),
        Column("content", Text),
        Column("user_id", Uuid),
    )
    return metadata


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def metadata() -> MetaData:
    return make_metadata()


@pytest.fixture()
def graph(metadata: MetaData) -> SchemaGraph:
    """A frozen graph of the test schema."""
    return graph_from_metadata(metadata).freeze()


@pytest.fixture()
def roles() -> RoleRegistry:
    """A role registry with the built-in roles and a custom moderator."""
    registry = RoleRegistry()
    registry.register_role("moderator", principal="app_moderator")
    return registry


@pytest.fixture()
def config() -> RLSConfig:
    return RLSConfig()


@pytest.fixture()
def compiler(graph: SchemaGraph, roles: RoleRegistry, config: RLSConfig) -> PolicyCompiler:
    return PolicyCompiler(graph=graph, roles=roles, config=config)


@pytest.fixture()
def participants() -> dict[str, list[dict[str, int]]]:
    """Link rows for membership checks: users 10 and 11 are in chat 1."""
    return {
        "chat_participants": [
            {"chat_id": 1, "user_id": 10},
            {"chat_id": 1, "user_id": 11},
            {"chat_id": 2, "user_id": 12},
        ]
    }
