"""sqla-rls — compile declarative CRUD intents into PostgreSQL row-level security.

Describes tables as a schema graph, roles as a registry, and row
conditions as predicate trees, then compiles per-role ``{read, modify}``
intents into ordered ``CREATE POLICY`` rules. No database connection
is needed to compile or render.

Example::

    from sqla_rls import RLSConfig, compile_crud, graph_from_metadata, owns_row, policy_ddl

    graph = graph_from_metadata(metadata)
    rules = compile_crud("posts", role="anonymous", read=True, graph=graph)
    rules += compile_crud(
        "posts",
        role="authenticated",
        read=True,
        modify=owns_row("posts", "user_id", graph=graph),
        graph=graph,
    )
    # Two roles share a table, so policy names must include the role
    config = RLSConfig(policy_name_template="{resource}-{action}-{role}")
    for stmt in policy_ddl(rules, config=config):
        print(stmt)
"""

from importlib.metadata import PackageNotFoundError, version

from sqla_rls.compiler._crud import PolicyCompiler, compile_crud, compile_rule
from sqla_rls.compiler._rules import PolicyIntent, PolicyRule, PolicySet, merge_rules
from sqla_rls.config._config import RLSConfig, configure
from sqla_rls.ddl._postgres import policy_ddl
from sqla_rls.exceptions import (
    ConfigError,
    ConflictError,
    RLSError,
    SchemaReferenceError,
    ValidationError,
)
from sqla_rls.explain._rules import explain_rules
from sqla_rls.predicate._ast import Predicate, always_allow, always_deny
from sqla_rls.predicate._builders import member_of_join, owns_row
from sqla_rls.predicate._eval import evaluate
from sqla_rls.roles._registry import Role, RoleRegistry, anonymous_role, authenticated_role
from sqla_rls.schema._graph import SchemaGraph
from sqla_rls.schema._reflect import graph_from_metadata
from sqla_rls.schema._resource import Attribute, Resource

try:
    __version__ = version("sqla-rls")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = [
    "__version__",
    "Attribute",
    "ConfigError",
    "ConflictError",
    "PolicyCompiler",
    "PolicyIntent",
    "PolicyRule",
    "PolicySet",
    "Predicate",
    "RLSConfig",
    "RLSError",
    "Resource",
    "Role",
    "RoleRegistry",
    "SchemaGraph",
    "SchemaReferenceError",
    "ValidationError",
    "always_allow",
    "always_deny",
    "anonymous_role",
    "authenticated_role",
    "compile_crud",
    "compile_rule",
    "configure",
    "evaluate",
    "explain_rules",
    "graph_from_metadata",
    "member_of_join",
    "merge_rules",
    "owns_row",
    "policy_ddl",
]
