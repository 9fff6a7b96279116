"""PostgreSQL row-level security DDL for compiled rules.

``CREATE POLICY`` and ``ALTER TABLE ... ENABLE ROW LEVEL SECURITY`` are
modelled as executable SQLAlchemy DDL elements, so callers can either
render them to text or hand them to ``Connection.execute`` themselves.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from sqlalchemy.dialects import postgresql
from sqlalchemy.engine import Dialect
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.schema import ExecutableDDLElement
from sqlalchemy.sql.compiler import DDLCompiler

from sqla_rls.compiler._rules import PolicyRule
from sqla_rls.compiler._sql import to_sql_expression
from sqla_rls.config._config import RLSConfig, get_global_config
from sqla_rls.exceptions import ConflictError

__all__ = [
    "CreatePolicy",
    "EnableRowLevelSecurity",
    "policy_ddl",
    "policy_ddl_elements",
    "policy_name",
]


class CreatePolicy(ExecutableDDLElement):
    """``CREATE POLICY`` for a single compiled rule."""

    inherit_cache = False

    def __init__(self, rule: PolicyRule, *, name: str, config: RLSConfig | None = None) -> None:
        self.rule = rule
        self.name = name
        self.config = config


class EnableRowLevelSecurity(ExecutableDDLElement):
    """``ALTER TABLE ... ENABLE ROW LEVEL SECURITY``."""

    inherit_cache = False

    def __init__(self, resource: str) -> None:
        self.resource = resource


@compiles(CreatePolicy)
def _compile_create_policy(element: CreatePolicy, compiler: DDLCompiler, **kw: Any) -> str:
    rule = element.rule
    preparer = compiler.preparer
    expr = to_sql_expression(rule.predicate, config=element.config, dialect=compiler.dialect)
    condition = compiler.sql_compiler.process(expr, literal_binds=True)
    clause = "USING" if rule.clause_kind == "using" else "WITH CHECK"
    return (
        f"CREATE POLICY {preparer.quote(element.name)} ON {preparer.quote(rule.resource)} "
        f"AS PERMISSIVE FOR {rule.action.upper()} TO {preparer.quote(rule.principal)} "
        f"{clause} ({condition})"
    )


@compiles(EnableRowLevelSecurity)
def _compile_enable_rls(
    element: EnableRowLevelSecurity, compiler: DDLCompiler, **kw: Any
) -> str:
    return f"ALTER TABLE {compiler.preparer.quote(element.resource)} ENABLE ROW LEVEL SECURITY"


def policy_name(rule: PolicyRule, *, config: RLSConfig | None = None) -> str:
    """Return the policy name for *rule*.

    An explicit ``rule.name`` wins; otherwise the configured
    ``policy_name_template`` is filled with the rule's resource, action
    and role.

    Example::

        policy_name(rule)  # "posts-select"
    """
    if rule.name is not None:
        return rule.name
    cfg = config if config is not None else get_global_config()
    return cfg.policy_name_template.format(
        resource=rule.resource, action=rule.action, role=rule.role
    )


def policy_ddl_elements(
    rules: Iterable[PolicyRule],
    *,
    config: RLSConfig | None = None,
) -> list[ExecutableDDLElement]:
    """Build the DDL elements that install *rules*.

    One ``EnableRowLevelSecurity`` per guarded resource (in first-seen
    order, when ``enable_row_level_security`` is on) precedes one
    ``CreatePolicy`` per rule in rule order.

    Raises:
        ConflictError: If two rules on the same resource share a policy
            name, e.g. rules for different roles under the default
            ``"{resource}-{action}"`` template.
    """
    cfg = config if config is not None else get_global_config()
    rule_list = list(rules)

    taken: dict[tuple[str, str], PolicyRule] = {}
    policies: list[ExecutableDDLElement] = []
    for rule in rule_list:
        name = policy_name(rule, config=cfg)
        if (rule.resource, name) in taken:
            raise ConflictError(
                resource=rule.resource,
                action=rule.action,
                role=rule.role,
                name=name,
            )
        taken[(rule.resource, name)] = rule
        policies.append(CreatePolicy(rule, name=name, config=cfg))

    elements: list[ExecutableDDLElement] = []
    if cfg.enable_row_level_security:
        for resource in dict.fromkeys(r.resource for r in rule_list):
            elements.append(EnableRowLevelSecurity(resource))
    elements.extend(policies)
    return elements


def policy_ddl(
    rules: Iterable[PolicyRule],
    *,
    config: RLSConfig | None = None,
    dialect: Dialect | None = None,
) -> list[str]:
    """Render the statements that install *rules* as SQL text.

    Args:
        rules: Compiled rules, e.g. a ``PolicySet``.
        config: Optional config. Defaults to the global config.
        dialect: Target dialect. Defaults to PostgreSQL.

    Returns:
        One SQL string per statement, without trailing semicolons.

    Example::

        for stmt in policy_ddl(rules):
            print(stmt + ";")
        # ALTER TABLE posts ENABLE ROW LEVEL SECURITY;
        # CREATE POLICY "posts-select" ON posts AS PERMISSIVE FOR SELECT TO anonymous USING (true);
    """
    target_dialect = dialect if dialect is not None else postgresql.dialect()
    return [
        str(element.compile(dialect=target_dialect))
        for element in policy_ddl_elements(rules, config=config)
    ]
