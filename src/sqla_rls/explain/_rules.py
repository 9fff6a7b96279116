"""explain_rules() — describe how compiled rules will be enforced."""

from __future__ import annotations

import re
from collections.abc import Iterable

from sqla_rls._types import ACTIONS
from sqla_rls.compiler._rules import PolicyRule
from sqla_rls.compiler._sql import compile_predicate_sql
from sqla_rls.config._config import RLSConfig, get_global_config
from sqla_rls.ddl._postgres import policy_name
from sqla_rls.explain._models import PolicySetExplanation, ResourceExplanation, RuleExplanation
from sqla_rls.roles._registry import RoleRegistry

__all__ = ["explain_rules"]


def explain_rules(
    rules: Iterable[PolicyRule],
    *,
    roles: RoleRegistry | None = None,
    config: RLSConfig | None = None,
) -> PolicySetExplanation:
    """Explain a compiled rule set resource by resource.

    Args:
        rules: Compiled rules, e.g. a ``PolicySet``.
        roles: When given, every registered role is checked for denied
            actions on every resource. Otherwise only roles that appear in
            a resource's rules are.
        config: Optional config. Defaults to the global config.

    Returns:
        A ``PolicySetExplanation``.

    Example::

        explanation = explain_rules(rules, roles=roles)
        print(explanation)
        # Row-level security: 5 rule(s)
        #
        #   Resource: posts
        #     - posts-select [select to anonymous]: always_allow
        #       USING: true
        #   ...
    """
    cfg = config if config is not None else get_global_config()
    rule_list = list(rules)

    resources: list[ResourceExplanation] = []
    for resource in dict.fromkeys(r.resource for r in rule_list):
        resource_rules = [r for r in rule_list if r.resource == resource]
        if roles is not None:
            role_names = [role.name for role in roles.roles()]
        else:
            role_names = list(dict.fromkeys(r.role for r in resource_rules))

        granted = {(r.role, r.action) for r in resource_rules}
        denied = {
            role: [action for action in ACTIONS if (role, action) not in granted]
            for role in role_names
        }
        resources.append(
            ResourceExplanation(
                resource=resource,
                rules=[_explain_rule(r, cfg) for r in resource_rules],
                denied=denied,
            )
        )

    return PolicySetExplanation(resources=resources, rule_count=len(rule_list))


def _explain_rule(rule: PolicyRule, config: RLSConfig) -> RuleExplanation:
    sql = compile_predicate_sql(rule.predicate, config=config)
    return RuleExplanation(
        name=policy_name(rule, config=config),
        action=rule.action,
        role=rule.role,
        principal=rule.principal,
        clause_kind=rule.clause_kind,
        predicate=rule.predicate.name,
        predicate_sql=re.sub(r"\s+", " ", sql).strip(),
    )
