"""sqla-rls testing utilities — fixtures, isolation, assertions, simulation.

Provides test helpers for verifying compiled row-security rules:

- **Fixtures**: ``rls_graph``, ``rls_roles``, ``rls_config``,
  ``isolated_rls_state``.
- **Assertion helpers**: ``assert_allows``, ``assert_denies``,
  ``assert_rule_keys``.
- **Simulation**: ``policy_matrix``, ``diff_policy_sets``,
  ``assert_policy_sql_snapshot``.

Example::

    from sqla_rls.testing import assert_allows

    def test_owner_updates_post(rules):
        assert_allows(rules, "posts", "update", role="authenticated",
                      row={"id": 1, "user_id": 10}, principal=10)
"""

from sqla_rls.testing._assertions import assert_allows, assert_denies, assert_rule_keys
from sqla_rls.testing._fixtures import (
    isolated_rls_state,
    rls_config,
    rls_graph,
    rls_roles,
)
from sqla_rls.testing._isolation import isolated_rls
from sqla_rls.testing._simulation import (
    PolicyCoverage,
    PolicyDiff,
    PolicyMatrix,
    assert_policy_sql_snapshot,
    diff_policy_sets,
    policy_matrix,
)

__all__ = [
    "PolicyCoverage",
    "PolicyDiff",
    "PolicyMatrix",
    "assert_allows",
    "assert_denies",
    "assert_policy_sql_snapshot",
    "assert_rule_keys",
    "diff_policy_sets",
    "isolated_rls",
    "isolated_rls_state",
    "policy_matrix",
    "rls_config",
    "rls_graph",
    "rls_roles",
]
