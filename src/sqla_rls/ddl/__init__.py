"""DDL — install compiled rules as PostgreSQL row-level security policies."""

from sqla_rls.ddl._postgres import (
    CreatePolicy,
    EnableRowLevelSecurity,
    policy_ddl,
    policy_ddl_elements,
    policy_name,
)

__all__ = [
    "CreatePolicy",
    "EnableRowLevelSecurity",
    "policy_ddl",
    "policy_ddl_elements",
    "policy_name",
]
