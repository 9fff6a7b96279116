"""Compiler — transforms CRUD intents into row-security rules."""

from sqla_rls.compiler._crud import PolicyCompiler, compile_crud, compile_rule
from sqla_rls.compiler._rules import PolicyIntent, PolicyRule, PolicySet, merge_rules
from sqla_rls.compiler._sql import compile_predicate_sql, to_sql_expression

__all__ = [
    "PolicyCompiler",
    "PolicyIntent",
    "PolicyRule",
    "PolicySet",
    "compile_crud",
    "compile_predicate_sql",
    "compile_rule",
    "merge_rules",
    "to_sql_expression",
]
