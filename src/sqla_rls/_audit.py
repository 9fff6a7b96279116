"""Audit logging for compiled rule sets."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqla_rls.compiler._rules import PolicyRule
from sqla_rls.predicate._ast import Predicate

__all__ = ["log_compiled_rules", "log_discarded_read_predicate"]

logger = logging.getLogger("sqla_rls")


def log_compiled_rules(
    *,
    resource: str,
    role: str,
    rules: Sequence[PolicyRule],
) -> None:
    """Log the outcome of one compile call.

    Logging levels:
    - INFO: Summary (resource, role, rule count)
    - DEBUG: Detailed (action, clause and predicate of every rule)
    - WARNING: The call compiled to no rules at all

    Example::

        log_compiled_rules(resource="posts", role="anonymous", rules=rules)
    """
    if not rules:
        logger.warning(
            "No rules compiled for (%s, %s); the role gets no access",
            resource,
            role,
        )
        return

    logger.info(
        "Compiled %d rule(s) for %s to role %s: %s",
        len(rules),
        resource,
        role,
        ", ".join(r.action for r in rules),
    )

    if logger.isEnabledFor(logging.DEBUG):
        for rule in rules:
            logger.debug(
                "Rule %s.%s to %s: %s %s",
                rule.resource,
                rule.action,
                rule.role,
                rule.clause_kind,
                rule.predicate.name,
            )


def log_discarded_read_predicate(
    *,
    resource: str,
    role: str,
    read: Predicate,
    modify: Predicate,
) -> None:
    """Warn that the select rule uses the modify predicate instead of *read*."""
    logger.warning(
        "Select rule for (%s, %s) uses the modify predicate %s; "
        "read predicate %s is not applied",
        resource,
        role,
        modify.name,
        read.name,
    )
