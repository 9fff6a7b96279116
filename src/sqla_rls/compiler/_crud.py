"""PolicyCompiler — turn ``{role, read, modify}`` intents into row-security rules."""

from __future__ import annotations

from collections.abc import Iterable

from sqla_rls._types import ACTIONS, MODIFY_ACTIONS, Action, ClauseKind, IntentValue
from sqla_rls.compiler._rules import PolicyIntent, PolicyRule, PolicySet
from sqla_rls.config._config import RLSConfig, get_global_config
from sqla_rls.exceptions import ValidationError
from sqla_rls.predicate._ast import (
    Constant,
    MemberOfJoin,
    OwnsRow,
    Predicate,
    always_allow,
    always_deny,
)
from sqla_rls.roles._registry import Role, RoleRegistry, get_default_role_registry
from sqla_rls.schema._graph import SchemaGraph, get_default_graph
from sqla_rls.schema._resource import Resource

__all__ = ["PolicyCompiler", "compile_crud", "compile_rule"]

_CLAUSE_KINDS: dict[str, ClauseKind] = {
    "select": "using",
    "insert": "check",
    "update": "check",
    "delete": "using",
}


class PolicyCompiler:
    """Compiles intents against one schema graph and role registry.

    Each call is pure: it returns a fresh tuple of rules and publishes
    nothing on failure.

    Args:
        graph: Schema graph to resolve resources in. Defaults to the
            global graph.
        roles: Role registry to resolve roles in. Defaults to the global
            registry.
        config: Optional config. Defaults to the global config at call time.

    Example::

        compiler = PolicyCompiler(graph=graph, roles=roles)
        rules = compiler.compile_crud(
            "posts",
            role="authenticated",
            read=True,
            modify=owns_row("posts", "user_id", graph=graph),
        )
        [r.action for r in rules]  # ["select", "insert", "update", "delete"]
    """

    def __init__(
        self,
        *,
        graph: SchemaGraph | None = None,
        roles: RoleRegistry | None = None,
        config: RLSConfig | None = None,
    ) -> None:
        self.graph = graph if graph is not None else get_default_graph()
        self.roles = roles if roles is not None else get_default_role_registry()
        self._config = config

    @property
    def config(self) -> RLSConfig:
        return self._config if self._config is not None else get_global_config()

    def compile_crud(
        self,
        resource: str | Resource,
        *,
        role: str | Role,
        read: IntentValue = None,
        modify: IntentValue = None,
    ) -> tuple[PolicyRule, ...]:
        """Compile a CRUD intent into ordered rules.

        - ``read=True`` emits a ``select`` rule allowing every row.
        - ``read`` given as a predicate emits a ``select`` rule guarded by
          the *modify* value: its predicate, ``always_allow`` for ``True``,
          ``always_deny`` for ``False``. Without *modify* the call fails.
        - Whenever *modify* is a predicate, the ``select`` rule (if any)
          carries that predicate, even when ``read=True``.
        - ``modify=True`` or a predicate emits ``insert``, ``update`` and
          ``delete`` rules together.

        Rules come out in ``select, insert, update, delete`` order.

        Raises:
            ConfigError: If *role* is not registered.
            SchemaReferenceError: If *resource*, or anything a predicate
                refers to, is not declared.
            ValidationError: If *read*/*modify* are malformed, or a select
                rule would have no resolvable predicate.
        """
        role_obj = self.roles.resolve(role)
        target = self.graph.resolve(resource.name if isinstance(resource, Resource) else resource)

        for field, value in (("read", read), ("modify", modify)):
            self._check_intent_value(field, value, target.name, role_obj.name)
            if isinstance(value, Predicate):
                self._check_predicate(value, target, role_obj.name)

        rules: list[PolicyRule] = []
        select_predicate = self._select_predicate(target.name, role_obj.name, read, modify)
        if select_predicate is not None:
            rules.append(self._rule(target.name, "select", role_obj, select_predicate))

        if modify is True or isinstance(modify, Predicate):
            modify_predicate = modify if isinstance(modify, Predicate) else always_allow
            for action in MODIFY_ACTIONS:
                rules.append(self._rule(target.name, action, role_obj, modify_predicate))

        result = tuple(rules)
        if self.config.log_compiled_rules:
            from sqla_rls._audit import log_compiled_rules

            log_compiled_rules(resource=target.name, role=role_obj.name, rules=result)
        return result

    def compile_intent(self, intent: PolicyIntent) -> tuple[PolicyRule, ...]:
        """Compile a ``PolicyIntent``; see :meth:`compile_crud`."""
        return self.compile_crud(
            intent.resource,
            role=intent.role,
            read=intent.read,
            modify=intent.modify,
        )

    def compile_rule(
        self,
        resource: str | Resource,
        action: Action,
        *,
        role: str | Role,
        predicate: Predicate | bool,
        name: str | None = None,
    ) -> PolicyRule:
        """Compile a single explicit rule outside the CRUD shorthand.

        Example::

            # chat messages may only be inserted by their sender
            compiler.compile_rule(
                "chat_messages",
                "insert",
                role="authenticated",
                predicate=owns_row("chat_messages", "sender", graph=graph),
                name="chats-policy-insert",
            )

        Raises:
            ConfigError: If *role* is not registered.
            SchemaReferenceError: If *resource* or a predicate reference is
                not declared.
            ValidationError: If *action* or *predicate* is malformed.
        """
        role_obj = self.roles.resolve(role)
        target = self.graph.resolve(resource.name if isinstance(resource, Resource) else resource)
        if action not in ACTIONS:
            raise ValidationError(
                f"Unknown action {action!r}; expected one of {ACTIONS!r}",
                resource=target.name,
                role=role_obj.name,
                action=action,
            )
        self._check_intent_value("predicate", predicate, target.name, role_obj.name)
        if isinstance(predicate, bool):
            predicate = always_allow if predicate else always_deny
        else:
            self._check_predicate(predicate, target, role_obj.name)

        rule = self._rule(target.name, action, role_obj, predicate, name=name)
        if self.config.log_compiled_rules:
            from sqla_rls._audit import log_compiled_rules

            log_compiled_rules(resource=target.name, role=role_obj.name, rules=(rule,))
        return rule

    def compile_all(self, intents: Iterable[PolicyIntent]) -> PolicySet:
        """Compile several intents into one conflict-checked ``PolicySet``.

        Raises:
            ConflictError: If two intents produce the same
                ``(resource, action, role)``. Nothing is returned.
        """
        rules: list[PolicyRule] = []
        for intent in intents:
            rules.extend(self.compile_intent(intent))
        return PolicySet(rules)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _select_predicate(
        self,
        resource: str,
        role: str,
        read: IntentValue,
        modify: IntentValue,
    ) -> Predicate | None:
        if read is None or read is False:
            return None
        if isinstance(modify, Predicate):
            if isinstance(read, Predicate) and read != modify and self.config.warn_on_discarded_read:
                from sqla_rls._audit import log_discarded_read_predicate

                log_discarded_read_predicate(
                    resource=resource, role=role, read=read, modify=modify
                )
            return modify
        if read is True:
            return always_allow
        if modify is True:
            return always_allow
        if modify is False:
            return always_deny
        raise ValidationError(
            f"Select rule for ({resource}, {role}) has no resolvable predicate: "
            f"a read predicate requires a modify value",
            resource=resource,
            role=role,
            action="select",
        )

    def _rule(
        self,
        resource: str,
        action: Action,
        role: Role,
        predicate: Predicate,
        *,
        name: str | None = None,
    ) -> PolicyRule:
        return PolicyRule(
            resource=resource,
            action=action,
            role=role.name,
            principal=role.principal,
            predicate=predicate,
            clause_kind=_CLAUSE_KINDS[action],
            name=name,
        )

    @staticmethod
    def _check_intent_value(field: str, value: object, resource: str, role: str) -> None:
        if value is None or isinstance(value, (bool, Predicate)):
            return
        raise ValidationError(
            f"{field} for ({resource}, {role}) must be a bool, a Predicate or None, "
            f"got {type(value).__name__}",
            resource=resource,
            role=role,
        )

    def _check_predicate(self, predicate: Predicate, resource: Resource, role: str) -> None:
        for leaf in predicate.leaves():
            if isinstance(leaf, Constant):
                continue
            if not isinstance(leaf, (OwnsRow, MemberOfJoin)):
                raise ValidationError(
                    f"Unsupported predicate type {type(leaf).__name__} for "
                    f"({resource.name}, {role})",
                    resource=resource.name,
                    role=role,
                )
            if leaf.resource != resource.name:
                raise ValidationError(
                    f"Predicate {leaf.name} guards {leaf.resource!r}, "
                    f"not {resource.name!r}",
                    resource=resource.name,
                    role=role,
                )
            if isinstance(leaf, OwnsRow):
                resource.attribute(leaf.attribute)
            else:
                resource.attribute(leaf.row_attribute)
                self.graph.relationship(leaf.link_resource, leaf.link_fk_to_self)
                self.graph.resolve(leaf.link_resource).attribute(leaf.link_fk_to_identity)


def compile_crud(
    resource: str | Resource,
    *,
    role: str | Role,
    read: IntentValue = None,
    modify: IntentValue = None,
    graph: SchemaGraph | None = None,
    roles: RoleRegistry | None = None,
    config: RLSConfig | None = None,
) -> tuple[PolicyRule, ...]:
    """Compile a CRUD intent with the default (or given) graph and roles.

    See :meth:`PolicyCompiler.compile_crud`.

    Example::

        compile_crud("posts", role="anonymous", read=True)
        # (PolicyRule(resource='posts', action='select', role='anonymous', ...),)
    """
    compiler = PolicyCompiler(graph=graph, roles=roles, config=config)
    return compiler.compile_crud(resource, role=role, read=read, modify=modify)


def compile_rule(
    resource: str | Resource,
    action: Action,
    *,
    role: str | Role,
    predicate: Predicate | bool,
    name: str | None = None,
    graph: SchemaGraph | None = None,
    roles: RoleRegistry | None = None,
    config: RLSConfig | None = None,
) -> PolicyRule:
    """Compile one explicit rule; see :meth:`PolicyCompiler.compile_rule`."""
    compiler = PolicyCompiler(graph=graph, roles=roles, config=config)
    return compiler.compile_rule(resource, action, role=role, predicate=predicate, name=name)
