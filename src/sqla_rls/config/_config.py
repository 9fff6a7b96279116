"""Layered configuration for sqla-rls."""

from __future__ import annotations

import re
import string
from dataclasses import dataclass

__all__ = [
    "RLSConfig",
    "configure",
    "get_global_config",
    "_reset_global_config",
    "_set_global_config",
]

_IDENTIFIER_PATH = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")
_REQUIRED_NAME_FIELDS: set[str] = {"resource", "action"}
_VALID_NAME_FIELDS: set[str] = {"resource", "action", "role"}


@dataclass(frozen=True, slots=True)
class RLSConfig:
    """Compiler and renderer settings with merge semantics (global -> call).

    Attributes:
        identity_function: Dotted name of the SQL function that yields the
            current principal's identity at enforcement time.
        policy_name_template: ``str.format`` template for policy names.
            Must reference ``{resource}`` and ``{action}``; may reference
            ``{role}``.
        log_compiled_rules: Log every compiled rule set via the
            ``sqla_rls`` logger.
        warn_on_discarded_read: Log a warning when a ``read`` predicate is
            replaced by the ``modify`` predicate on the select rule.
        enable_row_level_security: Prefix generated DDL with
            ``ENABLE ROW LEVEL SECURITY`` for each resource.

    Example::

        config = RLSConfig(policy_name_template="{resource}-{action}-{role}")
        merged = config.merge(log_compiled_rules=True)
    """

    identity_function: str = "auth.user_id"
    policy_name_template: str = "{resource}-{action}"
    log_compiled_rules: bool = False
    warn_on_discarded_read: bool = True
    enable_row_level_security: bool = True

    def __post_init__(self) -> None:
        if not _IDENTIFIER_PATH.match(self.identity_function):
            raise ValueError(
                f"identity_function must be a dotted SQL identifier, "
                f"got {self.identity_function!r}"
            )
        try:
            fields = {
                field for _, field, _, _ in string.Formatter().parse(self.policy_name_template)
                if field is not None
            }
        except ValueError as exc:
            raise ValueError(
                f"policy_name_template is not a valid format string: {exc}"
            ) from exc
        if not _REQUIRED_NAME_FIELDS <= fields:
            raise ValueError(
                f"policy_name_template must reference {sorted(_REQUIRED_NAME_FIELDS)!r}, "
                f"got {self.policy_name_template!r}"
            )
        if not fields <= _VALID_NAME_FIELDS:
            raise ValueError(
                f"policy_name_template may only reference {sorted(_VALID_NAME_FIELDS)!r}, "
                f"got {self.policy_name_template!r}"
            )

    def merge(
        self,
        *,
        identity_function: str | None = None,
        policy_name_template: str | None = None,
        log_compiled_rules: bool | None = None,
        warn_on_discarded_read: bool | None = None,
        enable_row_level_security: bool | None = None,
    ) -> RLSConfig:
        """Return a new config with non-None overrides applied.

        Args:
            identity_function: Override for identity_function (ignored if None).
            policy_name_template: Override for policy_name_template (ignored if None).
            log_compiled_rules: Override for log_compiled_rules (ignored if None).
            warn_on_discarded_read: Override for warn_on_discarded_read (ignored if None).
            enable_row_level_security: Override for enable_row_level_security
                (ignored if None).

        Returns:
            A new ``RLSConfig`` with overrides merged.
        """
        return RLSConfig(
            identity_function=(
                identity_function if identity_function is not None else self.identity_function
            ),
            policy_name_template=(
                policy_name_template
                if policy_name_template is not None
                else self.policy_name_template
            ),
            log_compiled_rules=(
                log_compiled_rules if log_compiled_rules is not None else self.log_compiled_rules
            ),
            warn_on_discarded_read=(
                warn_on_discarded_read
                if warn_on_discarded_read is not None
                else self.warn_on_discarded_read
            ),
            enable_row_level_security=(
                enable_row_level_security
                if enable_row_level_security is not None
                else self.enable_row_level_security
            ),
        )


# ---------------------------------------------------------------------------
# Global configuration singleton
# ---------------------------------------------------------------------------

_global_config = RLSConfig()


def get_global_config() -> RLSConfig:
    """Return the current global configuration."""
    return _global_config


def configure(
    *,
    identity_function: str | None = None,
    policy_name_template: str | None = None,
    log_compiled_rules: bool | None = None,
    warn_on_discarded_read: bool | None = None,
    enable_row_level_security: bool | None = None,
) -> RLSConfig:
    """Update the global configuration by merging overrides.

    Only non-None values are applied. Returns the new global config.

    Example::

        configure(policy_name_template="{resource}-{action}-{role}")
        # Policies for different roles no longer share a name
    """
    global _global_config
    _global_config = _global_config.merge(
        identity_function=identity_function,
        policy_name_template=policy_name_template,
        log_compiled_rules=log_compiled_rules,
        warn_on_discarded_read=warn_on_discarded_read,
        enable_row_level_security=enable_row_level_security,
    )
    return _global_config


def _set_global_config(cfg: RLSConfig) -> None:
    """Replace global config with an exact snapshot. For testing only."""
    global _global_config
    _global_config = cfg


def _reset_global_config() -> None:
    """Reset global config to defaults. For testing only."""
    global _global_config
    _global_config = RLSConfig()
