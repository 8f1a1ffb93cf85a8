"""Rule — one persisted "when <trigger>, do <action>" pairing.

The pair is kept compatible at all times: construction rejects an
incompatible pair, and the edit helpers replace the opposite side with the
first compatible variant (default config) when a change would break it.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from whenthen.domain import registry
from whenthen.domain.actions import ActionType
from whenthen.domain.configs import ActionConfig, TriggerConfig
from whenthen.domain.triggers import TriggerType
from whenthen.exceptions import CompatibilityViolation, RuleValidationError


def new_rule_id() -> str:
    """Short hex ID — short enough for unit labels, unique enough for one user."""
    return uuid.uuid4().hex[:8]


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Rule:
    trigger_type: TriggerType
    trigger_config: TriggerConfig
    action_type: ActionType
    action_config: ActionConfig
    id: str = field(default_factory=new_rule_id)
    enabled: bool = True
    created_at: datetime = field(default_factory=_now)
    last_run_at: datetime | None = None
    custom_name: str | None = None

    def __post_init__(self) -> None:
        self.trigger_type = registry.trigger_type(self.trigger_type)
        self.action_type = registry.action_type(self.action_type)
        if not registry.is_compatible(self.trigger_type, self.action_type):
            raise CompatibilityViolation(self.trigger_type.value, self.action_type.value)
        trigger = registry.get_trigger(self.trigger_type)
        action = registry.get_action(self.action_type)
        if not isinstance(self.trigger_config, trigger.config_model):
            raise RuleValidationError(
                self.trigger_type.value,
                f"expected {trigger.config_model.__name__}, got {type(self.trigger_config).__name__}",
            )
        if not isinstance(self.action_config, action.config_model):
            raise RuleValidationError(
                self.action_type.value,
                f"expected {action.config_model.__name__}, got {type(self.action_config).__name__}",
            )

    @classmethod
    def create(
        cls,
        trigger_type: TriggerType | str,
        action_type: ActionType | str,
        trigger_config: dict[str, Any] | None = None,
        action_config: dict[str, Any] | None = None,
        custom_name: str | None = None,
        strict: bool = False,
        **kwargs: Any,
    ) -> Rule:
        """Build a rule from raw config mappings.

        Malformed configs (wrong types, unknown keys) always raise
        RuleValidationError.  With ``strict=True`` an incomplete config
        (e.g. no apps selected) raises too.
        """
        t_config, error = registry.parse_trigger_config(trigger_type, trigger_config)
        if error:
            raise RuleValidationError(str(trigger_type), error)
        a_config, error = registry.parse_action_config(action_type, action_config)
        if error:
            raise RuleValidationError(str(action_type), error)
        rule = cls(
            trigger_type=registry.trigger_type(trigger_type),
            trigger_config=t_config,  # type: ignore[arg-type]
            action_type=registry.action_type(action_type),
            action_config=a_config,  # type: ignore[arg-type]
            custom_name=custom_name,
            **kwargs,
        )
        if strict and (problem := rule.validate()):
            raise RuleValidationError(f"{rule.trigger_type.value}/{rule.action_type.value}", problem)
        return rule

    # ---------------------------------------------------------------------------
    # Editing
    # ---------------------------------------------------------------------------

    def set_trigger(self, trigger_type: TriggerType | str, config: TriggerConfig | None = None) -> None:
        """Switch the trigger; reset the action if it no longer accepts it."""
        t = registry.trigger_type(trigger_type)
        kind = registry.get_trigger(t)
        config = config if config is not None else kind.default_config()
        if not isinstance(config, kind.config_model):
            raise RuleValidationError(t.value, f"expected {kind.config_model.__name__}")
        self.trigger_type = t
        self.trigger_config = config
        if not registry.is_compatible(t, self.action_type):
            self.action_type = registry.first_compatible_action(t)
            self.action_config = registry.get_action(self.action_type).default_config()

    def set_action(self, action_type: ActionType | str, config: ActionConfig | None = None) -> None:
        """Switch the action; reset the trigger if the action does not accept it."""
        a = registry.action_type(action_type)
        kind = registry.get_action(a)
        config = config if config is not None else kind.default_config()
        if not isinstance(config, kind.config_model):
            raise RuleValidationError(a.value, f"expected {kind.config_model.__name__}")
        self.action_type = a
        self.action_config = config
        if not registry.is_compatible(self.trigger_type, a):
            self.trigger_type = registry.first_compatible_trigger(a)
            self.trigger_config = registry.get_trigger(self.trigger_type).default_config()

    # ---------------------------------------------------------------------------
    # Derived
    # ---------------------------------------------------------------------------

    def validate(self) -> str | None:
        """First problem with either config, or None when the rule can be installed."""
        return registry.get_trigger(self.trigger_type).validate(
            self.trigger_config
        ) or registry.get_action(self.action_type).validate(self.action_config)

    @property
    def sentence(self) -> str:
        when = registry.get_trigger(self.trigger_type).sentence_fragment(self.trigger_config)
        what = registry.get_action(self.action_type).sentence_fragment(self.action_config)
        return f"{when}, {what}"

    @property
    def display_name(self) -> str:
        return self.custom_name or self.sentence
