"""Domain layer — trigger/action variants, their configs and the Rule entity."""

from whenthen.domain.actions import ActionKind, ActionType
from whenthen.domain.registry import (
    ACTIONS,
    TRIGGERS,
    compatible_actions,
    compatible_triggers,
    get_action,
    get_trigger,
    is_compatible,
    parse_action_config,
    parse_trigger_config,
)
from whenthen.domain.rule import Rule
from whenthen.domain.triggers import TriggerKind, TriggerType

__all__ = [
    "ACTIONS",
    "ActionKind",
    "ActionType",
    "Rule",
    "TRIGGERS",
    "TriggerKind",
    "TriggerType",
    "compatible_actions",
    "compatible_triggers",
    "get_action",
    "get_trigger",
    "is_compatible",
    "parse_action_config",
    "parse_trigger_config",
]
