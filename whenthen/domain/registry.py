"""Variant registry — the process-wide, immutable lookup of triggers and actions.

Built once at import.  There is no registration API: adding a variant means
adding an enum member and its class, and ``_check_registry()`` fails the
import if the two drift apart.

Compatibility is declared once, on the action side
(``ActionKind.compatible_triggers``).  The trigger-side view is derived
here, so ``T in A.compatible_triggers`` iff ``A in T.compatible_actions``.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from whenthen.domain.actions import (
    ActionKind,
    ActionType,
    CleanDownloadsAction,
    EmptyTrashAction,
    KeepAwakeAction,
    MoveFilesAction,
    OpenAppsAction,
    OpenFileAction,
    OpenUrlsAction,
    QuitAppsAction,
    SetVolumeAction,
    ShowNotificationAction,
    ToggleAppearanceAction,
)
from whenthen.domain.configs import ActionConfig, TriggerConfig, load_config
from whenthen.domain.triggers import (
    DriveMountTrigger,
    FixedIntervalTrigger,
    FixedScheduleTrigger,
    OnLoginTrigger,
    PathWatchTrigger,
    TimeRangeTrigger,
    TriggerKind,
    TriggerType,
)
from whenthen.exceptions import UnknownVariantError

TRIGGERS: Mapping[TriggerType, TriggerKind] = MappingProxyType(
    {
        kind.type: kind
        for kind in (
            FixedScheduleTrigger(),
            FixedIntervalTrigger(),
            OnLoginTrigger(),
            PathWatchTrigger(),
            DriveMountTrigger(),
            TimeRangeTrigger(),
        )
    }
)

ACTIONS: Mapping[ActionType, ActionKind] = MappingProxyType(
    {
        kind.type: kind
        for kind in (
            OpenAppsAction(),
            QuitAppsAction(),
            OpenFileAction(),
            OpenUrlsAction(),
            EmptyTrashAction(),
            CleanDownloadsAction(),
            ToggleAppearanceAction(),
            SetVolumeAction(),
            MoveFilesAction(),
            ShowNotificationAction(),
            KeepAwakeAction(),
        )
    }
)


def _check_registry() -> None:
    missing_triggers = set(TriggerType) - set(TRIGGERS)
    missing_actions = set(ActionType) - set(ACTIONS)
    if missing_triggers or missing_actions:
        raise RuntimeError(
            f"Variants without behaviour: {sorted(missing_triggers | missing_actions)}"
        )
    for action in ACTIONS.values():
        # Only revertible actions can have an end unit.
        if (TriggerType.TIME_RANGE in action.compatible_triggers) != action.can_revert:
            raise RuntimeError(
                f"Action '{action.type.value}' pairs with time-range but cannot revert"
                if not action.can_revert
                else f"Action '{action.type.value}' can revert but does not pair with time-range"
            )


_check_registry()


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


def trigger_type(tag: TriggerType | str) -> TriggerType:
    try:
        return TriggerType(tag)
    except ValueError:
        raise UnknownVariantError("trigger", str(tag)) from None


def action_type(tag: ActionType | str) -> ActionType:
    try:
        return ActionType(tag)
    except ValueError:
        raise UnknownVariantError("action", str(tag)) from None


def get_trigger(tag: TriggerType | str) -> TriggerKind:
    return TRIGGERS[trigger_type(tag)]


def get_action(tag: ActionType | str) -> ActionKind:
    return ACTIONS[action_type(tag)]


# ---------------------------------------------------------------------------
# Compatibility
# ---------------------------------------------------------------------------


def is_compatible(trigger: TriggerType | str, action: ActionType | str) -> bool:
    return trigger_type(trigger) in get_action(action).compatible_triggers


def compatible_triggers(action: ActionType | str) -> tuple[TriggerType, ...]:
    """Triggers accepted by *action*, in trigger declaration order."""
    accepted = get_action(action).compatible_triggers
    return tuple(t for t in TriggerType if t in accepted)


def compatible_actions(trigger: TriggerType | str) -> tuple[ActionType, ...]:
    """Actions accepting *trigger*, in action declaration order."""
    t = trigger_type(trigger)
    return tuple(a for a, kind in ACTIONS.items() if t in kind.compatible_triggers)


def first_compatible_trigger(action: ActionType | str) -> TriggerType:
    return compatible_triggers(action)[0]


def first_compatible_action(trigger: TriggerType | str) -> ActionType:
    return compatible_actions(trigger)[0]


# ---------------------------------------------------------------------------
# Boundary parsing
# ---------------------------------------------------------------------------


def parse_trigger_config(
    tag: TriggerType | str, raw: dict[str, Any] | None
) -> tuple[TriggerConfig | None, str | None]:
    """Convert a raw mapping into the trigger's typed config."""
    return load_config(get_trigger(tag).config_model, raw)


def parse_action_config(
    tag: ActionType | str, raw: dict[str, Any] | None
) -> tuple[ActionConfig | None, str | None]:
    """Convert a raw mapping into the action's typed config."""
    return load_config(get_action(tag).config_model, raw)
