"""SuggestionEngine — free text → ranked candidate rules.

Pipeline for ``parse(text)``:

1. Lowercase and trim; empty input returns an empty result.
2. Score every action and trigger against the keyword tables.
3. Keep the top 3 actions with a positive score.  Pair each with its top 2
   compatible triggers that scored, or with a per-action default trigger.
4. Run the extractors for each pair; every filled config key adds a small
   bonus, every field left empty is reported as missing.
5. Deduplicate by (action, trigger), sort by score, keep the top 3.
6. Attach up to 3 templates: same action as the best suggestion, or, when
   nothing matched, templates whose name resembles the input.

``parse`` is pure: the engine holds only read-only inputs given at
construction, so identical text always yields an identical result.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

from whenthen.domain import registry
from whenthen.domain.actions import ActionType
from whenthen.domain.rule import Rule
from whenthen.domain.triggers import TriggerType
from whenthen.logging import get_logger
from whenthen.suggest import extractors as ex
from whenthen.suggest.fuzzy import fuzzy_contains
from whenthen.suggest.keywords import (
    ACTION_KEYWORDS,
    APP_NAME_WEIGHT,
    TRIGGER_KEYWORDS,
    KeywordGroup,
    score_groups,
)
from whenthen.suggest.templates import TEMPLATES, Template

log = get_logger(__name__)

MAX_ACTIONS = 3
MAX_TRIGGERS_PER_ACTION = 2
FIELD_BONUS = 0.05
TIME_BONUS = 0.15
INTERVAL_BONUS = 0.15
RANGE_BONUS = 0.1
TEMPLATE_MAX_DISTANCE = 2

DEFAULT_TRIGGERS = MappingProxyType(
    {
        ActionType.OPEN_APPS: TriggerType.ON_LOGIN,
        ActionType.QUIT_APPS: TriggerType.ON_LOGIN,
        ActionType.MOVE_FILES: TriggerType.PATH_WATCH,
        ActionType.SHOW_NOTIFICATION: TriggerType.FIXED_INTERVAL,
    }
)


@dataclass(frozen=True)
class Suggestion:
    """One candidate rule.  Configs hold only the keys the extractors filled."""

    trigger_type: TriggerType
    action_type: ActionType
    trigger_config: dict[str, Any]
    action_config: dict[str, Any]
    score: float
    summary: str
    missing_fields: tuple[str, ...] = ()

    @property
    def complete(self) -> bool:
        return not self.missing_fields

    def to_rule(self, custom_name: str | None = None) -> Rule:
        """A new rule from this candidate; unfilled fields take their defaults."""
        return Rule.create(
            trigger_type=self.trigger_type,
            action_type=self.action_type,
            trigger_config=dict(self.trigger_config),
            action_config=dict(self.action_config),
            custom_name=custom_name,
        )


@dataclass(frozen=True)
class ParseResult:
    suggestions: list[Suggestion] = field(default_factory=list)
    matched_templates: list[Template] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.suggestions and not self.matched_templates


class SuggestionEngine:
    """Rank trigger/action pairs for a description.

    Usage::

        engine = SuggestionEngine(app_names=catalog.installed_apps())
        result = engine.parse("dark mode at 10pm")
        best = result.suggestions[0]          # toggle-appearance + fixed-schedule
    """

    def __init__(
        self,
        app_names: Iterable[str] = (),
        templates: Sequence[Template] = TEMPLATES,
        home: Path | None = None,
        max_suggestions: int = 3,
        max_templates: int = 3,
    ) -> None:
        self._app_names = tuple(app_names)
        self._templates = tuple(templates)
        self._home = home or Path.home()
        self._max_suggestions = max_suggestions
        self._max_templates = max_templates

    # ---------------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------------

    def parse(self, text: str) -> ParseResult:
        original = text.strip()
        lowered = original.lower()
        if not lowered:
            return ParseResult()

        action_scores = {a: self.score_action(a, lowered) for a in ActionType}
        trigger_scores = {t: self.score_trigger(t, lowered) for t in TriggerType}

        top_actions = sorted(
            (a for a in ActionType if action_scores[a] > 0),
            key=lambda a: action_scores[a],
            reverse=True,
        )[:MAX_ACTIONS]

        candidates: list[Suggestion] = []
        for action in top_actions:
            compatible = registry.compatible_triggers(action)
            viable = sorted(
                (t for t in compatible if trigger_scores[t] > 0),
                key=lambda t: trigger_scores[t],
                reverse=True,
            )[:MAX_TRIGGERS_PER_ACTION]
            if viable:
                for trigger in viable:
                    candidates.append(
                        self._candidate(
                            action,
                            trigger,
                            action_scores[action] + trigger_scores[trigger],
                            lowered,
                            original,
                        )
                    )
            else:
                trigger = self.default_trigger(action)
                candidates.append(
                    self._candidate(action, trigger, action_scores[action], lowered, original)
                )

        suggestions = self._rank(candidates)
        templates = self._match_templates(suggestions, lowered)
        log.debug(
            "suggestions_ranked",
            count=len(suggestions),
            top=[f"{s.action_type.value}+{s.trigger_type.value}" for s in suggestions],
        )
        return ParseResult(suggestions=suggestions, matched_templates=templates)

    def score_action(self, action: ActionType, text: str) -> float:
        groups: tuple[KeywordGroup, ...] = ACTION_KEYWORDS[action]
        if action is ActionType.OPEN_APPS:
            names = tuple(n.lower() for n in ex.extract_app_names(text, self._app_names))
            if names:
                groups = (*groups, KeywordGroup(keywords=names, weight=APP_NAME_WEIGHT))
        return score_groups(groups, text)

    def score_trigger(self, trigger: TriggerType, text: str) -> float:
        score = score_groups(TRIGGER_KEYWORDS[trigger], text)
        if trigger is TriggerType.FIXED_SCHEDULE and ex.extract_time(text) is not None:
            score += TIME_BONUS
        if trigger is TriggerType.FIXED_INTERVAL and ex.extract_interval(text) is not None:
            score += INTERVAL_BONUS
        if trigger is TriggerType.TIME_RANGE and "between" in text:
            score += RANGE_BONUS
        return score

    @staticmethod
    def default_trigger(action: ActionType) -> TriggerType:
        return DEFAULT_TRIGGERS.get(action, TriggerType.FIXED_SCHEDULE)

    # ---------------------------------------------------------------------------
    # Extraction
    # ---------------------------------------------------------------------------

    def extract_trigger_config(self, trigger: TriggerType, text: str) -> dict[str, Any]:
        config: dict[str, Any] = {}
        if trigger is TriggerType.FIXED_SCHEDULE:
            time = ex.extract_time(text)
            if time is not None:
                config["hour"], config["minute"] = time
            config["weekdays"] = ex.extract_weekdays(text) or [1, 2, 3, 4, 5, 6, 7]
        elif trigger is TriggerType.FIXED_INTERVAL:
            minutes = ex.extract_interval(text)
            if minutes is not None:
                config["minutes"] = minutes
        elif trigger is TriggerType.PATH_WATCH:
            folder = ex.extract_folder(text, self._home, ("in", "on", "from", "into"))
            if folder is not None:
                config["folder"] = folder
        elif trigger is TriggerType.TIME_RANGE:
            start, end = ex.extract_range(text)
            if start is not None:
                config["start_hour"], config["start_minute"] = start
            if end is not None:
                config["end_hour"], config["end_minute"] = end
            config["weekdays"] = ex.extract_weekdays(text) or [1, 2, 3, 4, 5, 6, 7]
        return config

    def extract_action_config(self, action: ActionType, text: str, original: str) -> dict[str, Any]:
        config: dict[str, Any] = {}
        if action is ActionType.TOGGLE_APPEARANCE:
            config["mode"] = ex.extract_appearance_mode(text)
        elif action is ActionType.SET_VOLUME:
            level = ex.extract_volume(text)
            if level is not None:
                config["level"] = level
        elif action is ActionType.CLEAN_DOWNLOADS:
            config["days"] = ex.extract_day_count(text)
        elif action in (ActionType.OPEN_APPS, ActionType.QUIT_APPS):
            apps = ex.extract_app_names(text, self._app_names)
            if apps:
                config["apps"] = apps
        elif action is ActionType.SHOW_NOTIFICATION:
            message = ex.extract_message(original)
            if message:
                config["message"] = message
        elif action is ActionType.MOVE_FILES:
            folder = ex.extract_folder(text, self._home, ("to", "into"))
            if folder is not None:
                config["destination"] = folder
        elif action is ActionType.OPEN_URLS:
            urls = ex.extract_urls(original)
            if urls:
                config["urls"] = urls
        elif action is ActionType.KEEP_AWAKE:
            config["duration_minutes"] = ex.extract_duration(text) or 60
        return config

    # ---------------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------------

    def _candidate(
        self,
        action: ActionType,
        trigger: TriggerType,
        base_score: float,
        text: str,
        original: str,
    ) -> Suggestion:
        t_config = self.extract_trigger_config(trigger, text)
        a_config = self.extract_action_config(action, text, original)
        trigger_kind = registry.get_trigger(trigger)
        action_kind = registry.get_action(action)
        missing = trigger_kind.fields.missing(set(t_config)) + action_kind.fields.missing(
            set(a_config)
        )
        score = base_score + (len(t_config) + len(a_config)) * FIELD_BONUS
        return Suggestion(
            trigger_type=trigger,
            action_type=action,
            trigger_config=t_config,
            action_config=a_config,
            score=min(max(score, 0.0), 1.0),
            summary=self._summary(trigger, t_config, action, a_config),
            missing_fields=tuple(missing),
        )

    @staticmethod
    def _summary(
        trigger: TriggerType,
        t_config: dict[str, Any],
        action: ActionType,
        a_config: dict[str, Any],
    ) -> str:
        # Unfilled keys fall back to the variant defaults for display.
        t_model, _ = registry.parse_trigger_config(trigger, t_config)
        a_model, _ = registry.parse_action_config(action, a_config)
        t_kind = registry.get_trigger(trigger)
        a_kind = registry.get_action(action)
        when = t_kind.sentence_fragment(t_model or t_kind.default_config())
        what = a_kind.sentence_fragment(a_model or a_kind.default_config())
        return f"{when}, {what}"

    def _rank(self, candidates: list[Suggestion]) -> list[Suggestion]:
        ranked = sorted(candidates, key=lambda s: s.score, reverse=True)
        seen: set[tuple[ActionType, TriggerType]] = set()
        unique: list[Suggestion] = []
        for suggestion in ranked:
            key = (suggestion.action_type, suggestion.trigger_type)
            if key in seen:
                continue
            seen.add(key)
            unique.append(suggestion)
        return unique[: self._max_suggestions]

    def _match_templates(self, suggestions: list[Suggestion], text: str) -> list[Template]:
        if suggestions:
            top = suggestions[0].action_type
            matched = [t for t in self._templates if t.action_type == top]
        else:
            matched = [
                t
                for t in self._templates
                if t.name.lower() in text
                or fuzzy_contains(text, t.name.lower(), TEMPLATE_MAX_DISTANCE)
            ]
        return matched[: self._max_templates]
