"""ScheduleCompiler — Rule → job units.

Pure: compiling reads the settings and the rule, touches no files, and
reports problems on the result instead of raising.

Labels are ``<prefix>.<trigger>.<action>.<rule id>`` so recompiling a rule
always targets the same plist.  A time-range rule yields two sibling units,
``<base>-start`` running the primary body and ``<base>-end`` running the
revert body on the same weekdays.
"""

from __future__ import annotations

from whenthen.compiler.units import CompiledRule, JobUnit, ScriptArtifact, UnitPaths
from whenthen.config import Settings
from whenthen.domain import registry
from whenthen.domain.actions import ActionKind
from whenthen.domain.rule import Rule
from whenthen.domain.schedule import ScheduleSpec
from whenthen.domain.scripts import ScriptKind
from whenthen.domain.triggers import TimeRangeTrigger
from whenthen.logging import get_logger

log = get_logger(__name__)

START_SUFFIX = "-start"
END_SUFFIX = "-end"


class ScheduleCompiler:
    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    # ---------------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------------

    def base_label(self, rule: Rule) -> str:
        prefix = self._settings.scheduler.label_prefix
        return f"{prefix}.{rule.trigger_type.value}.{rule.action_type.value}.{rule.id}"

    def layout(self, rule: Rule) -> list[UnitPaths]:
        """File locations of every unit the rule owns, without validating it.

        Used to unregister and delete units even when the stored config has
        since become invalid.
        """
        action = registry.get_action(rule.action_type)
        base = self.base_label(rule)
        if registry.get_trigger(rule.trigger_type).is_range:
            revert_kind = action.revert_kind or action.body_kind
            return [
                self._paths(base + START_SUFFIX, action.body_kind),
                self._paths(base + END_SUFFIX, revert_kind),
            ]
        return [self._paths(base, action.body_kind)]

    def compile(self, rule: Rule) -> CompiledRule:
        trigger = registry.get_trigger(rule.trigger_type)
        action = registry.get_action(rule.action_type)

        if not registry.is_compatible(rule.trigger_type, rule.action_type):
            return CompiledRule.failed(
                f"'{rule.trigger_type.value}' cannot be paired with '{rule.action_type.value}'"
            )
        problem = rule.validate()
        if problem:
            log.debug("compile_invalid_config", rule_id=rule.id, error=problem)
            return CompiledRule.failed(problem)

        base = self.base_label(rule)
        primary = action.generate(rule.action_config, rule.trigger_config)

        if not isinstance(trigger, TimeRangeTrigger):
            unit = self._unit(base, trigger.schedule(rule.trigger_config), action.body_kind, primary)
            return CompiledRule(units=(unit,))

        return self._compile_range(rule, trigger, action, base, primary)

    # ---------------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------------

    def _compile_range(
        self,
        rule: Rule,
        trigger: TimeRangeTrigger,
        action: ActionKind,
        base: str,
        primary: str,
    ) -> CompiledRule:
        revert = action.generate_revert(rule.action_config, rule.trigger_config)
        if revert is None or action.revert_kind is None:
            return CompiledRule.failed(
                f"'{rule.action_type.value}' cannot be undone, so it cannot run over a time range"
            )
        start = self._unit(
            base + START_SUFFIX,
            trigger.schedule(rule.trigger_config),
            action.body_kind,
            primary,
        )
        end = self._unit(
            base + END_SUFFIX,
            trigger.end_schedule(rule.trigger_config),  # type: ignore[arg-type]
            action.revert_kind,
            revert,
        )
        return CompiledRule(units=(start, end))

    def _unit(self, label: str, schedule: ScheduleSpec, kind: ScriptKind, body: str) -> JobUnit:
        paths = self._paths(label, kind)
        script_path = paths.script_paths[0]
        return JobUnit(
            label=label,
            program_arguments=(self._interpreter(kind), str(script_path)),
            schedule=schedule,
            log_path=self._settings.paths.logs_dir / f"{label}.log",
            plist_path=paths.plist_path,
            script=ScriptArtifact(path=script_path, kind=kind, content=body),
        )

    def _paths(self, label: str, kind: ScriptKind) -> UnitPaths:
        paths = self._settings.paths
        return UnitPaths(
            label=label,
            plist_path=paths.launch_agents_dir / f"{label}.plist",
            script_paths=(paths.scripts_dir / f"{label}.{kind.extension}",),
        )

    def _interpreter(self, kind: ScriptKind) -> str:
        interpreters = self._settings.interpreters
        return interpreters.shell if kind is ScriptKind.SHELL else interpreters.applescript
