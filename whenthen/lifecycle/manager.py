"""LifecycleManager — puts compiled rules on disk and in front of launchd.

Every public operation returns a plain success value and writes the detail
to the activity log.  Registration state is never cached: each call judges
success from the scheduler's answer to that very call.

Failure handling
----------------
- Write or register failure of a single-unit rule: return False and leave
  whatever was written in place for diagnosis.
- Failure of the second unit of a time-range rule after the first went in:
  unregister and delete both units, then return False.  A half-installed
  range would apply the action and never revert it.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from whenthen.compiler import plist
from whenthen.compiler.compiler import ScheduleCompiler
from whenthen.compiler.units import JobUnit, UnitPaths
from whenthen.config import Settings
from whenthen.domain.rule import Rule
from whenthen.exceptions import (
    ArtifactWriteError,
    LifecycleError,
    SchedulerRegistrationError,
)
from whenthen.lifecycle.files import atomic_write, remove_file
from whenthen.lifecycle.scheduler import BaseScheduler
from whenthen.lifecycle.store import RuleStore
from whenthen.logging import bind_rule_context, clear_rule_context, get_logger

log = get_logger(__name__)

_SHELL_MODE = 0o755
_FILE_MODE = 0o644


@dataclass(frozen=True)
class UnitStatus:
    label: str
    plist_present: bool
    script_present: bool

    @property
    def installed(self) -> bool:
        return self.plist_present and self.script_present


@contextmanager
def _rule_scope(rule: Rule) -> Iterator[None]:
    bind_rule_context(rule_id=rule.id)
    try:
        yield
    finally:
        clear_rule_context()


class LifecycleManager:
    """Install, enable, disable and remove the launchd units of rules.

    Usage::

        manager = LifecycleManager(settings, LaunchdScheduler(settings.scheduler), store)
        if not manager.install(rule):
            console.print("Saved, but not scheduled; see the activity log")
    """

    def __init__(
        self,
        settings: Settings,
        scheduler: BaseScheduler,
        store: RuleStore,
        compiler: ScheduleCompiler | None = None,
    ) -> None:
        self._settings = settings
        self._scheduler = scheduler
        self._store = store
        self._compiler = compiler or ScheduleCompiler(settings)

    @property
    def compiler(self) -> ScheduleCompiler:
        return self._compiler

    # ---------------------------------------------------------------------------
    # Single rule
    # ---------------------------------------------------------------------------

    def install(self, rule: Rule) -> bool:
        """Write scripts and plists for *rule* and register them."""
        with _rule_scope(rule):
            compiled = self._compiler.compile(rule)
            if not compiled.ok:
                log.error("install_rejected", error=compiled.error)
                return False
            try:
                self._ensure_dirs()
            except ArtifactWriteError as exc:
                log.error("install_failed", error=exc.message, **exc.context)
                return False

            done: list[JobUnit] = []
            for unit in compiled.units:
                try:
                    self._write_unit(unit)
                    self._register(unit)
                except LifecycleError as exc:
                    log.error("install_failed", error=exc.message, **exc.context)
                    if done:
                        self._rollback(compiled.units)
                    return False
                done.append(unit)

            log.info("rule_installed", units=[u.label for u in done])
            return True

    def uninstall(self, rule: Rule) -> None:
        """Unregister every unit of *rule* and delete its plists and scripts."""
        with _rule_scope(rule):
            for paths in self._compiler.layout(rule):
                self._unload_quietly(paths)
                remove_file(paths.plist_path)
                for script in paths.script_paths:
                    remove_file(script)
            log.info("rule_uninstalled")

    def enable(self, rule: Rule) -> bool:
        """Register *rule*'s units, installing them first if no plist exists."""
        with _rule_scope(rule):
            layout = self._compiler.layout(rule)
            if not all(p.plist_path.exists() for p in layout):
                log.debug("enable_installs", reason="plist_missing")
                return self.install(rule)

            loaded: list[UnitPaths] = []
            for paths in layout:
                result = self._scheduler.load(paths.plist_path)
                if not result.ok:
                    error = SchedulerRegistrationError(paths.label, "load", result.output)
                    log.error("enable_failed", error=error.message, **error.context)
                    for done in loaded:
                        self._unload_quietly(done)
                    return False
                loaded.append(paths)
            log.info("rule_enabled", units=[p.label for p in loaded])
            return True

    def disable(self, rule: Rule) -> bool:
        """Unregister *rule*'s units.  Files stay; ``enable`` reverses this."""
        with _rule_scope(rule):
            ok = True
            for paths in self._compiler.layout(rule):
                result = self._scheduler.unload(paths.plist_path)
                if not result.ok:
                    error = SchedulerRegistrationError(paths.label, "unload", result.output)
                    log.error("disable_failed", error=error.message, **error.context)
                    ok = False
            if ok:
                log.info("rule_disabled")
            return ok

    def reinstall(self, rule: Rule, previous: Rule | None = None) -> bool:
        """Replace the units of *previous* (default: *rule*) with freshly compiled ones.

        Used after an edit.  The label embeds the trigger and action tags, so
        an edit that changes either must remove the old units by the old rule.
        """
        self.uninstall(previous or rule)
        if not rule.enabled:
            return True
        return self.install(rule)

    def status(self, rule: Rule) -> list[UnitStatus]:
        """Which of *rule*'s files are on disk right now."""
        return [
            UnitStatus(
                label=paths.label,
                plist_present=paths.plist_path.exists(),
                script_present=all(s.exists() for s in paths.script_paths),
            )
            for paths in self._compiler.layout(rule)
        ]

    def run_now(self, rule: Rule) -> bool:
        """Ask the scheduler to run *rule*'s first unit immediately.

        For a time range that is the start unit; the end unit still fires on
        schedule.  The run is recorded only when the scheduler accepts it.
        """
        with _rule_scope(rule):
            paths = self._compiler.layout(rule)[0]
            result = self._scheduler.start(paths.label)
            if not result.ok:
                error = SchedulerRegistrationError(paths.label, "start", result.output)
                log.error("run_failed", error=error.message, **error.context)
                return False
        self.record_run(rule.id)
        return True

    def record_run(self, rule_id: str) -> Rule:
        rule = self._store.record_run(rule_id)
        log.info("rule_ran", rule_id=rule_id)
        return rule

    # ---------------------------------------------------------------------------
    # All rules
    # ---------------------------------------------------------------------------

    def pause_all(self) -> list[str]:
        """Unregister every enabled rule without touching its ``enabled`` flag.

        Returns the snapshot of paused ids, which ``resume_all`` consumes.
        """
        self._store.reload()
        ids = [r.id for r in self._store.enabled()]
        self._store.set_paused(ids)
        for rule_id in ids:
            rule = self._store.get(rule_id)
            if rule is not None:
                self.disable(rule)
        log.info("rules_paused", count=len(ids))
        return ids

    def resume_all(self) -> list[str]:
        """Re-enable snapshotted rules that still exist and are still enabled."""
        self._store.reload()
        snapshot = self._store.clear_paused()
        resumed: list[str] = []
        for rule_id in snapshot:
            rule = self._store.get(rule_id)
            if rule is None or not rule.enabled:
                continue
            if self.enable(rule):
                resumed.append(rule_id)
        log.info("rules_resumed", candidates=len(snapshot), resumed=len(resumed))
        return resumed

    def remove_all(self) -> int:
        """Unregister and delete every whenthen plist and every script.

        Works from what is on disk rather than from the store, so it also
        sweeps up units whose rule was lost.  Returns the plist count.
        """
        paths = self._settings.paths
        prefix = self._settings.scheduler.label_prefix + "."
        removed = 0
        if paths.launch_agents_dir.is_dir():
            for plist_path in sorted(paths.launch_agents_dir.glob(f"{prefix}*.plist")):
                result = self._scheduler.unload(plist_path)
                if not result.ok:
                    log.warning("remove_all_unload_failed", plist=plist_path.name, output=result.output)
                remove_file(plist_path)
                removed += 1
        if paths.scripts_dir.is_dir():
            for script in paths.scripts_dir.iterdir():
                if script.is_file():
                    remove_file(script)
        log.info("all_rules_removed", plists=removed)
        return removed

    # ---------------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------------

    def _ensure_dirs(self) -> None:
        for directory in self._settings.paths.all_dirs():
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise ArtifactWriteError(directory, exc) from exc

    def _write_unit(self, unit: JobUnit) -> None:
        script = unit.script
        mode = _SHELL_MODE if script.kind.needs_exec_bit else _FILE_MODE
        try:
            atomic_write(script.path, script.content.encode("utf-8"), mode=mode)
        except OSError as exc:
            raise ArtifactWriteError(script.path, exc) from exc
        try:
            atomic_write(unit.plist_path, plist.dumps(unit), mode=_FILE_MODE)
        except OSError as exc:
            raise ArtifactWriteError(unit.plist_path, exc) from exc
        log.debug("unit_written", label=unit.label, plist=str(unit.plist_path))

    def _register(self, unit: JobUnit) -> None:
        result = self._scheduler.load(unit.plist_path)
        if not result.ok:
            raise SchedulerRegistrationError(unit.label, "load", result.output)
        log.info("unit_registered", label=unit.label)

    def _unload_quietly(self, paths: UnitPaths) -> None:
        result = self._scheduler.unload(paths.plist_path)
        if not result.ok:
            log.warning("unit_unload_failed", label=paths.label, output=result.output)

    def _rollback(self, units: tuple[JobUnit, ...]) -> None:
        for unit in units:
            self._scheduler.unload(unit.plist_path)
            remove_file(unit.plist_path)
            remove_file(unit.script.path)
        log.warning("install_rolled_back", units=[u.label for u in units])
