"""Unit tests — LifecycleManager against a fake scheduler."""

from __future__ import annotations

import copy
import stat

import pytest

from whenthen.config import Settings
from whenthen.domain.rule import Rule
from whenthen.lifecycle.files import atomic_write
from whenthen.lifecycle.manager import LifecycleManager
from whenthen.lifecycle.store import RuleStore


def _mode(path) -> int:  # type: ignore[no-untyped-def]
    return stat.S_IMODE(path.stat().st_mode)


def _plists(settings: Settings) -> list[str]:
    directory = settings.paths.launch_agents_dir
    if not directory.is_dir():
        return []
    return sorted(p.name for p in directory.glob("*.plist"))


def _dark_at_ten() -> Rule:
    return Rule.create("fixed-schedule", "toggle-appearance", {"hour": 22})


def _work_hours_dark() -> Rule:
    return Rule.create(
        "time-range",
        "toggle-appearance",
        {"start_hour": 9, "end_hour": 17, "weekdays": [2, 3, 4, 5, 6]},
    )


@pytest.mark.unit
class TestInstall:
    def test_writes_and_registers(self, manager: LifecycleManager, scheduler, test_settings) -> None:  # type: ignore[no-untyped-def]
        rule = _dark_at_ten()
        assert manager.install(rule)

        unit = manager.compiler.compile(rule).units[0]
        assert unit.plist_path.exists()
        assert unit.script.path.read_text() == unit.script.content
        assert _mode(unit.plist_path) == 0o644
        assert _mode(unit.script.path) == 0o644
        assert scheduler.loaded == [unit.label]

    def test_shell_scripts_are_executable(self, manager: LifecycleManager) -> None:
        rule = Rule.create("on-login", "open-apps", action_config={"apps": ["Xcode"]})
        assert manager.install(rule)
        script = manager.compiler.compile(rule).units[0].script.path
        assert _mode(script) == 0o755

    def test_invalid_rule_writes_nothing(self, manager: LifecycleManager, scheduler, test_settings) -> None:  # type: ignore[no-untyped-def]
        assert not manager.install(Rule.create("on-login", "open-apps"))
        assert _plists(test_settings) == []
        assert scheduler.calls == []

    def test_single_unit_failure_leaves_files(self, manager: LifecycleManager, scheduler) -> None:  # type: ignore[no-untyped-def]
        rule = _dark_at_ten()
        scheduler.fail_load.add(rule.id)
        assert not manager.install(rule)
        unit = manager.compiler.compile(rule).units[0]
        assert unit.plist_path.exists()
        assert unit.script.path.exists()

    def test_range_install_registers_both_units(self, manager: LifecycleManager, scheduler, test_settings) -> None:  # type: ignore[no-untyped-def]
        rule = _work_hours_dark()
        assert manager.install(rule)
        assert len(scheduler.loaded) == 2
        assert len(_plists(test_settings)) == 2

    def test_range_rolls_back_when_end_unit_fails(self, manager: LifecycleManager, scheduler, test_settings) -> None:  # type: ignore[no-untyped-def]
        rule = _work_hours_dark()
        scheduler.fail_load.add("-end")
        assert not manager.install(rule)
        assert scheduler.loaded == []
        assert _plists(test_settings) == []
        assert list(test_settings.paths.scripts_dir.iterdir()) == []

    def test_range_rolls_back_when_end_unit_cannot_be_written(  # type: ignore[no-untyped-def]
        self, manager: LifecycleManager, scheduler, test_settings, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        real_write = atomic_write

        def failing_write(path, data, mode=None):  # type: ignore[no-untyped-def]
            if "-end" in path.name:
                raise OSError(28, "No space left on device")
            real_write(path, data, mode=mode)

        monkeypatch.setattr("whenthen.lifecycle.manager.atomic_write", failing_write)
        rule = _work_hours_dark()
        assert not manager.install(rule)

        start, _ = manager.compiler.compile(rule).units
        assert ("load", start.label) in scheduler.calls
        assert ("unload", start.label) in scheduler.calls
        assert scheduler.loaded == []
        assert _plists(test_settings) == []
        assert list(test_settings.paths.scripts_dir.iterdir()) == []

    def test_range_start_failure_does_not_touch_end(self, manager: LifecycleManager, scheduler) -> None:  # type: ignore[no-untyped-def]
        rule = _work_hours_dark()
        scheduler.fail_load.add("-start")
        assert not manager.install(rule)
        start, end = manager.compiler.compile(rule).units
        assert start.plist_path.exists()
        assert not end.plist_path.exists()


@pytest.mark.unit
class TestEnableDisable:
    def test_enable_twice_is_idempotent(self, manager: LifecycleManager, scheduler, test_settings) -> None:  # type: ignore[no-untyped-def]
        rule = _dark_at_ten()
        assert manager.enable(rule)
        assert manager.enable(rule)
        assert len(_plists(test_settings)) == 1
        assert len(scheduler.loaded) == 1

    def test_enable_installs_when_plist_missing(self, manager: LifecycleManager) -> None:
        rule = _dark_at_ten()
        assert manager.enable(rule)
        assert all(s.installed for s in manager.status(rule))

    def test_disable_keeps_files(self, manager: LifecycleManager, scheduler) -> None:  # type: ignore[no-untyped-def]
        rule = _dark_at_ten()
        manager.install(rule)
        assert manager.disable(rule)
        assert scheduler.loaded == []
        assert all(s.installed for s in manager.status(rule))

    def test_enable_after_disable_reloads(self, manager: LifecycleManager, scheduler) -> None:  # type: ignore[no-untyped-def]
        rule = _work_hours_dark()
        manager.install(rule)
        manager.disable(rule)
        assert manager.enable(rule)
        assert len(scheduler.loaded) == 2

    def test_enable_failure_unloads_partial_range(self, manager: LifecycleManager, scheduler) -> None:  # type: ignore[no-untyped-def]
        rule = _work_hours_dark()
        manager.install(rule)
        manager.disable(rule)
        scheduler.fail_load.add("-end")
        assert not manager.enable(rule)
        assert scheduler.loaded == []

    def test_disable_never_installed_rule(self, manager: LifecycleManager) -> None:
        assert manager.disable(_dark_at_ten())


@pytest.mark.unit
class TestUninstall:
    def test_removes_files_and_registration(self, manager: LifecycleManager, scheduler, test_settings) -> None:  # type: ignore[no-untyped-def]
        rule = _work_hours_dark()
        manager.install(rule)
        manager.uninstall(rule)
        assert scheduler.loaded == []
        assert _plists(test_settings) == []
        assert not any(s.plist_present or s.script_present for s in manager.status(rule))

    def test_uninstall_of_unknown_rule_is_quiet(self, manager: LifecycleManager) -> None:
        manager.uninstall(_dark_at_ten())

    def test_reinstall_moves_to_new_label(self, manager: LifecycleManager, scheduler, test_settings) -> None:  # type: ignore[no-untyped-def]
        rule = _dark_at_ten()
        manager.install(rule)
        previous = copy.deepcopy(rule)
        rule.set_trigger("on-login")

        assert manager.reinstall(rule, previous)
        names = _plists(test_settings)
        assert len(names) == 1
        assert ".on-login." in names[0]
        assert len(scheduler.loaded) == 1

    def test_reinstall_disabled_rule_only_removes(self, manager: LifecycleManager, test_settings) -> None:  # type: ignore[no-untyped-def]
        rule = _dark_at_ten()
        manager.install(rule)
        rule.enabled = False
        assert manager.reinstall(rule)
        assert _plists(test_settings) == []

    def test_remove_all_sweeps_disk(self, manager: LifecycleManager, scheduler, test_settings) -> None:  # type: ignore[no-untyped-def]
        manager.install(_dark_at_ten())
        manager.install(_work_hours_dark())
        assert manager.remove_all() == 3
        assert scheduler.loaded == []
        assert _plists(test_settings) == []
        assert list(test_settings.paths.scripts_dir.iterdir()) == []


@pytest.mark.unit
class TestPauseResume:
    def _seed(self, store: RuleStore, manager: LifecycleManager) -> tuple[Rule, Rule, Rule]:
        first = store.add(_dark_at_ten())
        second = store.add(Rule.create("on-login", "empty-trash"))
        third = store.add(Rule.create("on-login", "set-volume", enabled=False))
        manager.install(first)
        manager.install(second)
        return first, second, third

    def test_pause_unregisters_enabled_rules(self, manager: LifecycleManager, store: RuleStore, scheduler) -> None:  # type: ignore[no-untyped-def]
        first, second, _ = self._seed(store, manager)
        paused = manager.pause_all()

        assert sorted(paused) == sorted([first.id, second.id])
        assert scheduler.loaded == []
        assert store.is_paused
        assert all(r.enabled for r in (store.require(first.id), store.require(second.id)))

    def test_resume_restores_snapshot(self, manager: LifecycleManager, store: RuleStore, scheduler) -> None:  # type: ignore[no-untyped-def]
        first, second, _ = self._seed(store, manager)
        manager.pause_all()
        resumed = manager.resume_all()

        assert sorted(resumed) == sorted([first.id, second.id])
        assert len(scheduler.loaded) == 2
        assert not store.is_paused
        assert store.paused_rule_ids == []

    def test_resume_skips_removed_and_disabled(self, manager: LifecycleManager, store: RuleStore, scheduler) -> None:  # type: ignore[no-untyped-def]
        first, second, _ = self._seed(store, manager)
        manager.pause_all()
        store.remove(first.id)
        store.set_enabled(second.id, False)

        assert manager.resume_all() == []
        assert scheduler.loaded == []
        assert not store.is_paused


@pytest.mark.unit
class TestRecordRun:
    def test_record_run_stamps_rule(self, manager: LifecycleManager, store: RuleStore) -> None:
        rule = store.add(_dark_at_ten())
        assert manager.record_run(rule.id).last_run_at is not None
        assert RuleStore(store.path).require(rule.id).last_run_at is not None

    def test_run_now_starts_unit_and_records(self, manager: LifecycleManager, store: RuleStore, scheduler) -> None:  # type: ignore[no-untyped-def]
        rule = store.add(_dark_at_ten())
        assert manager.install(rule)
        assert manager.run_now(rule)

        label = manager.compiler.layout(rule)[0].label
        assert ("start", label) in scheduler.calls
        assert store.require(rule.id).last_run_at is not None

    def test_run_now_of_range_starts_the_start_unit(self, manager: LifecycleManager, store: RuleStore, scheduler) -> None:  # type: ignore[no-untyped-def]
        rule = store.add(_work_hours_dark())
        assert manager.install(rule)
        assert manager.run_now(rule)
        started = [label for call, label in scheduler.calls if call == "start"]
        assert len(started) == 1
        assert started[0].endswith("-start")

    def test_run_now_of_unregistered_rule_fails(self, manager: LifecycleManager, store: RuleStore) -> None:
        rule = store.add(_dark_at_ten())
        assert not manager.run_now(rule)
        assert store.require(rule.id).last_run_at is None
