"""JSON-backed persistence for rules.

The whole collection lives in one manifest file, rewritten atomically on
every change::

    {
      "app_version": "0.1.0",
      "last_saved": "2026-10-18T09:00:00+00:00",
      "is_paused": false,
      "paused_rule_ids": [],
      "rules": [ {...}, ... ]
    }

Configs are stored as plain dicts and revalidated into their typed models
on load.  A rule whose stored config no longer parses is skipped with a
warning rather than failing the whole load.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from whenthen import __version__
from whenthen.domain.rule import Rule
from whenthen.exceptions import RuleNotFoundError, StoreError, WhenThenError
from whenthen.lifecycle.files import atomic_write
from whenthen.logging import get_logger

log = get_logger(__name__)


def _to_dict(rule: Rule) -> dict[str, Any]:
    return {
        "id": rule.id,
        "trigger_type": rule.trigger_type.value,
        "trigger_config": rule.trigger_config.to_dict(),
        "action_type": rule.action_type.value,
        "action_config": rule.action_config.to_dict(),
        "enabled": rule.enabled,
        "created_at": rule.created_at.isoformat(),
        "last_run_at": rule.last_run_at.isoformat() if rule.last_run_at else None,
        "custom_name": rule.custom_name,
    }


def _from_dict(d: dict[str, Any]) -> Rule:
    last_run = d.get("last_run_at")
    return Rule.create(
        trigger_type=d["trigger_type"],
        action_type=d["action_type"],
        trigger_config=d.get("trigger_config") or {},
        action_config=d.get("action_config") or {},
        custom_name=d.get("custom_name"),
        id=d["id"],
        enabled=bool(d.get("enabled", True)),
        created_at=datetime.fromisoformat(d["created_at"]),
        last_run_at=datetime.fromisoformat(last_run) if last_run else None,
    )


class RuleStore:
    """Keyed rule collection persisted to a JSON manifest.

    Usage::

        store = RuleStore(settings.paths.store_file)
        store.add(rule)
        for rule in store.enabled():
            ...
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._rules: dict[str, Rule] = {}
        self._paused_ids: list[str] = []
        self._is_paused = False
        self.reload()

    @property
    def path(self) -> Path:
        return self._path

    # ---------------------------------------------------------------------------
    # Persistence
    # ---------------------------------------------------------------------------

    def reload(self) -> None:
        """Re-read the manifest from disk.  A missing file is an empty store."""
        if not self._path.exists():
            self._rules, self._paused_ids, self._is_paused = {}, [], False
            return
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise StoreError(
                f"Cannot read rule store '{self._path}': {exc}",
                context={"path": str(self._path)},
            ) from exc
        if not isinstance(raw, dict):
            raise StoreError(
                f"Rule store '{self._path}' is not a JSON object",
                context={"path": str(self._path)},
            )

        rules: dict[str, Rule] = {}
        for entry in raw.get("rules", []):
            try:
                rule = _from_dict(entry)
            except (WhenThenError, KeyError, TypeError, ValueError) as exc:
                log.warning("store_rule_skipped", rule_id=entry.get("id"), error=str(exc))
                continue
            rules[rule.id] = rule
        self._rules = rules
        self._paused_ids = [str(i) for i in raw.get("paused_rule_ids", [])]
        self._is_paused = bool(raw.get("is_paused", False))
        log.debug("store_loaded", path=str(self._path), rules=len(rules))

    def save(self) -> None:
        document = {
            "app_version": __version__,
            "last_saved": datetime.now(timezone.utc).isoformat(),
            "is_paused": self._is_paused,
            "paused_rule_ids": self._paused_ids,
            "rules": [_to_dict(r) for r in self._rules.values()],
        }
        data = json.dumps(document, indent=2, sort_keys=True).encode("utf-8")
        try:
            atomic_write(self._path, data)
        except OSError as exc:
            raise StoreError(
                f"Cannot write rule store '{self._path}': {exc}",
                context={"path": str(self._path)},
            ) from exc

    # ---------------------------------------------------------------------------
    # CRUD
    # ---------------------------------------------------------------------------

    def add(self, rule: Rule) -> Rule:
        self._rules[rule.id] = rule
        self.save()
        log.info("rule_added", rule_id=rule.id, name=rule.display_name)
        return rule

    def update(self, rule: Rule) -> None:
        if rule.id not in self._rules:
            raise RuleNotFoundError(rule.id)
        self._rules[rule.id] = rule
        self.save()
        log.info("rule_updated", rule_id=rule.id, name=rule.display_name)

    def remove(self, rule_id: str) -> bool:
        rule = self._rules.pop(rule_id, None)
        if rule is None:
            return False
        self.save()
        log.info("rule_removed", rule_id=rule_id, name=rule.display_name)
        return True

    def get(self, rule_id: str) -> Rule | None:
        return self._rules.get(rule_id)

    def require(self, rule_id: str) -> Rule:
        rule = self._rules.get(rule_id)
        if rule is None:
            raise RuleNotFoundError(rule_id)
        return rule

    def all(self) -> list[Rule]:
        """Every rule, newest first."""
        return sorted(self._rules.values(), key=lambda r: r.created_at, reverse=True)

    def enabled(self) -> list[Rule]:
        return [r for r in self._rules.values() if r.enabled]

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules

    def set_enabled(self, rule_id: str, enabled: bool) -> Rule:
        rule = self.require(rule_id)
        rule.enabled = enabled
        self.save()
        log.info("rule_toggled", rule_id=rule_id, enabled=enabled)
        return rule

    def record_run(self, rule_id: str, when: datetime | None = None) -> Rule:
        rule = self.require(rule_id)
        rule.last_run_at = when or datetime.now(timezone.utc)
        self.save()
        return rule

    # ---------------------------------------------------------------------------
    # Pause snapshot
    # ---------------------------------------------------------------------------

    @property
    def is_paused(self) -> bool:
        return self._is_paused

    @property
    def paused_rule_ids(self) -> list[str]:
        return list(self._paused_ids)

    def set_paused(self, rule_ids: list[str]) -> None:
        self._paused_ids = list(rule_ids)
        self._is_paused = True
        self.save()

    def clear_paused(self) -> list[str]:
        """Drop the pause snapshot and return the ids it held."""
        snapshot = self._paused_ids
        self._paused_ids = []
        self._is_paused = False
        self.save()
        return snapshot
