"""Installed-application discovery.

Names are read from ``.app`` bundles in the configured directories once per
catalog instance; the suggestion engine receives the resulting list so its
own parsing stays free of I/O.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from whenthen.logging import get_logger

log = get_logger(__name__)


class ApplicationCatalog:
    def __init__(self, directories: Iterable[Path]) -> None:
        self._directories = [Path(d).expanduser() for d in directories]
        self._cache: list[str] | None = None

    def installed_apps(self) -> list[str]:
        """Sorted, unique bundle names without the ``.app`` suffix."""
        if self._cache is None:
            self._cache = self._scan()
        return list(self._cache)

    def refresh(self) -> list[str]:
        self._cache = None
        return self.installed_apps()

    def _scan(self) -> list[str]:
        names: set[str] = set()
        for directory in self._directories:
            if not directory.is_dir():
                continue
            try:
                entries = list(directory.iterdir())
            except OSError as exc:
                log.warning("app_dir_unreadable", directory=str(directory), error=str(exc))
                continue
            for entry in entries:
                if entry.suffix == ".app" and entry.stem:
                    names.add(entry.stem)
        log.debug("apps_discovered", count=len(names))
        return sorted(names, key=str.lower)
