"""Plist serialization of job units (the launchd agent file format)."""

from __future__ import annotations

import plistlib
from typing import Any

from whenthen.compiler.units import JobUnit


def unit_document(unit: JobUnit) -> dict[str, Any]:
    """The launchd property list for *unit* as a plain dict."""
    document: dict[str, Any] = {
        "Label": unit.label,
        "ProgramArguments": list(unit.program_arguments),
    }
    document.update(unit.schedule.plist_entries())
    document["StandardOutPath"] = str(unit.log_path)
    document["StandardErrorPath"] = str(unit.log_path)
    return document


def dumps(unit: JobUnit) -> bytes:
    return plistlib.dumps(unit_document(unit), fmt=plistlib.FMT_XML, sort_keys=False)


def loads(data: bytes) -> dict[str, Any]:
    return plistlib.loads(data)
