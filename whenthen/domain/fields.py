"""Field schema — what a trigger or action needs from the user.

A FieldSpec is the machine-readable description of one configurable value.
The CLI renders catalogues from it and the suggestion engine reports
unfilled fields by ``name``.  One field may span several config keys (a
time picker fills both ``hour`` and ``minute``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FieldKind(str, Enum):
    TIME = "time"
    WEEKDAYS = "weekdays"
    NUMBER = "number"
    TEXT = "text"
    FILE = "file"
    FOLDER = "folder"
    APPS = "apps"
    URLS = "urls"
    CHOICE = "choice"


@dataclass(frozen=True)
class FieldSpec:
    """Description of a single configurable field."""

    name: str
    kind: FieldKind
    label: str
    keys: tuple[str, ...] = ()
    unit: str = ""
    placeholder: str = ""
    options: tuple[Any, ...] = ()

    @property
    def config_keys(self) -> tuple[str, ...]:
        """Config keys filled by this field; defaults to the field name itself."""
        return self.keys or (self.name,)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "kind": self.kind.value,
            "label": self.label,
            "keys": list(self.config_keys),
        }
        if self.unit:
            data["unit"] = self.unit
        if self.placeholder:
            data["placeholder"] = self.placeholder
        if self.options:
            data["options"] = list(self.options)
        return data


@dataclass(frozen=True)
class FieldSchema:
    """Ordered collection of FieldSpecs for one variant."""

    fields: tuple[FieldSpec, ...] = field(default_factory=tuple)

    def __iter__(self):  # type: ignore[no-untyped-def]
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def names(self) -> list[str]:
        return [f.name for f in self.fields]

    def missing(self, filled_keys: set[str]) -> list[str]:
        """Names of fields with at least one config key absent from *filled_keys*."""
        return [
            f.name
            for f in self.fields
            if any(key not in filled_keys for key in f.config_keys)
        ]
