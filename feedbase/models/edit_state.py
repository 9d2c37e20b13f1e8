"""Editing state of a model: clean, or editing against a snapshot."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Union


@dataclass(frozen=True)
class Clean:
    """No edit session is open; an update has no baseline to diff against."""


@dataclass(frozen=True)
class Editing:
    """An edit session is open; `snapshot` holds the column values captured by `fc_edit()`."""

    snapshot: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "snapshot", MappingProxyType(dict(self.snapshot)))


EditState = Union[Clean, Editing]

CLEAN = Clean()
