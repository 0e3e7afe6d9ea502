"""Data models for import map resolution.

- ImportMapSection: pydantic model validating the raw config section
- ImportMap: frozen imports + scopes tables
- ConfigState: one-shot configuration flags
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from types import MappingProxyType

from pydantic import BaseModel
from pydantic import ConfigDict

DEFAULT_MAP_FIELD = "importmap"


class ImportMapSection(BaseModel):
    """Raw `{imports, scopes}` section as found in the configuration blob."""

    model_config = ConfigDict(extra="ignore", strict=True)

    imports: dict[str, str] = {}
    scopes: dict[str, dict[str, str]] = {}


def _freeze_table(table: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(table))


@dataclass(frozen=True)
class ImportMap:
    """Immutable specifier tables.

    Attributes:
        imports: Top-level specifier (or prefix ending in "/") to target
        scopes: Referrer prefix to a nested imports table
    """

    imports: Mapping[str, str] = field(default_factory=dict)
    scopes: Mapping[str, Mapping[str, str]] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "imports", _freeze_table(self.imports))
        object.__setattr__(
            self,
            "scopes",
            MappingProxyType({prefix: _freeze_table(table) for prefix, table in self.scopes.items()}),
        )

    @classmethod
    def from_section(cls, section: ImportMapSection) -> ImportMap:
        return cls(imports=section.imports, scopes=section.scopes)

    @classmethod
    def empty(cls) -> ImportMap:
        return cls()


@dataclass
class ConfigState:
    """Configuration flags that become immutable after the first freeze.

    Attributes:
        map_field_name: Name of the configuration section holding the import map
        remote_enabled: Whether http(s) targets may be loaded
        frozen: Set once, on the first successful configuration load
    """

    map_field_name: str = DEFAULT_MAP_FIELD
    remote_enabled: bool = False
    frozen: bool = False

    def __setattr__(self, name, value):
        if getattr(self, "frozen", False) and name in ("map_field_name", "remote_enabled", "frozen"):
            raise AttributeError(f"ConfigState is frozen; cannot change '{name}'")
        super().__setattr__(name, value)

    def freeze(self) -> None:
        if not self.frozen:
            super().__setattr__("frozen", True)
