"""Configuration sources.

A configuration source supplies the raw blob (override fields plus the import
map section) and the base location that local targets are resolved against:
- MappingConfigSource: in-memory blob
- FileConfigSource: explicit JSON, YAML or TOML file
"""

from __future__ import annotations

import copy
import json
import logging
import tomllib
from pathlib import Path
from typing import Any
from typing import Protocol

import yaml

from .errors import ConfigurationError
from .errors import ConfigurationNotFound

logger = logging.getLogger(__name__)


class ConfigSource(Protocol):
    """Supplies the raw configuration blob and its base location."""

    @property
    def base_location(self) -> str: ...

    def read(self) -> dict[str, Any]: ...


class MappingConfigSource:
    """Configuration held in memory."""

    def __init__(self, data: dict[str, Any], base_location: str | Path = "."):
        self.data = data
        self._base_location = str(Path(base_location).resolve())

    @property
    def base_location(self) -> str:
        return self._base_location

    def read(self) -> dict[str, Any]:
        return copy.deepcopy(self.data)

    def __repr__(self) -> str:
        return f"MappingConfigSource(base={self._base_location})"


class FileConfigSource:
    """Configuration read from an explicitly named file.

    Format is chosen by suffix: .json, .yaml/.yml or .toml. For TOML files an
    optional dotted `section` (e.g. "tool.plumpkin") selects the sub-table that
    holds the configuration.
    """

    def __init__(self, path: str | Path, section: str | None = None):
        self.path = Path(path).expanduser().resolve()
        self.section = section

    @property
    def base_location(self) -> str:
        return str(self.path.parent)

    def read(self) -> dict[str, Any]:
        """Read and parse the configuration file.

        Raises:
            ConfigurationNotFound: File does not exist
            ConfigurationError: File cannot be parsed or is not a mapping
        """
        if not self.path.is_file():
            raise ConfigurationNotFound(str(self.path))

        logger.debug(f"[importmap:config] reading {self.path}")
        try:
            data = self._parse(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, yaml.YAMLError, tomllib.TOMLDecodeError) as e:
            raise ConfigurationError(f"Failed to parse {self.path}: {e}") from e

        if self.section:
            for part in self.section.split("."):
                data = data.get(part) if isinstance(data, dict) else None
            if data is None:
                data = {}

        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration in {self.path} must be a mapping")
        return data

    def _parse(self, text: str) -> Any:
        suffix = self.path.suffix.lower()
        if suffix in (".yaml", ".yml"):
            return yaml.safe_load(text) or {}
        if suffix == ".toml":
            return tomllib.loads(text)
        return json.loads(text)

    def __repr__(self) -> str:
        return f"FileConfigSource({self.path})"
