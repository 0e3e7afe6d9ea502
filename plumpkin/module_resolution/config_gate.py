"""One-shot configuration gate.

Turns a raw configuration blob into a frozen ImportMap. The first successful
materialization adopts the blob's override fields and freezes ConfigState;
later blobs cannot change the map field name or the remote flag.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from .diagnostics import DiagnosticSink
from .diagnostics import LoggingDiagnosticSink
from .errors import REMOTE_CONFIG_KEY
from .matching import SEPARATOR
from .models import ConfigState
from .models import ImportMap
from .models import ImportMapSection

logger = logging.getLogger(__name__)

MAP_FIELD_CONFIG_KEY = "importmapField"

_REMOTE_URL = re.compile(r"^https?://", re.IGNORECASE)


def is_remote_url(target: str) -> bool:
    """True for http:// and https:// URLs (scheme is case-insensitive)."""
    return bool(_REMOTE_URL.match(target))


class ConfigGate:
    """Produces the ImportMap exactly once and freezes ConfigState."""

    def __init__(self, state: ConfigState | None = None, diagnostics: DiagnosticSink | None = None):
        self.state = state or ConfigState()
        self.diagnostics = diagnostics or LoggingDiagnosticSink()
        self._import_map: ImportMap | None = None

    @property
    def materialized(self) -> bool:
        return self._import_map is not None

    @property
    def import_map(self) -> ImportMap | None:
        return self._import_map

    def materialize(self, raw_config: Mapping[str, Any]) -> ImportMap:
        """Derive the ImportMap from a raw configuration blob.

        Returns the previously built map on every call after the first.

        Args:
            raw_config: Configuration blob (e.g. parsed package.json)

        Returns:
            Frozen ImportMap
        """
        if self._import_map is not None:
            return self._import_map

        self._adopt_overrides(raw_config)

        import_map = self._parse_section(raw_config.get(self.state.map_field_name))
        self.validate(import_map)

        self._import_map = import_map
        logger.debug(
            f"[importmap:materialize] {len(import_map.imports)} imports, {len(import_map.scopes)} scopes "
            f"(field={self.state.map_field_name}, remote={self.state.remote_enabled})"
        )
        return import_map

    def _adopt_overrides(self, raw_config: Mapping[str, Any]) -> None:
        if self.state.frozen:
            if MAP_FIELD_CONFIG_KEY in raw_config or REMOTE_CONFIG_KEY in raw_config:
                logger.debug("[importmap:config] configuration frozen, ignoring override fields")
            return

        field_name = raw_config.get(MAP_FIELD_CONFIG_KEY)
        if isinstance(field_name, str) and field_name:
            self.state.map_field_name = field_name

        remote = raw_config.get(REMOTE_CONFIG_KEY)
        if isinstance(remote, bool):
            self.state.remote_enabled = remote

        self.state.freeze()

    def _parse_section(self, section: Any) -> ImportMap:
        if section is None:
            return ImportMap.empty()
        try:
            return ImportMap.from_section(ImportMapSection.model_validate(section))
        except ValidationError as e:
            logger.debug(f"[importmap:config] malformed '{self.state.map_field_name}' section ignored: {e}")
            return ImportMap.empty()

    def validate(self, import_map: ImportMap) -> None:
        """Emit warnings for suspicious entries. Never raises."""
        self._validate_table(import_map.imports, scope=None)
        for scope_prefix, table in import_map.scopes.items():
            self._validate_table(table, scope=scope_prefix)

    def _validate_table(self, table: Mapping[str, str], scope: str | None) -> None:
        where = f'Import map scope "{scope}"' if scope is not None else "Import map"
        for key, value in table.items():
            if key.endswith(SEPARATOR) and not value.endswith(SEPARATOR):
                self.diagnostics.warn(f'{where}: prefix "{key}" ends with / but target "{value}" does not')

            if is_remote_url(value) and not self.state.remote_enabled:
                self.diagnostics.warn(
                    f'{where}: remote URL "{value}" found but remote imports are disabled. '
                    f'Set "{REMOTE_CONFIG_KEY}": true in the configuration to enable.'
                )
