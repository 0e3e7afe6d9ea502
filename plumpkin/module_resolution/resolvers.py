"""Import map resolver - specifier to module, with caching.

Pipeline for resolve(specifier, referrer):
1. Materialize the import map once (ConfigGate, lazy)
2. Cache lookup
3. Match scopes / exact / longest prefix
4. Remote policy check, then local targets are joined onto the config base location
5. Load through the injected loader, cache on success

Cache keys are the specifier alone by default, so a specifier first resolved
under one scope is returned for every later referrer. Pass
cache_by_referrer=True to key entries by (specifier, referrer) instead.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import types
from pathlib import Path

from .config_gate import ConfigGate
from .config_gate import is_remote_url
from .diagnostics import DiagnosticSink
from .errors import RemoteImportBlocked
from .errors import SpecifierNotFound
from .loaders import DefaultModuleLoader
from .loaders import ModuleLoader
from .matching import match_specifier
from .models import DEFAULT_MAP_FIELD
from .models import ConfigState
from .models import ImportMap
from .sources import ConfigSource

logger = logging.getLogger(__name__)

CacheKey = str | tuple[str, str | None]


class ImportMapResolver:
    """Resolves specifiers through an import map and caches loaded modules.

    Each instance owns its own ConfigState, so independent resolvers never share
    frozen configuration.
    """

    def __init__(
        self,
        source: ConfigSource,
        loader: ModuleLoader | None = None,
        diagnostics: DiagnosticSink | None = None,
        map_field_name: str = DEFAULT_MAP_FIELD,
        remote_enabled: bool = False,
        cache_by_referrer: bool = False,
    ):
        """Initialize resolver.

        Args:
            source: Configuration source supplying the raw blob and base location
            loader: Module loader (default: DefaultModuleLoader)
            diagnostics: Sink for validation warnings (default: logging)
            map_field_name: Default config section name, overridable by the blob until frozen
            remote_enabled: Default remote flag, overridable by the blob until frozen
            cache_by_referrer: Key the cache by (specifier, referrer) instead of specifier alone
        """
        self.source = source
        self.loader = loader or DefaultModuleLoader()
        self.cache_by_referrer = cache_by_referrer
        self.gate = ConfigGate(
            ConfigState(map_field_name=map_field_name, remote_enabled=remote_enabled),
            diagnostics,
        )

        self._cache: dict[CacheKey, types.ModuleType] = {}
        self._pending: dict[CacheKey, asyncio.Task] = {}
        self._generation = 0
        self._cache_lock = threading.Lock()
        self._config_lock = threading.Lock()
        self._base_location: str | None = None

    @property
    def state(self) -> ConfigState:
        return self.gate.state

    @property
    def import_map(self) -> ImportMap | None:
        """Materialized import map, or None before the first resolution."""
        return self.gate.import_map

    async def get_import_map(self) -> ImportMap:
        """Materialize the import map on first use and return it.

        Raises:
            ConfigurationNotFound: Source could not be located
        """
        if (import_map := self.gate.import_map) is not None:
            return import_map

        # Thread lock: read + materialize are synchronous and resolvers may be shared across event loops
        with self._config_lock:
            if (import_map := self.gate.import_map) is not None:
                return import_map
            raw_config = self.source.read()
            self._base_location = self.source.base_location
            return self.gate.materialize(raw_config)

    async def locate(self, specifier: str, referrer: str | None = None) -> str:
        """Resolve a specifier to a loadable location without loading it.

        Returns:
            Absolute local path or remote URL

        Raises:
            SpecifierNotFound: No scope, exact or prefix match
            RemoteImportBlocked: Target is http(s) and remote imports are disabled
        """
        self._check_specifier(specifier)
        import_map = await self.get_import_map()
        return self._locate(specifier, referrer, import_map)

    async def resolve(self, specifier: str, referrer: str | None = None) -> types.ModuleType:
        """Resolve a specifier and load the module it maps to.

        Args:
            specifier: Symbolic module specifier (e.g. "logger", "utils/helper.py")
            referrer: Optional location of the importing module, used for scopes

        Returns:
            Loaded module (cached after the first successful load)

        Raises:
            SpecifierNotFound: No scope, exact or prefix match
            RemoteImportBlocked: Target is http(s) and remote imports are disabled
            Exception: Any loader failure, unmodified
        """
        self._check_specifier(specifier)
        import_map = await self.get_import_map()

        key = self._cache_key(specifier, referrer)
        loop = asyncio.get_running_loop()
        with self._cache_lock:
            if key in self._cache:
                logger.debug(f"[importmap:cache] hit {specifier}")
                return self._cache[key]

            pending = self._pending.get(key)
            if pending is None or pending.get_loop() is not loop:
                # Loads on another event loop cannot be awaited here; start an independent one
                task = loop.create_task(self._load(key, specifier, referrer, import_map, self._generation))
                if pending is None:
                    self._pending[key] = task
                    task.add_done_callback(lambda done: self._forget_pending(key, done))
                pending = task

        return await pending

    def clear_cache(self) -> None:
        """Drop all cached modules. Configuration stays frozen.

        Loads still in flight finish for their callers but are not cached.
        """
        with self._cache_lock:
            self._cache.clear()
            self._pending.clear()
            self._generation += 1
        logger.debug("[importmap:cache] cleared")

    def cached_specifiers(self) -> list[CacheKey]:
        with self._cache_lock:
            return list(self._cache)

    async def _load(
        self, key: CacheKey, specifier: str, referrer: str | None, import_map: ImportMap, generation: int
    ) -> types.ModuleType:
        location = self._locate(specifier, referrer, import_map)
        module = await self.loader.load(location)
        with self._cache_lock:
            if generation == self._generation:
                self._cache[key] = module
            else:
                logger.debug(f"[importmap:cache] cache cleared during load, not caching {specifier}")
        return module

    def _forget_pending(self, key: CacheKey, task: asyncio.Task) -> None:
        with self._cache_lock:
            if self._pending.get(key) is task:
                del self._pending[key]

    def _locate(self, specifier: str, referrer: str | None, import_map: ImportMap) -> str:
        target = match_specifier(specifier, import_map, referrer)
        if not target:
            raise SpecifierNotFound(specifier, referrer)

        if is_remote_url(target):
            if not self.state.remote_enabled:
                raise RemoteImportBlocked(target)
            logger.debug(f"[importmap:resolve] {specifier} -> remote {target}")
            return target

        if target.startswith("file://"):
            target = target[7:]
        location = str((Path(self._base_location or ".") / target).resolve())
        logger.debug(f"[importmap:resolve] {specifier} -> {location}")
        return location

    def _cache_key(self, specifier: str, referrer: str | None) -> CacheKey:
        if self.cache_by_referrer:
            return (specifier, referrer)
        return specifier

    @staticmethod
    def _check_specifier(specifier: str) -> None:
        if not isinstance(specifier, str) or not specifier:
            raise ValueError("Specifier must be a non-empty string")

    def __repr__(self) -> str:
        return f"ImportMapResolver({self.source!r}, remote={self.state.remote_enabled})"
