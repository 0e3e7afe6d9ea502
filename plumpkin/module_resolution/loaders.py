"""Module loaders.

A loader turns a resolved location into a module object:
- FileModuleLoader: absolute local path (.py file or package directory)
- RemoteModuleLoader: http(s) URL, fetched with httpx
- DefaultModuleLoader: dispatches between the two by location shape
"""

from __future__ import annotations

import hashlib
import importlib.abc
import importlib.machinery
import importlib.util
import logging
import sys
import types
from collections.abc import Awaitable
from pathlib import Path
from typing import Protocol

import httpx

from .config_gate import is_remote_url
from .errors import ModuleLoadError

logger = logging.getLogger(__name__)


class ModuleLoader(Protocol):
    """Loads a module from an absolute local location or a remote URL."""

    def load(self, location: str) -> Awaitable[types.ModuleType]: ...


def _module_name(location: str) -> str:
    digest = hashlib.sha256(location.encode()).hexdigest()[:12]
    stem = Path(location.rstrip("/")).stem.replace("-", "_").replace(".", "_") or "module"
    return f"plumpkin_mod_{stem}_{digest}"


def _execute(spec: importlib.machinery.ModuleSpec) -> types.ModuleType:
    module = importlib.util.module_from_spec(spec)
    sys.modules[spec.name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(spec.name, None)
        raise
    return module


class _RemoteSourceLoader(importlib.abc.Loader):
    """Executes already-fetched source text as a module."""

    def __init__(self, location: str, source: str):
        self.location = location
        self.source = source

    def get_source(self, fullname: str) -> str:
        return self.source

    def exec_module(self, module: types.ModuleType) -> None:
        code = compile(self.source, self.location, "exec")
        exec(code, module.__dict__)


class FileModuleLoader:
    """Loads Python source from the local filesystem."""

    async def load(self, location: str) -> types.ModuleType:
        path = Path(location)
        if path.is_dir():
            init_file = path / "__init__.py"
            if not init_file.is_file():
                raise ModuleLoadError(location, f"Module path is not a Python package: {path}")
            spec = importlib.util.spec_from_file_location(
                _module_name(location), str(init_file), submodule_search_locations=[str(path)]
            )
        elif path.is_file():
            spec = importlib.util.spec_from_file_location(_module_name(location), str(path))
        else:
            raise ModuleLoadError(location, f"Module path not found: {path}")

        if spec is None or spec.loader is None:
            raise ModuleLoadError(location, f"Cannot create import spec for {path}")

        module = _execute(spec)
        logger.debug(f"[importmap:load] {location} -> {spec.name}")
        return module

    def __repr__(self) -> str:
        return "FileModuleLoader()"


class RemoteModuleLoader:
    """Fetches Python source over http(s) and executes it in a fresh module."""

    def __init__(self, timeout: float = 10.0, client: httpx.AsyncClient | None = None):
        self.timeout = timeout
        self._client = client

    async def load(self, location: str) -> types.ModuleType:
        logger.info(f"Fetching remote module: {location}")
        try:
            if self._client is not None:
                response = await self._client.get(location, timeout=self.timeout, follow_redirects=True)
            else:
                async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                    response = await client.get(location)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ModuleLoadError(location, f"Failed to fetch {location}: {e}") from e

        spec = importlib.util.spec_from_loader(
            _module_name(location), _RemoteSourceLoader(location, response.text), origin=location
        )
        spec.has_location = True
        return _execute(spec)

    def __repr__(self) -> str:
        return f"RemoteModuleLoader(timeout={self.timeout})"


class DefaultModuleLoader:
    """Routes http(s) URLs to the remote loader and everything else to the file loader."""

    def __init__(self, file_loader: ModuleLoader | None = None, remote_loader: ModuleLoader | None = None):
        self.file_loader = file_loader or FileModuleLoader()
        self.remote_loader = remote_loader or RemoteModuleLoader()

    async def load(self, location: str) -> types.ModuleType:
        if is_remote_url(location):
            return await self.remote_loader.load(location)
        return await self.file_loader.load(location)

    def __repr__(self) -> str:
        return f"DefaultModuleLoader({self.file_loader!r}, {self.remote_loader!r})"
