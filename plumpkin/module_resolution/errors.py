"""Error types raised by import map resolution.

All errors derive from ImportMapError so callers can catch the family in one place.
Loader failures are not wrapped; they propagate with their original type.
"""

from __future__ import annotations

REMOTE_CONFIG_KEY = "importmapRemote"


class ImportMapError(Exception):
    """Base class for import map errors."""


class ConfigurationError(ImportMapError):
    """Configuration source exists but could not be read or parsed."""


class ConfigurationNotFound(ConfigurationError):
    """No configuration source could be located."""

    def __init__(self, location: str | None = None, message: str | None = None):
        self.location = location
        if message is None:
            message = "Configuration not found while resolving importmap"
            if location:
                message += f": {location}"
        super().__init__(message)


class SpecifierNotFound(ImportMapError, LookupError):
    """Specifier matched no scope, exact or prefix entry."""

    def __init__(self, specifier: str, referrer: str | None = None):
        self.specifier = specifier
        self.referrer = referrer
        message = f"Specifier not found in importmap: {specifier}"
        if referrer:
            message += f" (referrer: {referrer})"
        super().__init__(message)


class RemoteImportBlocked(ImportMapError, PermissionError):
    """Specifier resolved to an http(s) URL while remote imports are disabled."""

    def __init__(self, target: str):
        self.target = target
        super().__init__(
            f'Remote import "{target}" blocked for security. '
            f'Set "{REMOTE_CONFIG_KEY}": true in the configuration to enable remote imports.'
        )


class ModuleLoadError(ImportMapError):
    """A built-in loader could not read or execute the module at a location."""

    def __init__(self, location: str, message: str | None = None):
        self.location = location
        super().__init__(message or f"Could not load module from {location}")
