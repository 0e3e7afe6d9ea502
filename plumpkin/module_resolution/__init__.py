"""Import map resolution.

Resolves short specifiers to module locations through an `{imports, scopes}`
table read once from configuration, then loads and caches the module.
"""

from .config_gate import ConfigGate
from .config_gate import is_remote_url
from .diagnostics import CollectingDiagnosticSink
from .diagnostics import DiagnosticSink
from .diagnostics import LoggingDiagnosticSink
from .errors import ConfigurationError
from .errors import ConfigurationNotFound
from .errors import ImportMapError
from .errors import ModuleLoadError
from .errors import RemoteImportBlocked
from .errors import SpecifierNotFound
from .loaders import DefaultModuleLoader
from .loaders import FileModuleLoader
from .loaders import ModuleLoader
from .loaders import RemoteModuleLoader
from .matching import match_imports
from .matching import match_specifier
from .models import ConfigState
from .models import ImportMap
from .resolvers import ImportMapResolver
from .sources import ConfigSource
from .sources import FileConfigSource
from .sources import MappingConfigSource

__all__ = [
    "CollectingDiagnosticSink",
    "ConfigGate",
    "ConfigSource",
    "ConfigState",
    "ConfigurationError",
    "ConfigurationNotFound",
    "DefaultModuleLoader",
    "DiagnosticSink",
    "FileConfigSource",
    "FileModuleLoader",
    "ImportMap",
    "ImportMapError",
    "ImportMapResolver",
    "LoggingDiagnosticSink",
    "MappingConfigSource",
    "ModuleLoadError",
    "ModuleLoader",
    "RemoteImportBlocked",
    "RemoteModuleLoader",
    "SpecifierNotFound",
    "is_remote_url",
    "match_imports",
    "match_specifier",
]
