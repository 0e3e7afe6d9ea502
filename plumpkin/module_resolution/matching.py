"""Specifier matching against an import map.

Pure functions, no I/O. Resolution order (first success wins):
1. Scopes whose prefix starts the referrer, longest prefix first
2. Top-level imports

Within one table an exact key beats any prefix key, and among prefix keys
(keys ending in "/") the longest one that starts the specifier wins.
"""

from __future__ import annotations

from collections.abc import Mapping

from .models import ImportMap

SEPARATOR = "/"


def match_imports(specifier: str, table: Mapping[str, str]) -> str | None:
    """Match a specifier against a flat imports table.

    Args:
        specifier: Specifier to look up
        table: Mapping of specifier or prefix to target

    Returns:
        Target string, or None when nothing matches
    """
    exact = table.get(specifier)
    if exact:
        return exact

    # Longest prefix first, ties broken by key so the winner is stable
    prefixes = sorted(
        (key for key in table if key.endswith(SEPARATOR) and specifier.startswith(key)),
        key=lambda key: (-len(key), key),
    )
    if not prefixes:
        return None

    winner = prefixes[0]
    return table[winner] + specifier[len(winner) :]


def match_specifier(specifier: str, import_map: ImportMap, referrer: str | None = None) -> str | None:
    """Match a specifier against scopes (when a referrer is given) then top-level imports.

    Scope prefixes are compared with plain string startswith, not path semantics.

    Returns:
        Target string, or None when no scope or top-level entry matches
    """
    if referrer and import_map.scopes:
        scope_prefixes = sorted(
            (prefix for prefix in import_map.scopes if referrer.startswith(prefix)),
            key=lambda prefix: (-len(prefix), prefix),
        )
        for prefix in scope_prefixes:
            if target := match_imports(specifier, import_map.scopes[prefix]):
                return target

    return match_imports(specifier, import_map.imports)
