"""Diagnostic sinks for import map validation warnings."""

from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger("plumpkin.diagnostics")


class DiagnosticSink(Protocol):
    """Receives validation warnings as plain strings. Must not raise."""

    def warn(self, message: str) -> None: ...


class LoggingDiagnosticSink:
    """Default sink: forwards warnings to the plumpkin.diagnostics logger."""

    def warn(self, message: str) -> None:
        logger.warning(message)

    def __repr__(self) -> str:
        return "LoggingDiagnosticSink()"


class CollectingDiagnosticSink:
    """Keeps warnings in memory (used by `plumpkin check` and tests)."""

    def __init__(self):
        self.messages: list[str] = []

    def warn(self, message: str) -> None:
        self.messages.append(message)

    def clear(self) -> None:
        self.messages.clear()

    def __len__(self) -> int:
        return len(self.messages)

    def __repr__(self) -> str:
        return f"CollectingDiagnosticSink({len(self.messages)} messages)"
