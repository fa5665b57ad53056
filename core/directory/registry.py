"""
BTP Terminal Directory - Registry Contract
============================================
The host protocol owns the directory of terminals per project.
This module only consumes it: "is this caller a terminal of project X?"

Implementations may back this with a database, an RPC client,
or an in-memory map (testing / bootstrap).
"""

from __future__ import annotations

from threading import Lock
from typing import Dict, Protocol, Set


class TerminalDirectory(Protocol):
    """Protocol for the external terminal/controller registry."""

    def is_terminal_of(self, project_id: int, terminal: str) -> bool:
        """True if `terminal` is registered for `project_id`."""
        ...  # pragma: no cover


class InMemoryTerminalDirectory:
    """Simple in-memory terminal directory for testing and bootstrap."""

    def __init__(self) -> None:
        self._terminals: Dict[int, Set[str]] = {}
        self._lock = Lock()

    def add_terminal(self, project_id: int, terminal: str) -> None:
        with self._lock:
            self._terminals.setdefault(project_id, set()).add(terminal)

    def remove_terminal(self, project_id: int, terminal: str) -> None:
        with self._lock:
            self._terminals.get(project_id, set()).discard(terminal)

    def is_terminal_of(self, project_id: int, terminal: str) -> bool:
        with self._lock:
            return terminal in self._terminals.get(project_id, set())
