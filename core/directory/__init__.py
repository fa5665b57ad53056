"""
BTP Terminal Directory - Public API
=====================================
"""

from core.directory.registry import InMemoryTerminalDirectory, TerminalDirectory

__all__ = [
    "TerminalDirectory",
    "InMemoryTerminalDirectory",
]
