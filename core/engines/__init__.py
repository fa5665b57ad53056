"""
BTP Engine Contracts - Public API
===================================
"""

from core.engines.contracts import EngineContract

__all__ = [
    "EngineContract",
]
