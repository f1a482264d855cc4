"""
Atomic data structures and database interfaces.

This module provides:
- Element, ion and level records
- The validated, read-only ``AtomicData`` tables
- An SQLite loader for those tables
"""

from plasmapop.atomic.structures import Element, Ion, Level
from plasmapop.atomic.database import AtomicData, AtomicDatabase

__all__ = [
    "Element",
    "Ion",
    "Level",
    "AtomicData",
    "AtomicDatabase",
]
