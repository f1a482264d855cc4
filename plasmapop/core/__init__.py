"""
Core utilities.

This module provides:
- Physical constants
- Configuration and logging
- Abstract collaborator interfaces
"""

from plasmapop.core import constants
from plasmapop.core import config
from plasmapop.core import logging_config
from plasmapop.core.abc import AtomicDataSource, IonizationSolver

__all__ = [
    # Modules
    "constants",
    "config",
    "logging_config",
    # Abstract base classes
    "AtomicDataSource",
    "IonizationSolver",
]
