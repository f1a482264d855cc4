"""
Plasma cell state and the statistical-equilibrium population engine.

This module provides:
- Plasma and macro-atom cell state
- Partition functions and Boltzmann level populations
- LTE Saha ionization balance
- The superlevel approximation
- The per-iteration cell update driver
"""

from plasmapop.plasma.state import PlasmaCell, MacroCell, SimulationState
from plasmapop.plasma.partition import (
    compute_partition_functions,
    compute_partition_function_pair,
)
from plasmapop.plasma.levels import boltzmann_populations, compute_level_populations
from plasmapop.plasma.saha_boltzmann import SahaIonizationSolver, compute_lte_element_populations
from plasmapop.plasma.superlevel import SuperlevelAggregator
from plasmapop.plasma.update import parallel_cell_range, update_plasma_cells

__all__ = [
    "PlasmaCell",
    "MacroCell",
    "SimulationState",
    "compute_partition_functions",
    "compute_partition_function_pair",
    "boltzmann_populations",
    "compute_level_populations",
    "SahaIonizationSolver",
    "compute_lte_element_populations",
    "SuperlevelAggregator",
    "parallel_cell_range",
    "update_plasma_cells",
]
