"""
Partition function evaluation for the ions of a cell.

Z = g_0 + weight * sum_{k>0} g_k exp(-(E_k - E_0) / kT)

The sum runs over the ion's partition-function ladder if it has one, its
level-density ladder otherwise, and falls back to the bare ground-state
weight for ions with no levels.
"""

from typing import Union
import numpy as np

from plasmapop.atomic.database import AtomicData
from plasmapop.core.constants import KB_EV
from plasmapop.core.logging_config import get_logger
from plasmapop.core.modes import NebularMode, resolve_mode, temperature_and_weight
from plasmapop.plasma.levels import compute_level_populations

logger = get_logger("plasma.partition")


def ion_partition_function(atomic: AtomicData, nion: int, t: float, weight: float) -> float:
    """
    Weighted Boltzmann sum for a single ion.

    Parameters
    ----------
    atomic : AtomicData
        Atomic tables
    nion : int
        Ion index
    t : float
        Temperature in K
    weight : float
        Radiative weight of the excited levels

    Returns
    -------
    float
        Partition function
    """
    ion = atomic.ions[nion]

    if ion.nlevels > 0:
        first, count = ion.first_level, ion.nlevels
    elif ion.nlte > 0:
        first, count = ion.first_nlte_level, ion.nlte
    else:
        return float(ion.g)

    g = atomic.level_g[first : first + count]
    z = float(g[0])
    if count == 1 or weight == 0.0:
        return z

    ex = atomic.level_ex[first : first + count]
    kt = KB_EV * t
    z += weight * float(np.sum(g[1:] * np.exp(-(ex[1:] - ex[0]) / kt)))
    return z


def compute_partition_functions(
    atomic: AtomicData,
    cell,
    mode: Union[NebularMode, str],
    macro_ioniz_mode: bool = True,
) -> None:
    """
    Compute every ion's partition function for a cell, then its level populations.

    Parameters
    ----------
    atomic : AtomicData
        Atomic tables
    cell : PlasmaCell
        Cell to update in place (``partition`` and ``levden``)
    mode : NebularMode or str
        Approximation mode selecting temperature and weight
    macro_ioniz_mode : bool
        Passed on to ``compute_level_populations``

    Raises
    ------
    ValueError
        If the mode is not recognised
    """
    mode = resolve_mode(mode)
    t, weight = temperature_and_weight(cell, mode)

    for nion in range(atomic.n_ions):
        cell.partition[nion] = ion_partition_function(atomic, nion, t, weight)

    compute_level_populations(atomic, cell, mode, macro_ioniz_mode)

    logger.debug(
        f"Cell {cell.nplasma}: partition functions for mode {mode.value} "
        f"(T={t:.1f} K, weight={weight:.3g})"
    )


def compute_partition_function_pair(
    atomic: AtomicData, cell, ion_index: int, t: float, weight: float
) -> None:
    """
    Recompute the partition functions of ions ``ion_index - 1`` and ``ion_index``.

    Temperature and weight come from the caller, not the cell. Only those two
    entries of ``cell.partition`` change; level populations are not touched.

    Parameters
    ----------
    atomic : AtomicData
        Atomic tables
    cell : PlasmaCell
        Cell whose partition array receives the two values
    ion_index : int
        Upper ion of the pair
    t : float
        Temperature in K
    weight : float
        Radiative weight (0 ground only, 1 LTE)

    Raises
    ------
    ValueError
        If ``ion_index`` does not have a lower neighbour in the ion table
    """
    if not 1 <= ion_index < atomic.n_ions:
        raise ValueError(f"Ion index {ion_index} has no lower ion to pair with")

    for nion in (ion_index - 1, ion_index):
        cell.partition[nion] = ion_partition_function(atomic, nion, t, weight)
