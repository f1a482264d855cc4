"""
Level populations within an ion: the Boltzmann ladder.

Populations are fractional occupation numbers of the ion, normalised by the
ion's partition function. The ladder is always evaluated at the same
temperature and weight that produced that partition function.
"""

from typing import Optional, Union
import numpy as np

from plasmapop.atomic.database import AtomicData
from plasmapop.core.constants import KB_EV
from plasmapop.core.modes import NebularMode, temperature_and_weight


def boltzmann_populations(
    atomic: AtomicData,
    nion: int,
    weight: float,
    t: float,
    z: float,
    out: Optional[np.ndarray] = None,
    offset: int = 0,
) -> np.ndarray:
    """
    Fractional populations of an ion's level-density ladder.

    n_0 = g_0 / Z
    n_k = n_0 * weight * (g_k / g_0) * exp(-(E_k - E_0) / kT)

    Parameters
    ----------
    atomic : AtomicData
        Atomic tables
    nion : int
        Ion index
    weight : float
        Radiative weight of the excited levels (1 is LTE, 0 ground only)
    t : float
        Temperature in K
    z : float
        Partition function the ladder is normalised by
    out : np.ndarray, optional
        Array to write into; a new array of length ``nlte`` if None
    offset : int
        Position of the ground state in ``out``

    Returns
    -------
    np.ndarray
        The ion's slice of ``out`` (or the new array)
    """
    ion = atomic.ions[nion]
    if out is None:
        out = np.zeros(ion.nlte)
        offset = 0

    pops = out[offset : offset + ion.nlte]
    if ion.nlte == 0:
        return pops

    first = ion.first_nlte_level
    g = atomic.level_g[first : first + ion.nlte]
    ex = atomic.level_ex[first : first + ion.nlte]

    ground = g[0] / z
    pops[0] = ground
    if weight == 0.0:
        pops[1:] = 0.0
    else:
        kt = KB_EV * t
        pops[1:] = ground * weight * (g[1:] / g[0]) * np.exp(-(ex[1:] - ex[0]) / kt)

    return pops


def compute_level_populations(
    atomic: AtomicData,
    cell,
    mode: Union[NebularMode, str],
    macro_ioniz_mode: bool = True,
) -> None:
    """
    Fill ``cell.levden`` from the cell's partition functions.

    Ions without a level-density ladder are skipped, as are macro-atom ions
    while the macro-atom scheme owns their populations.

    Parameters
    ----------
    atomic : AtomicData
        Atomic tables
    cell : PlasmaCell
        Cell whose ``partition`` array is already filled for ``mode``
    mode : NebularMode or str
        Approximation mode
    macro_ioniz_mode : bool
        If True, leave macro-atom ion populations untouched

    Raises
    ------
    ValueError
        If the mode is not recognised
    """
    t, weight = temperature_and_weight(cell, mode)

    for nion, ion in enumerate(atomic.ions):
        if ion.nlte == 0:
            continue
        if ion.is_macro_atom and macro_ioniz_mode:
            continue
        boltzmann_populations(
            atomic, nion, weight, t, cell.partition[nion], cell.levden, ion.first_levden
        )
