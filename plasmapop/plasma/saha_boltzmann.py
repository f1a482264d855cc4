"""
LTE Saha ionization balance and Saha-Boltzmann level populations.
"""

from typing import Optional
import numpy as np
from scipy.special import logsumexp

from plasmapop.atomic.database import AtomicData
from plasmapop.core.abc import IonizationSolver
from plasmapop.core.constants import KB_EV, SAHA_CONST_CM3
from plasmapop.core.logging_config import get_logger
from plasmapop.core.modes import NebularMode
from plasmapop.plasma.levels import boltzmann_populations
from plasmapop.plasma.partition import compute_partition_functions

logger = get_logger("plasma.saha_boltzmann")


class SahaIonizationSolver(IonizationSolver):
    """
    Solves the Saha equation along an element's ionization chain.

    For consecutive stages i, i+1:

        n_{i+1} n_e / n_i = SAHA_CONST * T_eV^1.5 * (Z_{i+1} / Z_i) * exp(-chi_i / kT)

    using the partition functions currently stored in the cell.
    """

    def ion_fractions(
        self, atomic: AtomicData, cell, element_index: int, t: float
    ) -> np.ndarray:
        """
        Solve ionization balance for one element.

        Parameters
        ----------
        atomic : AtomicData
            Atomic tables
        cell : PlasmaCell
            Cell providing ``ne`` and ``partition``
        element_index : int
            Element index
        t : float
            Temperature in K

        Returns
        -------
        np.ndarray
            Fraction of the element in each of its ions (sums to 1)
        """
        ions = atomic.element_ions(element_index)
        if len(ions) == 0:
            return np.zeros(0)
        if cell.ne <= 0:
            raise ValueError("Electron density must be positive")
        if t <= 0:
            raise ValueError("Temperature must be positive")

        T_eV = KB_EV * t
        log_prefactor = np.log(SAHA_CONST_CM3 / cell.ne) + 1.5 * np.log(T_eV)

        # log n_i / n_0, built up stage by stage
        log_n = np.zeros(len(ions))
        for k in range(1, len(ions)):
            lower, upper = ions[k - 1], ions[k]
            chi = atomic.ions[lower].ionization_potential_ev
            log_n[k] = (
                log_n[k - 1]
                + log_prefactor
                + np.log(cell.partition[upper] / cell.partition[lower])
                - chi / T_eV
            )

        fractions = np.exp(log_n - logsumexp(log_n))
        logger.debug(
            f"Saha balance for {atomic.elements[element_index].symbol} at T={t:.1f} K: "
            f"{np.array2string(fractions, precision=3)}"
        )
        return fractions


def compute_lte_element_populations(
    atomic: AtomicData,
    element_index: int,
    cell,
    solver: Optional[IonizationSolver] = None,
) -> np.ndarray:
    """
    LTE level populations of an element as fractions of the element.

    Works on a scratch snapshot of the cell: partition functions at t_r with
    weight 1, ionization fractions from ``solver`` at t_r, then each ion's
    Boltzmann ladder scaled by its ion fraction. The live cell is not
    modified.

    Parameters
    ----------
    atomic : AtomicData
        Atomic tables
    element_index : int
        Element index
    cell : PlasmaCell
        Source cell
    solver : IonizationSolver, optional
        Ionization-balance solver (defaults to ``SahaIonizationSolver``)

    Returns
    -------
    np.ndarray
        Array shaped like ``cell.levden``, non-zero only for the element's
        levels. Ions without a level-density ladder (nlte == 0, such as the
        fully ionized stage) have no slot, so their ion fraction is left
        out: the element's entries sum to the combined fraction of its
        laddered ions, and to 1 only when every ion has a ladder.
    """
    if solver is None:
        solver = SahaIonizationSolver()

    lte = cell.lte_snapshot()
    compute_partition_functions(atomic, lte, NebularMode.LTE_TR)
    fractions = solver.solve(atomic, lte, element_index, lte.t_r)

    populations = np.zeros_like(cell.levden)
    for fraction, nion in zip(fractions, atomic.element_ions(element_index)):
        ion = atomic.ions[nion]
        pops = boltzmann_populations(
            atomic, nion, 1.0, lte.t_r, lte.partition[nion], populations, ion.first_levden
        )
        pops *= fraction

    return populations
