"""
Abstract base classes for the engine's external collaborators.

The population engine only consumes atomic data and ionization fractions;
where they come from is pluggable.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING
import numpy as np

if TYPE_CHECKING:
    from plasmapop.atomic.database import AtomicData
    from plasmapop.plasma.state import PlasmaCell


class AtomicDataSource(ABC):
    """
    Abstract interface for atomic data sources.

    This allows plugging in different data sources (SQLite, in-memory tables,
    HDF5, etc.) without changing the rest of the codebase.
    """

    @abstractmethod
    def load(self) -> "AtomicData":
        """Load the immutable ion and level tables."""
        pass


class IonizationSolver(ABC):
    """
    Abstract interface for ionization-balance solvers.

    Implementations return the fraction of an element in each of its
    ionization stages, ordered as the element's ions in the atomic tables.
    """

    @abstractmethod
    def ion_fractions(
        self, atomic: "AtomicData", cell: "PlasmaCell", element_index: int, t: float
    ) -> np.ndarray:
        """Ion fractions of one element at temperature ``t`` (sum to 1)."""
        pass

    def solve(
        self, atomic: "AtomicData", cell: "PlasmaCell", element_index: int, t: float
    ) -> np.ndarray:
        """
        Solve the ionization balance and store ion densities in the cell.

        Returns
        -------
        np.ndarray
            Ion fractions for the element
        """
        element = atomic.elements[element_index]
        fractions = self.ion_fractions(atomic, cell, element_index, t)
        stop = element.first_ion + element.n_ions
        cell.density[element.first_ion : stop] = fractions * cell.nh * element.abundance
        return fractions
