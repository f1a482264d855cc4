"""
Per-cell plasma state and the simulation-wide container that owns it.
"""

from dataclasses import dataclass, field, replace
from typing import List, Optional
import numpy as np

from plasmapop.atomic.database import AtomicData
from plasmapop.core.config import EngineSettings
from plasmapop.core.constants import RHO2NH
from plasmapop.core.logging_config import get_logger

logger = get_logger("plasma.state")


@dataclass
class PlasmaCell:
    """
    Thermodynamic state and populations of one spatial cell.

    Attributes
    ----------
    nplasma : int
        Cell index
    t_e : float
        Electron temperature in K
    t_r : float
        Radiation temperature in K
    w : float
        Dilution factor of the radiation field (1 is LTE)
    ne : float
        Electron density in cm^-3
    rho : float
        Mass density in g cm^-3
    partition : np.ndarray
        Partition function of every ion
    levden : np.ndarray
        Fractional level populations, ion-contiguous
    density : np.ndarray
        Ion number densities in cm^-3
    iteration : int
        Number of completed population updates; 0 means no history
    """

    nplasma: int
    t_e: float
    t_r: float
    w: float
    ne: float
    rho: float
    partition: np.ndarray
    levden: np.ndarray
    density: np.ndarray
    iteration: int = 0

    @classmethod
    def empty(
        cls,
        atomic: AtomicData,
        nplasma: int = 0,
        t_e: float = 10000.0,
        t_r: float = 10000.0,
        w: float = 1.0,
        ne: float = 1e10,
        rho: float = 1e-14,
    ) -> "PlasmaCell":
        """Allocate a cell sized for the atomic tables, with zeroed arrays."""
        return cls(
            nplasma=nplasma,
            t_e=t_e,
            t_r=t_r,
            w=w,
            ne=ne,
            rho=rho,
            partition=np.zeros(atomic.n_ions),
            levden=np.zeros(atomic.n_levden),
            density=np.zeros(atomic.n_ions),
        )

    @property
    def nh(self) -> float:
        """Hydrogen number density in cm^-3."""
        return self.rho * RHO2NH

    def lte_snapshot(self) -> "PlasmaCell":
        """
        Scratch copy for LTE diagnostics.

        Scalars are copied. ``partition`` and ``density`` are rewritten by the
        scratch computation and are deep-copied; ``levden`` starts zeroed.
        """
        return replace(
            self,
            partition=self.partition.copy(),
            density=self.density.copy(),
            levden=np.zeros_like(self.levden),
        )


@dataclass
class MacroCell:
    """
    Superlevel tables of one cell, rebuilt every iteration.

    Attributes
    ----------
    superlevel_threshold : np.ndarray
        Per ion, lowest global level index folded into the superlevel
        (-1 for ions without one)
    superlevel_norm : np.ndarray
        Per ion, sum of ``superlevel_lte_pops / g`` over the superlevel
    superlevel_lte_pops : np.ndarray
        Per global level, LTE population relative to the ion's ground state
    """

    superlevel_threshold: np.ndarray
    superlevel_norm: np.ndarray
    superlevel_lte_pops: np.ndarray

    @classmethod
    def empty(cls, atomic: AtomicData) -> "MacroCell":
        return cls(
            superlevel_threshold=np.full(atomic.n_ions, -1, dtype=int),
            superlevel_norm=np.zeros(atomic.n_ions),
            superlevel_lte_pops=np.zeros(atomic.n_levels),
        )


@dataclass
class SimulationState:
    """
    Owner of the per-cell arrays, indexed by cell id.

    Attributes
    ----------
    atomic : AtomicData
        Shared atomic tables
    plasma : List[PlasmaCell]
    macro : List[MacroCell]
    settings : EngineSettings
    """

    atomic: AtomicData
    plasma: List[PlasmaCell]
    macro: List[MacroCell]
    settings: EngineSettings = field(default_factory=EngineSettings)

    @classmethod
    def create(
        cls,
        atomic: AtomicData,
        n_cells: int,
        settings: Optional[EngineSettings] = None,
        **cell_values,
    ) -> "SimulationState":
        """
        Allocate ``n_cells`` plasma and macro cells.

        Extra keyword arguments (t_e, t_r, w, ne, rho) set the initial
        state of every cell.
        """
        if n_cells <= 0:
            raise ValueError("Number of cells must be positive")

        plasma = [PlasmaCell.empty(atomic, nplasma=n, **cell_values) for n in range(n_cells)]
        macro = [MacroCell.empty(atomic) for _ in range(n_cells)]
        logger.info(f"Created simulation state with {n_cells} cells")
        return cls(atomic, plasma, macro, settings or EngineSettings())

    @property
    def n_cells(self) -> int:
        return len(self.plasma)
