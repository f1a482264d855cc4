"""
Superlevel approximation for macro-atom deactivation.

High-lying levels of an ion that stay close to LTE with each other are
folded into one pseudo-level. Per cell and ion we keep:

- the LTE population of every level relative to the ground state, at t_e
- the threshold: the lowest level inside the superlevel
- the normalisation sum of ``lte_pop / g`` over the superlevel

A deactivation from the superlevel is then resolved to a physical level by
walking the cumulative ``lte_pop / g`` ladder upwards from the threshold.
"""

from typing import Optional
import numpy as np

from plasmapop.atomic.database import AtomicData
from plasmapop.core.config import EngineSettings
from plasmapop.core.constants import KB_EV, LOWEST_SUPERLEVEL_THRESHOLD, LTE_DEP_FRAC
from plasmapop.core.logging_config import get_logger
from plasmapop.plasma.state import MacroCell, PlasmaCell, SimulationState

logger = get_logger("plasma.superlevel")


class SuperlevelAggregator:
    """
    Builds and samples the superlevel tables of every cell.

    Parameters
    ----------
    atomic : AtomicData
        Atomic tables
    lowest_threshold : int
        Number of levels above ground never folded into a superlevel
    departure_factor : float
        A level joins the superlevel while its departure coefficient lies
        strictly between 1/departure_factor and departure_factor
    seed : int, optional
        Seed for the default random generator used by the sampler
    """

    def __init__(
        self,
        atomic: AtomicData,
        lowest_threshold: int = LOWEST_SUPERLEVEL_THRESHOLD,
        departure_factor: float = LTE_DEP_FRAC,
        seed: Optional[int] = None,
    ):
        if lowest_threshold < 0:
            raise ValueError("lowest_threshold must be non-negative")
        if departure_factor <= 1.0:
            raise ValueError("departure_factor must be greater than 1")

        self.atomic = atomic
        self.lowest_threshold = lowest_threshold
        self.departure_factor = departure_factor
        self._rng = np.random.default_rng(seed)

    @classmethod
    def from_settings(
        cls, atomic: AtomicData, settings: EngineSettings, seed: Optional[int] = None
    ) -> "SuperlevelAggregator":
        return cls(
            atomic,
            lowest_threshold=settings.lowest_superlevel_threshold,
            departure_factor=settings.lte_departure_factor,
            seed=seed,
        )

    def rebuild(self, state: SimulationState) -> None:
        """
        Rebuild the superlevel tables of every cell for every flagged ion.

        Uses each cell's electron temperature and the level densities left
        by the previous population update. Call it at the start of a cycle,
        before ``update_plasma_cells``: a cell that has not been updated yet
        (``iteration == 0``) has no population history and keeps its top
        level as the threshold. Any update run before the first rebuild
        counts as history.
        """
        superlevel_ions = [
            nion for nion, ion in enumerate(self.atomic.ions) if ion.has_superlevel and ion.nlte > 0
        ]
        if not superlevel_ions:
            return

        for nion in superlevel_ions:
            for cell, macro in zip(state.plasma, state.macro):
                self.setup_cell(cell, macro, nion)

        logger.info(
            f"Rebuilt superlevels for {len(superlevel_ions)} ions in {state.n_cells} cells"
        )

    def setup_cell(self, cell: PlasmaCell, macro: MacroCell, nion: int) -> None:
        """Compute LTE ladder, threshold and normalisation for one cell and ion."""
        ion = self.atomic.ions[nion]
        ground = ion.first_nlte_level
        end = ground + ion.nlte

        g = self.atomic.level_g[ground:end]
        ex = self.atomic.level_ex[ground:end]
        kt = KB_EV * cell.t_e

        lte_pops = macro.superlevel_lte_pops[ground:end]
        lte_pops[0] = 1.0
        lte_pops[1:] = (g[1:] / g[0]) * np.exp(-(ex[1:] - ex[0]) / kt)

        threshold = self.find_threshold(cell, macro, nion)
        macro.superlevel_threshold[nion] = threshold

        # Accumulated in sampling order so a draw of 1 lands exactly on the top level
        norm = 0.0
        for n in range(threshold, end):
            norm += macro.superlevel_lte_pops[n] / self.atomic.level_g[n]
        macro.superlevel_norm[nion] = norm

    def find_threshold(self, cell: PlasmaCell, macro: MacroCell, nion: int) -> int:
        """
        Lowest global level index to fold into the superlevel.

        On a cell's first iteration there is no population history and only
        the top level is used. Otherwise walk down from the top level while
        the departure coefficient (simulated over LTE, both relative to the
        ground state) stays inside the band and the floor is not reached,
        then step back up one level.

        Requires ``macro.superlevel_lte_pops`` for this ion at the current t_e.
        """
        ion = self.atomic.ions[nion]
        ground = ion.first_nlte_level
        top = ion.top_nlte_level

        if cell.iteration == 0:
            return top

        levden = cell.levden[ion.first_levden : ion.first_levden + ion.nlte]
        lte_pops = macro.superlevel_lte_pops[ground : top + 1]
        with np.errstate(divide="ignore", invalid="ignore"):
            departure = (levden / levden[0]) / lte_pops

        lower = 1.0 / self.departure_factor
        threshold = top
        while (
            lower < departure[threshold - ground] < self.departure_factor
            and threshold - ground > self.lowest_threshold
        ):
            threshold -= 1

        threshold = min(threshold + 1, top)
        logger.debug(
            f"Cell {cell.nplasma} ion {nion}: superlevel threshold {threshold} "
            f"(ground {ground}, top {top})"
        )
        return threshold

    def choose_deactivation_level(
        self,
        macro: MacroCell,
        upper_level: int,
        rng: Optional[np.random.Generator] = None,
    ) -> int:
        """
        Pick the physical level a superlevel deactivation comes from.

        A uniform draw u in (0, 1] sets the target ``u * norm``; levels from
        the threshold upwards are accumulated by ``lte_pop / g`` until the
        running total reaches the target.

        Parameters
        ----------
        macro : MacroCell
            Cell's superlevel tables (read only)
        upper_level : int
            Any global level index of the ion being deactivated
        rng : np.random.Generator, optional
            Uniform source; defaults to the aggregator's generator

        Returns
        -------
        int
            Global level index. Inconsistent tables are logged and the best
            candidate is still returned.
        """
        if rng is None:
            rng = self._rng

        atomic = self.atomic
        nion = atomic.ion_of_level(upper_level)
        ion = atomic.ions[nion]
        threshold = int(macro.superlevel_threshold[nion])
        end = ion.first_nlte_level + ion.nlte

        if threshold < 0:
            logger.warning(f"Ion {nion} has no superlevel in this cell; keeping level {upper_level}")
            return upper_level

        target = (1.0 - rng.random()) * macro.superlevel_norm[nion]
        lte_pops = macro.superlevel_lte_pops
        g = atomic.level_g

        run_tot = 0.0
        n = threshold
        while run_tot < target and n < end:
            run_tot += lte_pops[n] / g[n]
            n += 1

        # The loop stepped one past the level that reached the target
        if n > threshold:
            n -= 1

        if run_tot < target:
            logger.warning(
                f"Superlevel walk for ion {nion} ran out of levels: "
                f"total {run_tot:.4e} < target {target:.4e} (threshold {threshold})"
            )
        if n < threshold:
            logger.warning(f"Level {n} chosen for ion {nion} is not in the superlevel")

        return n
