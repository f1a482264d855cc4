"""
Example usage of the population engine.

Builds a small hydrogen/helium atomic data set, runs two population
updates over a handful of cells and samples superlevel deactivations.
"""

import numpy as np

from plasmapop.atomic import AtomicData
from plasmapop.core.config import EngineSettings
from plasmapop.core.logging_config import setup_logging
from plasmapop.core.modes import NebularMode
from plasmapop.plasma import (
    SimulationState,
    SuperlevelAggregator,
    compute_lte_element_populations,
    update_plasma_cells,
)

# Setup logging; keep the per-cycle update messages out of the output
setup_logging(module_levels={"plasma.update": "WARNING"})


def build_atomic_data() -> AtomicData:
    """Hydrogen I as a 20-level macro-atom, plus a two-level He I."""
    elements = [
        {"symbol": "H", "z": 1, "abundance": 1.0},
        {"symbol": "He", "z": 2, "abundance": 0.1},
    ]
    ions = [
        {"z": 1, "istate": 1, "g": 2, "ip_ev": 13.6, "macro_atom": True, "superlevel": True},
        {"z": 1, "istate": 2, "g": 1, "ip_ev": 0.0},
        {"z": 2, "istate": 1, "g": 1, "ip_ev": 24.59},
        {"z": 2, "istate": 2, "g": 2, "ip_ev": 54.42},
    ]
    levels = [
        {"z": 1, "istate": 1, "ilv": n - 1, "g": 2 * n * n, "ex_ev": 13.6 * (1 - 1 / n**2)}
        for n in range(1, 21)
    ]
    levels += [
        {"z": 2, "istate": 1, "ilv": 0, "g": 1, "ex_ev": 0.0},
        {"z": 2, "istate": 1, "ilv": 1, "g": 3, "ex_ev": 19.8},
    ]
    return AtomicData.from_tables(elements, ions, levels)


def main():
    atomic = build_atomic_data()
    settings = EngineSettings(nebular_mode=NebularMode.LTE_TE, macro_ioniz_mode=False)
    state = SimulationState.create(atomic, 8, settings, t_e=12000.0, t_r=15000.0, w=0.4, ne=1e12)
    aggregator = SuperlevelAggregator.from_settings(atomic, settings, seed=42)

    for cycle in range(2):
        aggregator.rebuild(state)
        update_plasma_cells(state, n_workers=2)
        thresholds = [int(macro.superlevel_threshold[0]) for macro in state.macro]
        print(f"Cycle {cycle}: H I superlevel thresholds {thresholds}")

    rng = np.random.default_rng(0)
    macro = state.macro[0]
    draws = [aggregator.choose_deactivation_level(macro, 19, rng) for _ in range(1000)]
    levels, counts = np.unique(draws, return_counts=True)
    print("Deactivation levels:", dict(zip(levels.tolist(), counts.tolist())))

    lte = compute_lte_element_populations(atomic, 0, state.plasma[0])
    print(f"LTE hydrogen ground-state fraction: {lte[0]:.4f}")


if __name__ == "__main__":
    main()
