"""
Per-iteration population update across all cells.

Cells are split into contiguous, disjoint ranges, one per worker. Each
worker computes partition functions and level populations for its own range
and hands the arrays back. Once every worker has finished the arrays are
copied into the shared cells and their iteration counters advance. Thread
and serial workers write into the shared cells as they go.
"""

import os
from concurrent.futures import ThreadPoolExecutor, ProcessPoolExecutor, as_completed
from typing import Dict, List, Optional, Tuple, Union
import numpy as np

from plasmapop.atomic.database import AtomicData
from plasmapop.core.logging_config import get_logger
from plasmapop.core.modes import NebularMode, resolve_mode
from plasmapop.plasma.partition import compute_partition_functions
from plasmapop.plasma.state import PlasmaCell, SimulationState

logger = get_logger("plasma.update")

CellArrays = Tuple[np.ndarray, np.ndarray]


def parallel_cell_range(rank: int, n_cells: int, n_workers: int) -> Tuple[int, int]:
    """
    Cell range ``[nmin, nmax)`` owned by a worker.

    The first ``n_cells % n_workers`` workers take one extra cell, so the
    ranges are contiguous, disjoint and cover every cell.

    Parameters
    ----------
    rank : int
        Worker index, 0 <= rank < n_workers
    n_cells : int
        Total number of cells
    n_workers : int
        Number of workers

    Returns
    -------
    Tuple[int, int]
        (nmin, nmax)
    """
    if n_workers <= 0:
        raise ValueError("Number of workers must be positive")
    if not 0 <= rank < n_workers:
        raise ValueError(f"Worker rank {rank} out of range for {n_workers} workers")

    base, extra = divmod(n_cells, n_workers)
    nmin = rank * base + min(rank, extra)
    nmax = nmin + base + (1 if rank < extra else 0)
    return nmin, nmax


def _update_cell_range(
    atomic: AtomicData,
    cells: List[PlasmaCell],
    mode: NebularMode,
    macro_ioniz_mode: bool,
) -> List[CellArrays]:
    results = []
    for cell in cells:
        compute_partition_functions(atomic, cell, mode, macro_ioniz_mode)
        results.append((cell.partition.copy(), cell.levden.copy()))
    return results


def update_plasma_cells(
    state: SimulationState,
    mode: Optional[Union[NebularMode, str]] = None,
    n_workers: Optional[int] = 1,
    use_processes: bool = False,
) -> None:
    """
    Recompute partition functions and level populations of every cell.

    Parameters
    ----------
    state : SimulationState
        Simulation state updated in place
    mode : NebularMode or str, optional
        Approximation mode (defaults to ``state.settings.nebular_mode``)
    n_workers : int, optional
        Number of workers. If None, uses CPU count.
    use_processes : bool
        If True, use processes instead of threads

    Raises
    ------
    ValueError
        If the mode is not recognised; no cell is touched in that case.
        Any exception raised for a cell is re-raised after logging. With
        serial or thread workers, cells computed before the failure keep
        their new partition functions and level populations, but no
        iteration counter is advanced.
    """
    mode = resolve_mode(state.settings.nebular_mode if mode is None else mode)
    macro_ioniz_mode = state.settings.macro_ioniz_mode

    if n_workers is None:
        n_workers = os.cpu_count() or 1
    n_workers = max(1, min(n_workers, state.n_cells))

    ranges = [parallel_cell_range(rank, state.n_cells, n_workers) for rank in range(n_workers)]
    logger.info(
        f"Updating {state.n_cells} cells in mode {mode.value} with {n_workers} workers"
    )

    results: Dict[int, List[CellArrays]] = {}
    if n_workers == 1:
        results[0] = _update_cell_range(state.atomic, state.plasma, mode, macro_ioniz_mode)
    else:
        executor_class = ProcessPoolExecutor if use_processes else ThreadPoolExecutor
        with executor_class(max_workers=n_workers) as executor:
            futures = {
                executor.submit(
                    _update_cell_range,
                    state.atomic,
                    state.plasma[nmin:nmax],
                    mode,
                    macro_ioniz_mode,
                ): rank
                for rank, (nmin, nmax) in enumerate(ranges)
            }
            for future in as_completed(futures):
                rank = futures[future]
                try:
                    results[rank] = future.result()
                except Exception as e:
                    nmin, nmax = ranges[rank]
                    logger.error(f"Population update failed for cells {nmin}-{nmax - 1}: {e}")
                    raise

    # Exchange: every worker has finished, commit all ranges
    for rank, (nmin, nmax) in enumerate(ranges):
        for cell, (partition, levden) in zip(state.plasma[nmin:nmax], results[rank]):
            cell.partition[:] = partition
            cell.levden[:] = levden
            cell.iteration += 1

    logger.info(f"Completed population update of {state.n_cells} cells")
