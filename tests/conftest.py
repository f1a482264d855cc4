"""
Pytest configuration and shared fixtures for plasmapop tests.

This module provides:
- Small atomic data sets (simple ions, a macro-atom with superlevels)
- Plasma cells and simulation states built on them
- A deterministic uniform source for the superlevel sampler
"""

import os
import sqlite3
import tempfile
from pathlib import Path

import numpy as np
import pytest

from plasmapop.atomic.database import AtomicData
from plasmapop.core.constants import KB_EV
from plasmapop.plasma.state import PlasmaCell, SimulationState

# Temperature at which kT = 1 eV
T_UNIT = 1.0 / KB_EV


class UniformDraws:
    """
    Stand-in for ``numpy.random.Generator`` yielding chosen uniform draws.

    The sampler turns ``random()`` in [0, 1) into ``1 - random()`` in (0, 1],
    so each requested draw u is returned as ``1 - u``.
    """

    def __init__(self, draws):
        self._draws = iter(draws)

    def random(self):
        return 1.0 - next(self._draws)


def hydrogenic_levels(z, istate, n_levels):
    """Levels n=1..n_levels with g = 2n^2 and E = 13.6 (1 - 1/n^2) eV."""
    return [
        {"z": z, "istate": istate, "ilv": n - 1, "g": 2 * n * n, "ex_ev": 13.6 * (1 - 1 / n**2)}
        for n in range(1, n_levels + 1)
    ]


@pytest.fixture
def simple_tables():
    """Helium with a three-level neutral, two-level He II and bare He III."""
    elements = [{"symbol": "He", "z": 2, "abundance": 0.1}]
    ions = [
        {"z": 2, "istate": 1, "g": 1, "ip_ev": 24.59},
        {"z": 2, "istate": 2, "g": 2, "ip_ev": 54.42},
        {"z": 2, "istate": 3, "g": 1, "ip_ev": 0.0},
    ]
    levels = [
        {"z": 2, "istate": 1, "ilv": 0, "g": 1, "ex_ev": 0.0},
        {"z": 2, "istate": 1, "ilv": 1, "g": 3, "ex_ev": 1.0},
        {"z": 2, "istate": 1, "ilv": 2, "g": 5, "ex_ev": 2.0},
        {"z": 2, "istate": 2, "ilv": 0, "g": 2, "ex_ev": 0.0},
        {"z": 2, "istate": 2, "ilv": 1, "g": 8, "ex_ev": 0.5},
    ]
    return elements, ions, levels


@pytest.fixture
def simple_atomic(simple_tables):
    return AtomicData.from_tables(*simple_tables)


@pytest.fixture
def macro_atomic():
    """Hydrogen I as a 12-level macro-atom with superlevels, plus helium."""
    elements = [
        {"symbol": "H", "z": 1, "abundance": 1.0},
        {"symbol": "He", "z": 2, "abundance": 0.1},
    ]
    ions = [
        {"z": 1, "istate": 1, "g": 2, "ip_ev": 13.6, "macro_atom": True, "superlevel": True},
        {"z": 1, "istate": 2, "g": 1, "ip_ev": 0.0},
        {"z": 2, "istate": 1, "g": 1, "ip_ev": 24.59},
        {"z": 2, "istate": 2, "g": 2, "ip_ev": 0.0},
    ]
    levels = hydrogenic_levels(1, 1, 12) + [
        {"z": 2, "istate": 1, "ilv": 0, "g": 1, "ex_ev": 0.0},
        {"z": 2, "istate": 1, "ilv": 1, "g": 3, "ex_ev": 19.8},
        {"z": 2, "istate": 2, "ilv": 0, "g": 2, "ex_ev": 0.0},
    ]
    return AtomicData.from_tables(elements, ions, levels)


@pytest.fixture
def unit_cell(simple_atomic):
    """Cell with kT = 1 eV for both temperatures."""
    return PlasmaCell.empty(simple_atomic, t_e=T_UNIT, t_r=T_UNIT, w=0.5, ne=1e12, rho=1e-12)


@pytest.fixture
def macro_state(macro_atomic):
    return SimulationState.create(
        macro_atomic, n_cells=4, t_e=10000.0, t_r=12000.0, w=0.3, ne=1e12, rho=1e-12
    )


@pytest.fixture
def atomic_db_path(simple_tables):
    """Temporary SQLite database holding the simple tables."""
    elements, ions, levels = simple_tables
    db_fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(db_fd)

    conn = sqlite3.connect(db_path)
    conn.execute("CREATE TABLE elements (symbol TEXT, z INTEGER, abundance REAL)")
    conn.execute(
        """
        CREATE TABLE ions (
            z INTEGER, istate INTEGER, g REAL, ip_ev REAL,
            macro_atom INTEGER, superlevel INTEGER, nlevels INTEGER, nlte INTEGER
        )
    """
    )
    conn.execute("CREATE TABLE levels (z INTEGER, istate INTEGER, ilv INTEGER, g REAL, ex_ev REAL)")

    conn.executemany(
        "INSERT INTO elements VALUES (?, ?, ?)",
        [(e["symbol"], e["z"], e["abundance"]) for e in elements],
    )
    conn.executemany(
        "INSERT INTO ions VALUES (?, ?, ?, ?, 0, 0, NULL, NULL)",
        [(i["z"], i["istate"], i["g"], i["ip_ev"]) for i in ions],
    )
    # Insert out of order; the loader sorts by ladder position
    conn.executemany(
        "INSERT INTO levels VALUES (?, ?, ?, ?, ?)",
        [(lv["z"], lv["istate"], lv["ilv"], lv["g"], lv["ex_ev"]) for lv in reversed(levels)],
    )
    conn.commit()
    conn.close()

    yield db_path

    Path(db_path).unlink()


@pytest.fixture
def lte_levden():
    """Helper writing exact LTE level densities (at t_e) for an ion into a cell."""

    def _fill(atomic, cell, nion):
        ion = atomic.ions[nion]
        first = ion.first_nlte_level
        g = atomic.level_g[first : first + ion.nlte]
        ex = atomic.level_ex[first : first + ion.nlte]
        boltz = g * np.exp(-(ex - ex[0]) / (KB_EV * cell.t_e))
        cell.levden[ion.first_levden : ion.first_levden + ion.nlte] = boltz / boltz.sum()

    return _fill


@pytest.fixture
def uniform_draws():
    """Factory for a deterministic uniform source: ``uniform_draws([0.82, ...])``."""
    return UniformDraws


@pytest.fixture
def t_unit():
    return T_UNIT
