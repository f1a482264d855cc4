"""
Tests for atomic data tables and the SQLite loader.
"""

import numpy as np
import pandas as pd
import pytest

from plasmapop.atomic.database import AtomicData, AtomicDatabase
from plasmapop.atomic.structures import Ion


def test_from_tables_layout(simple_atomic):
    assert simple_atomic.n_elements == 1
    assert simple_atomic.n_ions == 3
    assert simple_atomic.n_levels == 5
    assert simple_atomic.n_levden == 5

    he1, he2, he3 = simple_atomic.ions
    assert (he1.first_level, he1.nlevels, he1.nlte, he1.first_levden) == (0, 3, 3, 0)
    assert (he2.first_level, he2.nlevels, he2.nlte, he2.first_levden) == (3, 2, 2, 3)
    assert (he3.nlevels, he3.nlte) == (0, 0)
    assert he2.top_nlte_level == 4

    element = simple_atomic.elements[0]
    assert (element.first_ion, element.n_ions) == (0, 3)
    assert list(simple_atomic.element_ions(0)) == [0, 1, 2]


def test_from_dataframes_sorts_input(simple_tables):
    elements, ions, levels = simple_tables
    atomic = AtomicData.from_tables(
        pd.DataFrame(elements), pd.DataFrame(ions[::-1]), pd.DataFrame(levels[::-1])
    )
    assert [ion.istate for ion in atomic.ions] == [1, 2, 3]
    np.testing.assert_allclose(atomic.level_ex, [0.0, 1.0, 2.0, 0.0, 0.5])
    assert [lvl.ilv for lvl in atomic.levels] == [0, 1, 2, 0, 1]


def test_ion_of_level(simple_atomic):
    assert [simple_atomic.ion_of_level(n) for n in range(5)] == [0, 0, 0, 1, 1]


def test_level_arrays_read_only(simple_atomic):
    with pytest.raises(ValueError):
        simple_atomic.level_g[0] = 10.0
    with pytest.raises(ValueError):
        simple_atomic.level_ex[0] = 1.0


def test_records_are_immutable(simple_atomic):
    with pytest.raises(AttributeError):
        simple_atomic.ions[0].g = 3


def test_flags_default_to_false(simple_atomic):
    assert not any(ion.is_macro_atom or ion.has_superlevel for ion in simple_atomic.ions)


def test_ground_state_must_be_lowest(simple_tables):
    elements, ions, levels = simple_tables
    levels = [dict(lv) for lv in levels]
    levels[0]["ex_ev"] = 1.5  # ground above the first excited level

    with pytest.raises(ValueError, match="not the lowest level"):
        AtomicData.from_tables(elements, ions, levels)


def test_ladder_must_be_ordered(simple_tables):
    elements, ions, levels = simple_tables
    levels = [dict(lv) for lv in levels]
    levels[2]["ex_ev"] = 0.5  # above ground, below level 1

    with pytest.raises(ValueError, match="not ordered"):
        AtomicData.from_tables(elements, ions, levels)


def test_nonpositive_weight_rejected(simple_tables):
    elements, ions, levels = simple_tables
    levels = [dict(lv) for lv in levels]
    levels[1]["g"] = 0

    with pytest.raises(ValueError, match="statistical weight"):
        AtomicData.from_tables(elements, ions, levels)


def test_ladder_longer_than_known_levels(simple_tables):
    elements, ions, levels = simple_tables
    ions = [dict(ions[0], nlte=4)] + ions[1:]

    with pytest.raises(ValueError, match="more levels"):
        AtomicData.from_tables(elements, ions, levels)


def test_unknown_element(simple_tables):
    elements, ions, levels = simple_tables
    ions = ions + [{"z": 8, "istate": 1, "g": 9, "ip_ev": 13.6}]

    with pytest.raises(ValueError, match="unknown elements"):
        AtomicData.from_tables(elements, ions, levels)


def test_missing_columns(simple_tables):
    elements, ions, levels = simple_tables
    with pytest.raises(ValueError, match="missing required columns"):
        AtomicData.from_tables(elements, [{"z": 2, "istate": 1}], levels)


def test_validate_rejects_non_contiguous_ladder(simple_atomic):
    he1 = simple_atomic.ions[0]
    broken = Ion(**{**he1.__dict__, "nlevels": 4})

    with pytest.raises(ValueError, match="not contiguous"):
        AtomicData(simple_atomic.elements, (broken,) + simple_atomic.ions[1:], simple_atomic.levels)


def test_database_load(atomic_db_path, simple_atomic):
    atomic = AtomicDatabase(atomic_db_path).load()

    assert atomic.n_ions == simple_atomic.n_ions
    np.testing.assert_allclose(atomic.level_g, simple_atomic.level_g)
    np.testing.assert_allclose(atomic.level_ex, simple_atomic.level_ex)
    assert atomic.ions == simple_atomic.ions
    assert atomic.elements == simple_atomic.elements


def test_database_not_found():
    with pytest.raises(FileNotFoundError):
        AtomicDatabase("nonexistent.db")
