"""
Tests for the approximation-mode table.
"""

import pytest

from plasmapop.core.modes import NebularMode, resolve_mode, temperature_and_weight
from plasmapop.plasma.state import PlasmaCell


@pytest.fixture
def cell(simple_atomic):
    return PlasmaCell.empty(simple_atomic, t_e=9000.0, t_r=15000.0, w=0.2)


@pytest.mark.parametrize(
    "mode, expected",
    [
        (NebularMode.LTE_TR, (15000.0, 1.0)),
        (NebularMode.LTE_TE, (9000.0, 1.0)),
        (NebularMode.ML93, (15000.0, 0.2)),
        (NebularMode.NLTE_SIM, (9000.0, 1.0)),
        (NebularMode.LTE_GROUND, (9000.0, 0.0)),
    ],
)
def test_temperature_and_weight(cell, mode, expected):
    assert temperature_and_weight(cell, mode) == expected
    assert temperature_and_weight(cell, mode.value) == expected


def test_resolve_mode_passthrough():
    assert resolve_mode(NebularMode.ML93) is NebularMode.ML93
    assert resolve_mode("lte_ground") is NebularMode.LTE_GROUND


@pytest.mark.parametrize("bad", ["", "LTE", 3, None])
def test_unknown_mode(cell, bad, caplog):
    with pytest.raises(ValueError, match="Unknown nebular mode"):
        temperature_and_weight(cell, bad)
    assert "Unknown nebular mode" in caplog.text
