"""
Approximation modes for partition functions and level populations.

Each mode selects the temperature and the radiative weight applied to the
excited-state Boltzmann factors:

=============  ======  ======
mode           T       weight
=============  ======  ======
``lte_tr``     t_r     1
``lte_te``     t_e     1
``ml93``       t_r     w
``nlte_sim``   t_e     1
``lte_ground`` t_e     0
=============  ======  ======
"""

from enum import Enum
from typing import Tuple, Union

from plasmapop.core.logging_config import get_logger

logger = get_logger("core.modes")


class NebularMode(Enum):
    """Approximation used to populate levels within an ion."""

    LTE_TR = "lte_tr"  # LTE at the radiation temperature
    LTE_TE = "lte_te"  # LTE at the electron temperature
    ML93 = "ml93"  # dilute blackbody at t_r, weighted by w
    NLTE_SIM = "nlte_sim"  # legacy non-LTE scheme, evaluated at t_e
    LTE_GROUND = "lte_ground"  # everything in the ground state


def resolve_mode(mode: Union[NebularMode, str]) -> NebularMode:
    """
    Convert a mode or its string value to a ``NebularMode``.

    Raises
    ------
    ValueError
        If the mode is not recognised
    """
    if isinstance(mode, NebularMode):
        return mode
    try:
        return NebularMode(mode)
    except ValueError:
        logger.error(f"Unknown nebular mode {mode!r}")
        raise ValueError(
            f"Unknown nebular mode: {mode!r}. "
            f"Must be one of: {[m.value for m in NebularMode]}"
        ) from None


def temperature_and_weight(cell, mode: Union[NebularMode, str]) -> Tuple[float, float]:
    """
    Select the temperature and radiative weight a mode uses for a cell.

    Parameters
    ----------
    cell : PlasmaCell
        Any object with ``t_e``, ``t_r`` and ``w`` attributes
    mode : NebularMode or str
        Approximation mode

    Returns
    -------
    Tuple[float, float]
        (temperature in K, weight)
    """
    mode = resolve_mode(mode)

    if mode is NebularMode.LTE_TR:
        return cell.t_r, 1.0
    if mode is NebularMode.LTE_TE:
        return cell.t_e, 1.0
    if mode is NebularMode.ML93:
        return cell.t_r, cell.w
    if mode is NebularMode.NLTE_SIM:
        return cell.t_e, 1.0
    # Ground state only; the temperature is irrelevant once the weight is zero
    return cell.t_e, 0.0
