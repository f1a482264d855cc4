"""
plasmapop: statistical-equilibrium level populations for plasma cells

Computes partition functions and Boltzmann-ladder level populations per
spatial cell under several LTE / dilute-radiation approximations, and builds
and samples the superlevel approximation used for macro-atom deactivation.
"""

__version__ = "0.1.0"
__author__ = "plasmapop contributors"

from plasmapop.core import constants

__all__ = [
    "constants",
]
