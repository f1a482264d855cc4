"""
Data structures for atomic physics data.

All records are immutable: the tables are loaded once and shared read-only
by every cell computation.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Element:
    """
    A chemical element and the block of ions it owns.

    Attributes
    ----------
    symbol : str
        Element symbol (e.g., 'H', 'Fe')
    z : int
        Atomic number
    abundance : float
        Number abundance relative to hydrogen
    first_ion : int
        Index of the element's neutral ion in the ion table
    n_ions : int
        Number of consecutive ions belonging to the element
    """

    symbol: str
    z: int
    abundance: float
    first_ion: int
    n_ions: int


@dataclass(frozen=True)
class Ion:
    """
    An ionization state and its level ladders.

    Attributes
    ----------
    z : int
        Atomic number
    istate : int
        Ionization state (1=neutral, 2=singly ionized, etc.)
    g : float
        Ground-state statistical weight, used when no levels are known
    ionization_potential_ev : float
        Ionization potential to the next stage in eV
    element : int
        Index of the owning element
    first_level : int
        Global level index of the ground state of the partition-function ladder
    nlevels : int
        Number of levels in the partition-function ladder
    first_nlte_level : int
        Global level index of the ground state of the level-density ladder
    nlte : int
        Number of levels tracked in the cell level-density array
    first_levden : int
        Offset of the ion's ground state in the cell level-density array
    is_macro_atom : bool
        Populations are produced by the macro-atom scheme
    has_superlevel : bool
        Upper levels may be folded into a superlevel
    """

    z: int
    istate: int
    g: float
    ionization_potential_ev: float
    element: int
    first_level: int
    nlevels: int
    first_nlte_level: int
    nlte: int
    first_levden: int
    is_macro_atom: bool = False
    has_superlevel: bool = False

    @property
    def top_nlte_level(self) -> int:
        """Global level index of the highest tracked level."""
        return self.first_nlte_level + self.nlte - 1


@dataclass(frozen=True)
class Level:
    """
    An atomic energy level (configuration).

    Attributes
    ----------
    ion : int
        Index of the owning ion
    g : float
        Statistical weight
    ex : float
        Excitation energy in eV relative to the element's zero point
    ilv : int
        Position within the ion's ladder (0 is the ground state)
    """

    ion: int
    g: float
    ex: float
    ilv: int
