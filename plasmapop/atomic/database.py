"""
Atomic data tables and the SQLite loader that fills them.
"""

import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Any, Iterable, Mapping, Tuple, Union
import numpy as np
import pandas as pd

from plasmapop.atomic.structures import Element, Ion, Level
from plasmapop.core.abc import AtomicDataSource
from plasmapop.core.logging_config import get_logger

logger = get_logger("atomic.database")

TableLike = Union[pd.DataFrame, Iterable[Mapping[str, Any]]]


def _as_frame(table: TableLike, required: Tuple[str, ...], name: str) -> pd.DataFrame:
    df = table if isinstance(table, pd.DataFrame) else pd.DataFrame(list(table))
    missing = [col for col in required if col not in df.columns]
    if missing and len(df):
        raise ValueError(f"{name} table missing required columns: {missing}")
    return df


def _flag(row: pd.Series, column: str) -> bool:
    return bool(row[column]) if column in row and pd.notna(row[column]) else False


class AtomicData:
    """
    Read-only element, ion and level tables.

    Levels of an ion are stored contiguously in ladder order, ground state
    first. This is checked once here and assumed everywhere else.

    Attributes
    ----------
    elements : Tuple[Element, ...]
    ions : Tuple[Ion, ...]
    levels : Tuple[Level, ...]
    level_g : np.ndarray
        Statistical weight of every level (read-only)
    level_ex : np.ndarray
        Excitation energy of every level in eV (read-only)
    """

    def __init__(self, elements: Tuple[Element, ...], ions: Tuple[Ion, ...], levels: Tuple[Level, ...]):
        self.elements = tuple(elements)
        self.ions = tuple(ions)
        self.levels = tuple(levels)

        self.level_g = np.array([lvl.g for lvl in self.levels], dtype=float)
        self.level_ex = np.array([lvl.ex for lvl in self.levels], dtype=float)
        self.level_g.flags.writeable = False
        self.level_ex.flags.writeable = False

        self.validate()

    @property
    def n_elements(self) -> int:
        return len(self.elements)

    @property
    def n_ions(self) -> int:
        return len(self.ions)

    @property
    def n_levels(self) -> int:
        return len(self.levels)

    @property
    def n_levden(self) -> int:
        """Length of a cell's level-density array."""
        return sum(ion.nlte for ion in self.ions)

    def ion_of_level(self, level_index: int) -> int:
        """Index of the ion owning a global level index."""
        return self.levels[level_index].ion

    def element_ions(self, element_index: int) -> range:
        """Ion indices belonging to an element."""
        element = self.elements[element_index]
        return range(element.first_ion, element.first_ion + element.n_ions)

    def validate(self) -> None:
        """
        Check the ladder invariants.

        Raises
        ------
        ValueError
            If a ladder is not contiguous, does not start at its ground state,
            or is not ordered by excitation energy
        """
        for nion, ion in enumerate(self.ions):
            for first, count, label in (
                (ion.first_level, ion.nlevels, "partition"),
                (ion.first_nlte_level, ion.nlte, "nlte"),
            ):
                if count == 0:
                    continue
                if first < 0 or first + count > self.n_levels:
                    raise ValueError(f"Ion {nion} {label} ladder runs outside the level table")

                ladder = self.levels[first : first + count]
                if any(lvl.ion != nion for lvl in ladder):
                    raise ValueError(f"Ion {nion} {label} ladder is not contiguous")
                if ladder[0].ilv != 0:
                    raise ValueError(f"Ion {nion} {label} ladder does not start at the ground state")

                ex = self.level_ex[first : first + count]
                if ex[0] > ex.min():
                    raise ValueError(
                        f"Ion {nion} ground state (ex={ex[0]:.4g} eV) is not the lowest level"
                    )
                if np.any(np.diff(ex) < 0):
                    raise ValueError(f"Ion {nion} {label} ladder is not ordered by energy")
                if np.any(self.level_g[first : first + count] <= 0):
                    raise ValueError(f"Ion {nion} has a non-positive statistical weight")

    @classmethod
    def from_tables(cls, elements: TableLike, ions: TableLike, levels: TableLike) -> "AtomicData":
        """
        Build atomic data from element, ion and level tables.

        Parameters
        ----------
        elements : DataFrame or records
            Columns: symbol, z, abundance
        ions : DataFrame or records
            Columns: z, istate, g, ip_ev; optional macro_atom, superlevel,
            nlevels, nlte (ladder lengths default to all known levels)
        levels : DataFrame or records
            Columns: z, istate, ilv, g, ex_ev

        Returns
        -------
        AtomicData
        """
        elem_df = _as_frame(elements, ("symbol", "z", "abundance"), "elements")
        ion_df = _as_frame(ions, ("z", "istate", "g", "ip_ev"), "ions")
        lvl_df = _as_frame(levels, ("z", "istate", "ilv", "g", "ex_ev"), "levels")

        elem_df = elem_df.sort_values("z").reset_index(drop=True)
        ion_df = ion_df.sort_values(["z", "istate"]).reset_index(drop=True)
        if len(lvl_df):
            lvl_df = lvl_df.sort_values(["z", "istate", "ilv"]).reset_index(drop=True)
            ladders = {key: grp for key, grp in lvl_df.groupby(["z", "istate"], sort=False)}
        else:
            ladders = {}

        element_index = {int(z): i for i, z in enumerate(elem_df["z"])}
        unknown = set(int(z) for z in ion_df["z"]) - set(element_index)
        if unknown:
            raise ValueError(f"Ions reference unknown elements: {sorted(unknown)}")

        ion_records = []
        level_records = []
        first_levden = 0
        for nion, row in ion_df.iterrows():
            key = (row["z"], row["istate"])
            ladder = ladders.get(key)
            n_known = 0 if ladder is None else len(ladder)

            nlevels = int(row["nlevels"]) if "nlevels" in row and pd.notna(row["nlevels"]) else n_known
            nlte = int(row["nlte"]) if "nlte" in row and pd.notna(row["nlte"]) else n_known
            if nlevels > n_known or nlte > n_known:
                raise ValueError(
                    f"Ion z={row['z']} istate={row['istate']} asks for more levels "
                    f"than the {n_known} known"
                )

            first_level = len(level_records)
            if ladder is not None:
                for ilv, (_, lvl) in enumerate(ladder.iterrows()):
                    level_records.append(
                        Level(ion=int(nion), g=float(lvl["g"]), ex=float(lvl["ex_ev"]), ilv=ilv)
                    )

            ion_records.append(
                Ion(
                    z=int(row["z"]),
                    istate=int(row["istate"]),
                    g=float(row["g"]),
                    ionization_potential_ev=float(row["ip_ev"]),
                    element=element_index[int(row["z"])],
                    first_level=first_level,
                    nlevels=nlevels,
                    first_nlte_level=first_level,
                    nlte=nlte,
                    first_levden=first_levden,
                    is_macro_atom=_flag(row, "macro_atom"),
                    has_superlevel=_flag(row, "superlevel"),
                )
            )
            first_levden += nlte

        element_records = []
        for i, row in elem_df.iterrows():
            members = [n for n, ion in enumerate(ion_records) if ion.element == i]
            element_records.append(
                Element(
                    symbol=str(row["symbol"]),
                    z=int(row["z"]),
                    abundance=float(row["abundance"]),
                    first_ion=members[0] if members else len(ion_records),
                    n_ions=len(members),
                )
            )

        atomic = cls(tuple(element_records), tuple(ion_records), tuple(level_records))
        logger.info(
            f"Built atomic data: {atomic.n_elements} elements, {atomic.n_ions} ions, "
            f"{atomic.n_levels} levels"
        )
        return atomic


class AtomicDatabase(AtomicDataSource):
    """
    Loader for atomic data stored in an SQLite database.

    The database should have the following tables:
    - `elements`: symbol, z, abundance
    - `ions`: z, istate, g, ip_ev, macro_atom, superlevel, nlevels, nlte
    - `levels`: z, istate, ilv, g, ex_ev
    """

    def __init__(self, db_path: Union[str, Path]):
        """
        Parameters
        ----------
        db_path : str or Path
            Path to SQLite database file
        """
        db_path = Path(db_path)
        if not db_path.exists():
            raise FileNotFoundError(f"Atomic database not found: {db_path}")
        self.db_path = db_path

    def load(self) -> AtomicData:
        """Read all three tables and build ``AtomicData``."""
        with closing(sqlite3.connect(str(self.db_path))) as conn:
            elements = pd.read_sql_query("SELECT * FROM elements ORDER BY z", conn)
            ions = pd.read_sql_query("SELECT * FROM ions ORDER BY z, istate", conn)
            levels = pd.read_sql_query("SELECT * FROM levels ORDER BY z, istate, ilv", conn)

        logger.info(f"Loaded atomic database: {self.db_path}")
        return AtomicData.from_tables(elements, ions, levels)
