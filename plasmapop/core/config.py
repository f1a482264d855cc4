"""
Configuration management for plasmapop.

Provides utilities for loading and validating YAML/JSON configuration files
for the population engine.
"""

import json
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, Any, Union
import logging

import yaml

from plasmapop.core.constants import LTE_DEP_FRAC, LOWEST_SUPERLEVEL_THRESHOLD
from plasmapop.core.modes import NebularMode

logger = logging.getLogger(__name__)


def load_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load configuration from YAML or JSON file.

    Parameters
    ----------
    config_path : str or Path
        Path to configuration file (.yaml, .yml, or .json)

    Returns
    -------
    dict
        Configuration dictionary

    Raises
    ------
    FileNotFoundError
        If config file does not exist
    ValueError
        If file format is not supported
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    suffix = config_path.suffix.lower()

    with open(config_path, "r") as f:
        if suffix in [".yaml", ".yml"]:
            config = yaml.safe_load(f)
        elif suffix == ".json":
            config = json.load(f)
        else:
            raise ValueError(
                f"Unsupported config file format: {suffix}. " "Use .yaml, .yml, or .json"
            )

    logger.info(f"Loaded configuration from {config_path}")
    return config


def save_config(config: Dict[str, Any], config_path: Union[str, Path]) -> None:
    """
    Save configuration to YAML or JSON file.

    Parameters
    ----------
    config : dict
        Configuration dictionary
    config_path : str or Path
        Path to output file. Unknown suffixes are written as YAML.
    """
    config_path = Path(config_path)
    suffix = config_path.suffix.lower()

    if suffix == ".json":
        with open(config_path, "w") as f:
            json.dump(config, f, indent=2)
    else:
        if suffix not in [".yaml", ".yml"]:
            config_path = config_path.with_suffix(".yaml")
        with open(config_path, "w") as f:
            yaml.dump(config, f, default_flow_style=False, sort_keys=False)

    logger.info(f"Saved configuration to {config_path}")


def validate_engine_config(config: Dict[str, Any]) -> bool:
    """
    Validate engine configuration structure.

    Parameters
    ----------
    config : dict
        Configuration dictionary

    Returns
    -------
    bool
        True if valid

    Raises
    ------
    ValueError
        If configuration is invalid
    """
    if "engine" not in config:
        raise ValueError("Configuration must contain 'engine' section")

    engine = config["engine"]

    if "nebular_mode" in engine:
        valid_modes = [m.value for m in NebularMode]
        if engine["nebular_mode"] not in valid_modes:
            raise ValueError(
                f"Invalid nebular mode: {engine['nebular_mode']}. "
                f"Must be one of: {valid_modes}"
            )

    floor = engine.get("lowest_superlevel_threshold", LOWEST_SUPERLEVEL_THRESHOLD)
    if not isinstance(floor, int) or floor < 0:
        raise ValueError("lowest_superlevel_threshold must be a non-negative integer")

    if engine.get("lte_departure_factor", LTE_DEP_FRAC) <= 1.0:
        raise ValueError("lte_departure_factor must be greater than 1")

    return True


@dataclass
class EngineSettings:
    """
    Simulation-wide switches for the population engine.

    Attributes
    ----------
    nebular_mode : NebularMode
        Default approximation for partition functions and level populations
    macro_ioniz_mode : bool
        If True, macro-atom ions get their populations elsewhere and are not
        overwritten by the Boltzmann ladder
    lowest_superlevel_threshold : int
        Number of levels above ground never folded into a superlevel
    lte_departure_factor : float
        Departure-coefficient band half-width used to grow the superlevel
    """

    nebular_mode: NebularMode = NebularMode.ML93
    macro_ioniz_mode: bool = True
    lowest_superlevel_threshold: int = LOWEST_SUPERLEVEL_THRESHOLD
    lte_departure_factor: float = LTE_DEP_FRAC

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "EngineSettings":
        """Build settings from a validated configuration dictionary."""
        validate_engine_config(config)
        engine = config["engine"]
        defaults = cls()
        return cls(
            nebular_mode=NebularMode(engine.get("nebular_mode", defaults.nebular_mode.value)),
            macro_ioniz_mode=bool(engine.get("macro_ioniz_mode", defaults.macro_ioniz_mode)),
            lowest_superlevel_threshold=int(
                engine.get("lowest_superlevel_threshold", defaults.lowest_superlevel_threshold)
            ),
            lte_departure_factor=float(
                engine.get("lte_departure_factor", defaults.lte_departure_factor)
            ),
        )

    def to_config(self) -> Dict[str, Any]:
        """Inverse of ``from_config``."""
        engine = asdict(self)
        engine["nebular_mode"] = self.nebular_mode.value
        return {"engine": engine}
