"""
Logging configuration for plasmapop.

All engine loggers live under the ``plasmapop`` hierarchy, one per module
(``plasmapop.plasma.superlevel``, ``plasmapop.plasma.update``, ...), so the
noisy per-cell modules can be tuned separately from the rest.
"""

import logging
import sys
from typing import Dict, Optional

PACKAGE_LOGGER = "plasmapop"

DEFAULT_FORMAT = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    level: str = "INFO",
    format_string: Optional[str] = None,
    stream: Optional[object] = None,
    module_levels: Optional[Dict[str, str]] = None,
) -> None:
    """
    Configure logging for plasmapop.

    Parameters
    ----------
    level : str
        Root logging level: 'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'
    format_string : str, optional
        Custom format string. If None, uses ``DEFAULT_FORMAT``.
    stream : file-like object, optional
        Stream to write logs to. If None, uses sys.stderr.
    module_levels : dict, optional
        Per-module overrides keyed by name relative to the package, e.g.
        ``{"plasma.superlevel": "ERROR"}`` to silence sampler warnings
        raised from a transport loop.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=format_string or DEFAULT_FORMAT,
        stream=stream or sys.stderr,
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )

    for name, module_level in (module_levels or {}).items():
        get_logger(name).setLevel(getattr(logging, module_level.upper()))


def get_logger(name: str) -> logging.Logger:
    """Logger for an engine module, e.g. ``get_logger("plasma.partition")``."""
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
