"""
Common utility functions used across ToolDock modules.
"""

import logging
from typing import Any, Optional


def dig(data: Any, path: str) -> Optional[Any]:
    """
    Walk a dotted path ("data.task_id") through nested dicts.

    Returns None as soon as a segment is missing or a non-dict is hit.
    """
    current = data
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return None
        current = current[part]
    return current


def setup_logging(config=None) -> None:
    """
    Apply level and format from a LoggingConfig to the root logger.

    Safe to call more than once; later calls only adjust the level.
    """
    level_name = getattr(config, "level", "INFO") or "INFO"
    fmt = getattr(config, "format", None) or "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
    level = getattr(logging, str(level_name).upper(), logging.INFO)

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=fmt)
    root.setLevel(level)
    logging.getLogger("tooldock").setLevel(level)
