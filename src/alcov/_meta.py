from __future__ import annotations

import logging
from importlib.metadata import version

__version__ = version("alcov")

logger = logging.getLogger("alcov")

__all__ = ["__version__", "logger"]
