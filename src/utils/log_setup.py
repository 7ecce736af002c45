"""
Process-wide logging configuration for entry points.

Library modules only ever call logging.getLogger(__name__); the CLI and web
entry points call configure_logging() once at startup.
"""

import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """
    Configure root logging once for the process.

    Args:
        level: Level name ("DEBUG", "INFO", ...). Defaults to the LOG_LEVEL
               environment variable, then INFO. Unknown names fall back to INFO.
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).strip().upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
    )
