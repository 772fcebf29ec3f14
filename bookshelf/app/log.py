"""
Logging Setup
=============
Root logger configuration shared by the CLI and TUI launchers.
"""

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: str = "WARNING", log_file: Optional[Path] = None) -> None:
    """
    Configure the root logger.

    The TUI owns the terminal, so it passes a log_file and no console
    handler is installed in that case.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ...)
        log_file: Write records to this file instead of stderr
    """
    handlers = None
    if log_file is not None:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers = [logging.FileHandler(log_file, encoding="utf-8")]

    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.WARNING),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
