"""
Logging setup for the advancement engine.

The engine reports through catchery, which writes to the standard logging
module. This routes those records to a rich console handler.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

# Loggers that are too chatty at debug level.
QUIET_LOGGERS = ("asyncio", "prompt_toolkit")


def setup_logging(level: int = logging.INFO, width: int = 120) -> None:
    """
    Installs a rich handler on the root logger.

    Args:
        level (int): The root logging level. Defaults to logging.INFO.
        width (int): The console width used for log lines.

    """
    handler = RichHandler(
        console=Console(width=width, stderr=True),
        show_time=level <= logging.DEBUG,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logging.basicConfig(level=level, handlers=[handler], force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
