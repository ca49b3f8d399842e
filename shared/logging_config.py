"""
Logging configuration for the quota tool.

Provides consistent logging setup for the launcher and the metadata client.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

def setup_logging(
    component_name: str,
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    format_string: Optional[str] = None
):
    """
    Configure logging for a tool component.

    Args:
        component_name: Component identifier (e.g., 'quota-check')
        level: Logging level, numeric or by name ('DEBUG', 'INFO', ...)
        log_file: Optional file path for log output
        format_string: Custom format string (default provided)
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    if format_string is None:
        format_string = f'[%(asctime)s] [{component_name.upper()}] %(levelname)s - %(message)s'

    # stdout is reserved for the check table
    logging.basicConfig(
        level=level,
        format=format_string,
        datefmt='%Y-%m-%d %H:%M:%S',
        handlers=[
            logging.StreamHandler(sys.stderr)
        ],
        force=True
    )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(format_string, datefmt='%Y-%m-%d %H:%M:%S'))
        logging.getLogger().addHandler(file_handler)

    logger = logging.getLogger(component_name)
    logger.debug(f"{component_name.upper()} logging initialized (level={logging.getLevelName(level)})")

    return logger
