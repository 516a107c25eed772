"""
Centralized error helpers for the application.
"""

import json
import traceback
from typing import Any, Dict

from ytscribe.config import config
from ytscribe.utils.logger import logging


def log_exception(context: str, error: Exception):
    """
    Log an error with its traceback.

    The traceback is only written when debug mode is on.

    Args:
        context: Short description of what was being done
        error: The exception that occurred
    """
    logging.error(f"{context}: {error}")
    if config.DEBUG:
        logging.error("".join(traceback.format_exception(type(error), error, error.__traceback__)))


def log_diagnostic_info(context: Dict[str, Any]):
    """
    Log diagnostic information for debugging.

    Args:
        context: Dictionary of diagnostic information
    """
    if not config.DEBUG:
        return

    try:
        logging.info(f"Diagnostic info: {json.dumps(context, default=str)}")
    except (TypeError, ValueError) as e:
        logging.error(f"Error logging diagnostic info: {str(e)}")
