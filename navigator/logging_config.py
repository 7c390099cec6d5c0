# navigator/logging_config.py
"""
Logging configuration with granular verbosity control.
Usage:
    from navigator.logging_config import logger, set_debug_level

    set_debug_level('TRACE')      # Shows everything, including every URL check
    set_debug_level('COMPONENT')  # Tier decisions and pattern lifecycle only
    set_debug_level('ERROR')      # Errors only
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

# Custom logging levels
TRACE_LEVEL = 5        # Extremely verbose (regex matches, cache lookups)
COMPONENT_LEVEL = 15   # Component lifecycle events (tier chosen, pattern stored)

logging.addLevelName(TRACE_LEVEL, "TRACE")
logging.addLevelName(COMPONENT_LEVEL, "COMPONENT")

LOG_DIR = os.getenv('NAVIGATOR_LOG_DIR', 'logs')
LOG_FILE = os.path.join(LOG_DIR, 'navigator.log')


class CustomLogger(logging.Logger):
    def trace(self, message, *args, **kwargs):
        if self.isEnabledFor(TRACE_LEVEL):
            self._log(TRACE_LEVEL, message, args, **kwargs)

    def component(self, message, *args, **kwargs):
        if self.isEnabledFor(COMPONENT_LEVEL):
            self._log(COMPONENT_LEVEL, message, args, **kwargs)


logging.setLoggerClass(CustomLogger)
logger = logging.getLogger('chapter_navigator')
logging.setLoggerClass(logging.Logger)

DEBUG_LEVELS = {
    'ERROR': logging.ERROR,
    'WARNING': logging.WARNING,
    'INFO': logging.INFO,
    'COMPONENT': COMPONENT_LEVEL,
    'DEBUG': logging.DEBUG,
    'TRACE': TRACE_LEVEL,
}


def set_debug_level(level='INFO'):
    """Set the navigator logger and its handlers to one of DEBUG_LEVELS (case-insensitive).

    Unknown names fall back to INFO with a warning.
    """
    name = str(level).upper()
    if name not in DEBUG_LEVELS:
        logger.warning(f"[LOGGING] Unknown debug level {level!r}, using INFO")
        name = 'INFO'
    numeric_level = DEBUG_LEVELS[name]
    logger.setLevel(numeric_level)

    for handler in logger.handlers:
        handler.setLevel(numeric_level)

    logger.debug(f"[LOGGING] Debug level set to: {name} ({numeric_level})")


def _attach_handlers(log_file=LOG_FILE):
    """Rotating file log (128KB x 5) plus stdout, both with the same format."""
    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    handlers = [
        RotatingFileHandler(log_file, maxBytes=128 * 1024, backupCount=5, encoding='utf-8', delay=True),
        logging.StreamHandler(sys.stdout),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)


if not logger.handlers:
    _attach_handlers()

set_debug_level(os.getenv('NAVIGATOR_DEBUG_LEVEL', 'INFO'))
