import logging
import sys

LOGGER_NAME = "pathtracker"
HANDLER_NAME = "pathtracker"


def setup_logging(level=logging.INFO,
                  format_string='%(asctime)s - %(name)s - %(levelname)s - %(message)s'):
    """Send pathtracker log records to stdout.

    Nothing is configured at import time; call this from scripts that want
    to see tracking progress and failures.
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(format_string))
    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.handlers = [h for h in package_logger.handlers
                               if h.get_name() != HANDLER_NAME]
    handler.set_name(HANDLER_NAME)
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    return package_logger


logger = logging.getLogger(LOGGER_NAME)
