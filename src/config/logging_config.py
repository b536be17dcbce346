# src/config/logging_config.py

"""Per-run timestamped logging configuration for door_catalog.

Every launch (CLI search, manual refresh, or the long-running refresh
watcher) writes to its own file under ``logs/``, named after the launch
timestamp, e.g. ``logs/run_20260214_153045.log``.  All ``door_catalog.*``
loggers propagate to the project root logger configured here.

Feed refreshes run in worker threads, so the file format carries the
thread name next to the module location.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

from src.config.settings import Settings

_FILE_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(threadName)s | %(name)s | "
    "%(module)s:%(funcName)s:%(lineno)d | %(message)s"
)

_CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are chatty at DEBUG during a feed download
_NOISY_LOGGERS = ("urllib3", "charset_normalizer", "asyncio")


def setup_logging(console_level: int = logging.WARNING) -> Path:
    """Initialise the ``door_catalog`` logger for the current run.

    Args:
        console_level: Minimum level echoed to stderr.  The log file
            always receives DEBUG and above.

    Returns:
        The :class:`~pathlib.Path` to the log file created for this run.
    """
    logs_dir: Path = Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = logs_dir / f"run_{timestamp}.log"

    root_logger = logging.getLogger("door_catalog")
    root_logger.setLevel(logging.DEBUG)

    # Repeated calls (tests, --watch restarts) must not stack handlers
    if root_logger.handlers:
        return log_file

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(_FILE_FORMAT, datefmt=_DATE_FORMAT)
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(
        logging.Formatter(_CONSOLE_FORMAT, datefmt=_DATE_FORMAT)
    )

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root_logger.info("Logging initialised, log file: %s", log_file)

    return log_file
