# Logging for the webhook process
# Catalog outages are logged at ERROR and reach the alert callback

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Callable, Optional, Union

from .config import Settings

DEFAULT_LOG_FILE = Path(__file__).resolve().parent.parent / "logs" / "smartstock.log"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Called for ERROR records, e.g. to page whoever owns the inventory service
_error_alert_callback: Optional[Callable[[str, str], None]] = None


def set_error_alert_callback(callback: Optional[Callable[[str, str], None]]):
    """Set a callback(message, level) for error alerting. None disables it."""
    global _error_alert_callback
    _error_alert_callback = callback


class ErrorAlertHandler(logging.Handler):
    """Forwards ERROR and CRITICAL records to the alert callback."""

    def __init__(self):
        super().__init__(level=logging.ERROR)

    def emit(self, record: logging.LogRecord):
        if _error_alert_callback is None:
            return
        try:
            _error_alert_callback(self.format(record), record.levelname)
        except Exception:
            self.handleError(record)


def _level(level: Union[int, str]) -> int:
    if isinstance(level, str):
        value = logging.getLevelName(level.upper())
        return value if isinstance(value, int) else logging.INFO
    return level


def setup_logging(settings: Optional[Settings] = None, console: bool = True) -> ErrorAlertHandler:
    """
    Route the root logger to a rotating file, stderr and the alert callback.

    File location, rotation and level come from `settings` (log_path,
    log_max_bytes, log_backup_count, log_level). An unknown level name
    means INFO. Handlers from an earlier call are replaced.
    """
    settings = settings or Settings()
    log_path = Path(settings.log_path or DEFAULT_LOG_FILE)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    root = logging.getLogger()
    root.setLevel(_level(settings.log_level))
    for h in list(root.handlers):
        root.removeHandler(h)

    handlers = [RotatingFileHandler(log_path, maxBytes=settings.log_max_bytes,
                                    backupCount=settings.log_backup_count, encoding="utf-8")]
    if console:
        handlers.append(logging.StreamHandler(sys.stderr))
    alert_handler = ErrorAlertHandler()
    handlers.append(alert_handler)

    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    # requests' connection pool is chatty at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    return alert_handler
