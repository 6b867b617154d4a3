"""Logging setup for the rentledger server.

Every module logs through ``logging.getLogger(__name__)``; this module only
wires the root logger once at startup. Records go to stdout and, unless
``LOG_FILE`` is empty, to a size-rotated file:

    [2024-03-01 09:15:02] rentledger.services.payment_service - WARNING - Overpayment refused ...

The level comes from ``LOG_LEVEL`` (via settings). Ledger invariant
violations are logged at ERROR by the services that detect them.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rentledger.config import settings

LOG_FORMAT = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 5


def resolve_level(name: str | None) -> int:
    """Translate a level name such as "warning" to its logging constant.

    Unknown or empty names resolve to INFO.
    """
    if not name:
        return logging.INFO
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def setup_server_logging(log_file: str | None = None, level: str | None = None) -> None:
    """
    Configure the root logger for the API server.

    Args:
        log_file: File to write to (default: settings.log_file); empty string
            disables the file handler
        level: Level name (default: settings.log_level)

    Calling it again replaces the handlers installed by the previous call.
    """
    log_level = resolve_level(level if level is not None else settings.log_level)
    log_file = settings.log_file if log_file is None else log_file
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                log_path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"
            )
        )

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()
    root_logger.setLevel(log_level)
    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    # Engine logging is owned by DATABASE_ECHO
    if not settings.database_echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(
        f"Logging configured: level={logging.getLevelName(log_level)}, file={log_file or '-'}"
    )


__all__ = ["setup_server_logging", "resolve_level", "LOG_FORMAT"]
