import logging
import logging.handlers
import os
import sys
from pathlib import Path

from constants import APP_NAME

# %APPDATA%\HostShare\logs, or ./HostShare/logs where APPDATA is unset.
LOG_DIR = Path(os.getenv('APPDATA', '.')) / APP_NAME / "logs"
LOG_FILE_NAME = "app.log"

MAX_LOG_SIZE_BYTES = 1 * 1024 * 1024
BACKUP_COUNT = 5

# Prompts share the console; only problems go there.
CONSOLE_LOG_LEVEL = logging.WARNING

FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
CONSOLE_FORMAT = '%(levelname)s: %(message)s'


def _get_log_level_from_env() -> int:
    """LOG_LEVEL names the file log level. Unknown names mean INFO."""
    name = os.getenv('LOG_LEVEL', 'INFO').upper()
    if name in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
        return getattr(logging, name)
    return logging.INFO


def get_log_file_path() -> Path:
    return LOG_DIR / LOG_FILE_NAME


def setup_logging() -> Path | None:
    """
    Sends every record at the LOG_LEVEL threshold to a rotating file and
    warnings and above to stderr. Returns the log file path, or None when
    the file could not be opened and only stderr is logged to.
    """
    log_file_path = get_log_file_path()
    root_logger = logging.getLogger()
    root_logger.setLevel(_get_log_level_from_env())
    root_logger.handlers.clear()

    file_handler = None
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file_path, maxBytes=MAX_LOG_SIZE_BYTES, backupCount=BACKUP_COUNT, encoding='utf-8')
    except OSError as e:
        print(f"CRITICAL: cannot write {log_file_path} ({e}); logging to the console only.",
              file=sys.stderr)
    else:
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    console_handler.setLevel(CONSOLE_LOG_LEVEL)
    root_logger.addHandler(console_handler)

    return log_file_path if file_handler else None
