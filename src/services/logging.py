"""
Logging - Application logging configuration and disk persistence.

Provides:
- Python logging configuration with console and optional file output
- Daily log files: plt-wallet-YYYY-MM-DD.log
- Cleanup of old log files

Wallet modules never log secrets, passwords or decrypted payloads.
"""

from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional
import logging

from utils import get_logs_dir

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
LOG_FILE_PREFIX = "plt-wallet-"


def configure_logging(level: int = logging.INFO, log_to_file: bool = False) -> None:
    """
    Configure Python logging for the application.

    Sets up a root logger with console output, plus today's log file
    when log_to_file is set.

    Args:
        level: Logging level (default: INFO)
        log_to_file: Also append records to the daily log file
    """
    root_logger = logging.getLogger()

    # Only configure if not already configured
    if root_logger.handlers:
        return

    root_logger.setLevel(level)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%H:%M:%S'))
    root_logger.addHandler(console_handler)

    if log_to_file:
        file_handler = logging.FileHandler(get_log_file_path(), encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        root_logger.addHandler(file_handler)


def get_log_file_path(date: Optional[datetime] = None) -> Path:
    """Get the log file path for a specific date (defaults to today)."""
    if date is None:
        date = datetime.now()
    filename = f"{LOG_FILE_PREFIX}{date.strftime('%Y-%m-%d')}.log"
    return get_logs_dir() / filename


def cleanup_old_logs(retention_days: int) -> int:
    """
    Delete log files older than retention_days.

    Args:
        retention_days: Delete files older than this (0 = delete all but today)

    Returns:
        Number of files deleted
    """
    if retention_days < 0:
        return 0

    cutoff_date = datetime.now() - timedelta(days=retention_days)
    deleted_count = 0

    for file_path in get_logs_dir().glob(f"{LOG_FILE_PREFIX}*.log"):
        try:
            date_str = file_path.stem.replace(LOG_FILE_PREFIX, "")
            file_date = datetime.strptime(date_str, "%Y-%m-%d")
            if file_date.date() < cutoff_date.date():
                file_path.unlink()
                deleted_count += 1
        except (ValueError, OSError) as e:
            # Skip files that don't match expected format
            logging.getLogger(__name__).debug(f"Skipping log file {file_path.name}: {e}")

    return deleted_count
