"""
Shared utility functions for the PLT wallet.

Contains path helpers and settings loading used across packages.
"""

import json
import logging
import os
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

APP_HOME_ENV = "PLT_WALLET_HOME"


def get_app_dir() -> Path:
    """Get the application data directory."""
    override = os.environ.get(APP_HOME_ENV)
    if override:
        app_dir = Path(override)
    elif getattr(sys, 'frozen', False):
        # Running as compiled
        app_dir = Path(sys.executable).parent / "data"
    else:
        app_dir = Path.home() / ".plt-wallet"

    app_dir.mkdir(parents=True, exist_ok=True)
    return app_dir


def get_wallet_dir() -> Path:
    """Get the wallet storage directory."""
    return get_app_dir() / "wallets"


def get_wallet_store_path() -> Path:
    """Get path to the encrypted wallet store file."""
    return get_wallet_dir() / "storage.json"


def get_settings_path() -> Path:
    """Get path to settings file."""
    return get_app_dir() / "settings.json"


def get_logs_dir() -> Path:
    """Get the logs directory."""
    logs_dir = get_app_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    return logs_dir


def load_settings(settings_path: Path | None = None) -> dict:
    """Load settings from disk. Missing or unreadable file gives {}."""
    settings_path = settings_path or get_settings_path()
    if not settings_path.exists():
        return {}
    try:
        with open(settings_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Failed to load settings: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning("Settings file does not contain an object, ignoring")
        return {}
    return data
