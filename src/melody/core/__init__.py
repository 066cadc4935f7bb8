"""Core infrastructure layer - no domain dependencies.

This module provides foundation-level services:
- Configuration management (TOML)
- Key-value persistence (SQLite)
- Console and log output (Rich, Loguru)
"""

# Configuration
from .config import (
    Config,
    load_config,
    get_config_dir,
    get_config_path,
    get_data_dir,
    get_database_path,
    get_log_file_path,
    create_default_config,
    ensure_directories,
)

# Persistence
from .store import (
    KeyValueStore,
    MemoryStore,
    SqliteStore,
    PLAYLIST_KEY,
    FAVORITES_KEY,
    RECENTLY_PLAYED_KEY,
)

# Console / output
from .console import get_console, safe_print
from .output import log, setup_loguru

__all__ = [
    # Config
    "Config",
    "load_config",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "get_database_path",
    "get_log_file_path",
    "create_default_config",
    "ensure_directories",
    # Persistence
    "KeyValueStore",
    "MemoryStore",
    "SqliteStore",
    "PLAYLIST_KEY",
    "FAVORITES_KEY",
    "RECENTLY_PLAYED_KEY",
    # Console / output
    "get_console",
    "safe_print",
    "log",
    "setup_loguru",
]
