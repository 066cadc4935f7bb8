"""
Configuration management for Melody
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from loguru import logger

# Audio formats accepted by the local file picker
DEFAULT_AUDIO_EXTENSIONS = [".mp3", ".wav", ".m4a", ".flac", ".ogg", ".aac"]

# Hard limit for a remote fetch before the downloader is killed (seconds)
DEFAULT_FETCH_TIMEOUT = 120.0


@dataclass
class PlayerConfig:
    """Configuration for the audio output."""

    mpv_socket_path: Optional[str] = None
    volume: float = 0.7  # 0.0 - 1.0, not persisted between sessions
    poll_interval: float = 0.25  # seconds between mpv status polls


@dataclass
class LibraryConfig:
    """Configuration for adding tracks."""

    download_dir: str = field(
        default_factory=lambda: str(Path.home() / "Music" / "Melody Downloads")
    )
    supported_formats: List[str] = field(
        default_factory=lambda: list(DEFAULT_AUDIO_EXTENSIONS)
    )
    fetch_timeout_seconds: float = DEFAULT_FETCH_TIMEOUT

    def validate(self) -> None:
        """Validate library configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if self.fetch_timeout_seconds <= 0:
            raise ValueError(
                f"fetch_timeout_seconds must be positive, got {self.fetch_timeout_seconds}"
            )
        bad = [ext for ext in self.supported_formats if not ext.startswith(".")]
        if bad:
            raise ValueError(f"Formats must start with '.': {bad}")


@dataclass
class StorageConfig:
    """Configuration for the persistent store."""

    database_path: Optional[str] = None  # default: <data dir>/melody.db


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file: Optional[str] = None  # default: ~/.local/share/melody/melody.log
    max_file_size_mb: int = 10
    backup_count: int = 5


@dataclass
class NotificationsConfig:
    """Configuration for transient notifications."""

    enabled: bool = True
    desktop: bool = True  # also send through notify-send when available
    duration_seconds: float = 3.0


@dataclass
class Config:
    """Main configuration object."""

    player: PlayerConfig = field(default_factory=PlayerConfig)
    library: LibraryConfig = field(default_factory=LibraryConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    notifications: NotificationsConfig = field(default_factory=NotificationsConfig)


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "melody"
    return Path.home() / ".config" / "melody"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "melody"
    return Path.home() / ".local" / "share" / "melody"


def _find_project_config() -> Optional[Path]:
    """Find config.toml next to pyproject.toml when running from a checkout."""
    try:
        current = Path(__file__).resolve().parent
        for parent in [current] + list(current.parents):
            if (parent / "pyproject.toml").exists():
                config_path = parent / "config.toml"
                if config_path.exists():
                    return config_path
                return None
    except OSError:
        pass
    return None


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. Project root (detected via pyproject.toml) - for development
    2. Current working directory
    3. XDG_CONFIG_HOME/melody (or ~/.config/melody)
    """
    project_config = _find_project_config()
    if project_config:
        return project_config

    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def get_database_path(config: Config) -> Path:
    """Resolve the SQLite store location."""
    if config.storage.database_path:
        return Path(config.storage.database_path).expanduser()
    return get_data_dir() / "melody.db"


def get_log_file_path(config: Config) -> Path:
    """Resolve the log file location."""
    if config.logging.log_file:
        return Path(config.logging.log_file).expanduser()
    return get_data_dir() / "melody.log"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# Melody Configuration

[player]
# Path for mpv socket (auto-generated if not specified)
# mpv_socket_path = "/tmp/melody-mpv"

# Startup volume (0.0 - 1.0)
volume = 0.7

# Seconds between playback status polls
poll_interval = 0.25

[library]
# Folder downloaded tracks are written to
download_dir = "~/Music/Melody Downloads"

# Extensions accepted when opening local files
supported_formats = [".mp3", ".wav", ".m4a", ".flac", ".ogg", ".aac"]

# Seconds before a download is abandoned
fetch_timeout_seconds = 120

[storage]
# Custom store path (default: ~/.local/share/melody/melody.db)
# database_path = "/path/to/melody.db"

[logging]
# Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
level = "INFO"

# Custom log file path (default: ~/.local/share/melody/melody.log)
# log_file = "/path/to/melody.log"

# Maximum log file size in MB before rotation
max_file_size_mb = 10

# Number of rotated log files to keep
backup_count = 5

[notifications]
# Show transient notifications
enabled = true

# Also send desktop notifications via notify-send
desktop = true

# Seconds before a notification is dismissed
duration_seconds = 3.0
""".strip()


def _parse_config(toml_data: dict) -> Config:
    """Build a Config from parsed TOML, keeping defaults for missing keys."""
    config = Config()

    if "player" in toml_data:
        player_data = toml_data["player"]
        volume = float(player_data.get("volume", config.player.volume))
        config.player = PlayerConfig(
            mpv_socket_path=player_data.get("mpv_socket_path"),
            volume=max(0.0, min(1.0, volume)),
            poll_interval=float(
                player_data.get("poll_interval", config.player.poll_interval)
            ),
        )

    if "library" in toml_data:
        library_data = toml_data["library"]
        config.library = LibraryConfig(
            download_dir=str(
                Path(
                    library_data.get("download_dir", config.library.download_dir)
                ).expanduser()
            ),
            supported_formats=[
                ext.lower()
                for ext in library_data.get(
                    "supported_formats", config.library.supported_formats
                )
            ],
            fetch_timeout_seconds=float(
                library_data.get(
                    "fetch_timeout_seconds", config.library.fetch_timeout_seconds
                )
            ),
        )
        try:
            config.library.validate()
        except ValueError as e:
            logger.warning(f"Invalid library configuration: {e}; using defaults")
            config.library = LibraryConfig()

    if "storage" in toml_data:
        storage_data = toml_data["storage"]
        database_path = storage_data.get("database_path")
        if database_path:
            database_path = str(Path(database_path).expanduser())
        config.storage = StorageConfig(database_path=database_path)

    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        log_file = logging_data.get("log_file")
        if log_file:
            log_file = str(Path(log_file).expanduser())
        config.logging = LoggingConfig(
            level=logging_data.get("level", config.logging.level).upper(),
            log_file=log_file,
            max_file_size_mb=logging_data.get(
                "max_file_size_mb", config.logging.max_file_size_mb
            ),
            backup_count=logging_data.get("backup_count", config.logging.backup_count),
        )

    if "notifications" in toml_data:
        notifications_data = toml_data["notifications"]
        config.notifications = NotificationsConfig(
            enabled=notifications_data.get(
                "enabled", config.notifications.enabled
            ),
            desktop=notifications_data.get("desktop", config.notifications.desktop),
            duration_seconds=float(
                notifications_data.get(
                    "duration_seconds", config.notifications.duration_seconds
                )
            ),
        )

    return config


def _apply_env_overrides(config: Config) -> Config:
    """Environment variables override TOML values."""
    download_dir = os.environ.get("MELODY_DOWNLOAD_DIR")
    if download_dir:
        config.library.download_dir = str(Path(download_dir).expanduser())

    log_level = os.environ.get("MELODY_LOG_LEVEL")
    if log_level:
        config.logging.level = log_level.upper()

    return config


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file or create default.

    Environment variables override TOML values:
    - MELODY_DOWNLOAD_DIR
    - MELODY_LOG_LEVEL
    """
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    config_path = config_path or get_config_path()

    if not config_path.exists():
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, "w", encoding="utf-8") as f:
                f.write(create_default_config())
            logger.info(f"Created default configuration at: {config_path}")
        except OSError as e:
            logger.warning(f"Could not write default configuration: {e}")
        return _apply_env_overrides(Config())

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
        config = _parse_config(toml_data)
    except (OSError, tomllib.TOMLDecodeError, TypeError, ValueError) as e:
        logger.error(f"Error loading configuration from {config_path}: {e}")
        config = Config()

    return _apply_env_overrides(config)


def ensure_directories(config: Config) -> None:
    """Ensure all necessary directories exist."""
    get_data_dir().mkdir(parents=True, exist_ok=True)
    Path(config.library.download_dir).expanduser().mkdir(parents=True, exist_ok=True)
