"""
Configuration management for Music Triage
"""

import os
import re
import tempfile
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

VALID_LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}


@dataclass
class PlaylistConfig:
    """Configuration for the on-disk queue files."""

    directory: str = "."
    extension: str = "m3u8"

    def validate(self) -> None:
        """Validate playlist configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if not re.fullmatch(r"[A-Za-z0-9]+", self.extension):
            raise ValueError(
                f"Invalid playlist extension: {self.extension!r}. "
                "Use letters and digits only (e.g. 'm3u8')"
            )


@dataclass
class PlayerConfig:
    """Configuration for the mpv output sink."""

    mpv_path: str = "mpv"
    volume: int = 50
    socket_dir: str = field(default_factory=tempfile.gettempdir)
    startup_timeout: float = 5.0

    def validate(self) -> None:
        """Validate player configuration values.

        Raises:
            ValueError: If configuration values are invalid
        """
        if not 0 <= self.volume <= 100:
            raise ValueError(f"Invalid volume: {self.volume}. Must be 0-100")
        if self.startup_timeout <= 0:
            raise ValueError(
                f"Invalid startup_timeout: {self.startup_timeout}. Must be positive"
            )


@dataclass
class UIConfig:
    """Configuration for the terminal interface."""

    tick_interval_ms: int = 250
    show_bucket_counts: bool = True

    @property
    def tick_interval(self) -> float:
        return self.tick_interval_ms / 1000.0


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "INFO"
    log_file: Optional[str] = (
        None  # Default: ~/.local/share/music-triage/music-triage.log
    )

    def validate(self) -> None:
        if self.level not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log level: {self.level}. Valid levels are: {sorted(VALID_LOG_LEVELS)}"
            )


@dataclass
class Config:
    """Main configuration object."""

    playlists: PlaylistConfig = field(default_factory=PlaylistConfig)
    player: PlayerConfig = field(default_factory=PlayerConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def playlist_dir(self) -> Path:
        """Directory holding todo and rating playlists, resolved against cwd."""
        return Path(self.playlists.directory).expanduser()


def get_config_dir() -> Path:
    """Get the configuration directory path."""
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / "music-triage"
    return Path.home() / ".config" / "music-triage"


def get_config_path() -> Path:
    """Get the main configuration file path.

    Checks for config.toml in the following order:
    1. Current working directory
    2. XDG_CONFIG_HOME/music-triage (or ~/.config/music-triage)
    """
    local_config = Path.cwd() / "config.toml"
    if local_config.exists():
        return local_config

    return get_config_dir() / "config.toml"


def get_data_dir() -> Path:
    """Get the data directory path."""
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home) / "music-triage"
    return Path.home() / ".local" / "share" / "music-triage"


def get_log_file_path(config: Config) -> Path:
    """Get the path to the log file."""
    if config.logging.log_file:
        return Path(config.logging.log_file).expanduser()
    return get_data_dir() / "music-triage.log"


def create_default_config() -> str:
    """Create a default configuration TOML content."""
    return """
# Music Triage Configuration

[playlists]
# Directory holding todo.m3u8 and rating-XX.m3u8 (relative to where you start the tool)
directory = "."

# Extension shared by all seven playlist files
extension = "m3u8"

[player]
# mpv executable used for playback
mpv_path = "mpv"

# Playback volume (0-100)
volume = 50

# Directory for mpv IPC sockets (defaults to the system temp dir)
# socket_dir = "/tmp"

# Seconds to wait for mpv to come up
startup_timeout = 5.0

[ui]
# Redraw interval in milliseconds
tick_interval_ms = 250

# Show per-bucket counts in the stats pane
show_bucket_counts = true

[logging]
# Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
level = "INFO"

# Custom log file path (default: ~/.local/share/music-triage/music-triage.log)
# log_file = "/path/to/custom/music-triage.log"
""".strip()


def _apply_env_overrides(config: Config) -> Config:
    playlist_dir = os.environ.get("MUSIC_TRIAGE_PLAYLIST_DIR")
    mpv_path = os.environ.get("MUSIC_TRIAGE_MPV_PATH")

    if playlist_dir:
        config.playlists.directory = playlist_dir
    if mpv_path:
        config.player.mpv_path = mpv_path
    return config


def load_config() -> Config:
    """Load configuration from file or create default.

    Environment variables override TOML values:
    - MUSIC_TRIAGE_PLAYLIST_DIR
    - MUSIC_TRIAGE_MPV_PATH
    """
    from dotenv import load_dotenv

    env_path = get_config_dir() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    config_path = get_config_path()

    if not config_path.exists():
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, "w", encoding="utf-8") as f:
                f.write(create_default_config())
            print(f"Created default configuration at: {config_path}")
        except OSError as e:
            print(f"Warning: Could not create default configuration: {e}")
        return _apply_env_overrides(Config())

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        print(f"Error loading config: {e}")
        print("Using default configuration.")
        return _apply_env_overrides(Config())

    return _apply_env_overrides(parse_config(toml_data))


def parse_config(toml_data: dict) -> Config:
    """Build a Config from parsed TOML, falling back per section on bad values."""
    config = Config()

    if "playlists" in toml_data:
        playlists_data = toml_data["playlists"]
        config.playlists = PlaylistConfig(
            directory=str(
                playlists_data.get("directory", config.playlists.directory)
            ),
            extension=playlists_data.get("extension", config.playlists.extension),
        )
        try:
            config.playlists.validate()
        except ValueError as e:
            print(f"Warning: Invalid playlist configuration: {e}")
            print("Using default playlist configuration.")
            config.playlists = PlaylistConfig()

    if "player" in toml_data:
        player_data = toml_data["player"]
        config.player = PlayerConfig(
            mpv_path=player_data.get("mpv_path", config.player.mpv_path),
            volume=player_data.get("volume", config.player.volume),
            socket_dir=str(
                Path(
                    player_data.get("socket_dir", config.player.socket_dir)
                ).expanduser()
            ),
            startup_timeout=float(
                player_data.get("startup_timeout", config.player.startup_timeout)
            ),
        )
        try:
            config.player.validate()
        except ValueError as e:
            print(f"Warning: Invalid player configuration: {e}")
            print("Using default player configuration.")
            config.player = PlayerConfig()

    if "ui" in toml_data:
        ui_data = toml_data["ui"]
        config.ui = UIConfig(
            tick_interval_ms=ui_data.get(
                "tick_interval_ms", config.ui.tick_interval_ms
            ),
            show_bucket_counts=ui_data.get(
                "show_bucket_counts", config.ui.show_bucket_counts
            ),
        )

    if "logging" in toml_data:
        logging_data = toml_data["logging"]
        log_file = logging_data.get("log_file")
        if log_file:
            log_file = str(Path(log_file).expanduser())
        config.logging = LoggingConfig(
            level=logging_data.get("level", config.logging.level).upper(),
            log_file=log_file,
        )
        try:
            config.logging.validate()
        except ValueError as e:
            print(f"Warning: Invalid logging configuration: {e}")
            config.logging = LoggingConfig(log_file=log_file)

    return config
