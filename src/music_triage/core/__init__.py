"""Core infrastructure layer - no triage logic dependencies.

This module provides foundation-level services:
- Configuration management (TOML)
- Output and logging (Loguru)
- Console management (Rich)
"""

from .config import (
    Config,
    load_config,
    get_config_dir,
    get_config_path,
    get_data_dir,
    get_log_file_path,
    create_default_config,
)
from .console import get_console, get_error_console, print_error, print_notice
from .output import (
    setup_loguru,
    set_ui_mode,
    clear_ui_mode,
    drain_pending_messages,
    log,
)

__all__ = [
    # Config
    "Config",
    "load_config",
    "get_config_dir",
    "get_config_path",
    "get_data_dir",
    "get_log_file_path",
    "create_default_config",
    # Console
    "get_console",
    "get_error_console",
    "print_error",
    "print_notice",
    # Output
    "setup_loguru",
    "set_ui_mode",
    "clear_ui_mode",
    "drain_pending_messages",
    "log",
]
