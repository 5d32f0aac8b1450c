"""FiveM server.cfg parsing and display."""

from .display import print_config, render_hostname
from .parser import ConfigError, FivemConfig, read_config_file, split_config_line

__all__ = [
    "ConfigError",
    "FivemConfig",
    "print_config",
    "read_config_file",
    "render_hostname",
    "split_config_line",
]
