"""Parse FiveM server .cfg files (server.cfg and anything it exec's) into a FivemConfig.

Only the directives that matter for reporting are kept; everything else in the
file is skipped. exec paths resolve against the directory of the main file.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

log = logging.getLogger(__name__)

MAX_CLIENTS_LIMIT = 65535


class ConfigError(ValueError):
    """Raised when a config file cannot be read or contains an invalid directive."""


@dataclass
class FivemConfig:
    hostname: str = ""
    resources: list[str] = field(default_factory=list)
    convars: dict[str, str] = field(default_factory=dict)
    convars_replicated: dict[str, str] = field(default_factory=dict)
    allow_scripthook: bool = True
    rcon_password: str = ""
    license_key: str = ""
    server_icon: str = ""
    max_clients: int = 0


def split_config_line(line: str) -> list[str]:
    """Split a config line on spaces/tabs, keeping double-quoted text together (quotes dropped)."""
    parts: list[str] = []
    part: list[str] = []
    quoted = False
    for ch in line:
        if ch == '"':
            quoted = not quoted
        elif ch in " \t" and not quoted:
            if part:
                parts.append("".join(part))
            part = []
        else:
            part.append(ch)
    if part:
        parts.append("".join(part))
    return parts


def _args(parts: list[str], count: int) -> list[str]:
    if len(parts) - 1 < count:
        msg = f"`{parts[0]}` expects {count} argument(s), got {len(parts) - 1}"
        raise ConfigError(msg)
    return parts[1 : count + 1]


def _parse_max_clients(value: str) -> int:
    if not (value.isascii() and value.isdigit()) or int(value) > MAX_CLIENTS_LIMIT:
        msg = "Max clients is not a number!"
        raise ConfigError(msg)
    return int(value)


def _parse_file(config: FivemConfig, path: Path, base_dir: Path, seen: tuple[Path, ...]) -> None:
    resolved = path.resolve()
    if resolved in seen:
        msg = f"exec cycle: {' -> '.join(str(p) for p in (*seen, resolved))}"
        raise ConfigError(msg)
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        msg = f"Failed to read config file {path}: {e.strerror or e}"
        raise ConfigError(msg) from e
    log.debug("parsing %s", path)

    for line in text.replace("\r", "\n").split("\n"):
        if line.lstrip().startswith("#"):
            continue
        parts = split_config_line(line)
        if not parts:
            continue

        directive = parts[0]
        if directive == "sv_hostname":
            (config.hostname,) = _args(parts, 1)
        elif directive in ("start", "ensure"):
            (name,) = _args(parts, 1)
            config.resources.append(name)
        elif directive == "set":
            key, value = _args(parts, 2)
            config.convars[key] = value
        elif directive == "setr":
            key, value = _args(parts, 2)
            config.convars_replicated[key] = value
        elif directive == "sv_scriptHookAllowed":
            (value,) = _args(parts, 1)
            config.allow_scripthook = value == "1"
        elif directive == "rcon_password":
            (config.rcon_password,) = _args(parts, 1)
        elif directive == "sv_licenseKey":
            (config.license_key,) = _args(parts, 1)
        elif directive == "load_server_icon":
            (config.server_icon,) = _args(parts, 1)
        elif directive == "sv_maxclients":
            (value,) = _args(parts, 1)
            config.max_clients = _parse_max_clients(value)
        elif directive == "exec":
            (target,) = _args(parts, 1)
            included = Path(target)
            if not included.is_absolute():
                included = base_dir / included
            _parse_file(config, included, base_dir, (*seen, resolved))


def read_config_file(file_name: str | Path) -> FivemConfig:
    """Read the config at file_name, following exec directives. Raises ConfigError."""
    path = Path(file_name)
    config = FivemConfig()
    _parse_file(config, path, path.parent, ())
    return config
