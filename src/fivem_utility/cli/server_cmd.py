"""Server commands: print, verify, resource-usage, version-server."""

from __future__ import annotations

import sys
from pathlib import Path

from rich.console import Console
from rich.text import Text

from fivem_utility.artifacts.server import default_server, get_artifacts
from fivem_utility.config.display import print_config
from fivem_utility.config.parser import ConfigError, read_config_file
from fivem_utility.resources.discovery import resource_usage

PARSE_FAILED = "Failed to parse config file. Maybe run `verify` to check why?"


def run_print(config_file: Path, console: Console | None = None) -> int:
    """Parse config_file and print its summary. Returns 0 or 1."""
    try:
        cfg = read_config_file(config_file)
        print_config(cfg, console=console)
    except ConfigError:
        print(PARSE_FAILED, file=sys.stderr)
        return 1
    return 0


def run_verify(config_file: Path) -> int:
    """Report whether config_file parses cleanly. Returns 0 or 1."""
    try:
        read_config_file(config_file)
    except ConfigError as e:
        print(f"The file was parsed and error(s) were found: {e}", file=sys.stderr)
        return 1
    print("The file was parsed and found no errors.", file=sys.stderr)
    return 0


def run_resource_usage(
    config_file: Path,
    resources_dir: Path,
    console: Console | None = None,
    err_console: Console | None = None,
) -> int:
    """Print found (stdout), missing and extra (stderr) resources. Returns 0, or 1 if inputs are unusable."""
    out = console or Console()
    err = err_console or Console(stderr=True)
    try:
        cfg = read_config_file(config_file)
    except ConfigError:
        print(PARSE_FAILED, file=sys.stderr)
        return 1
    try:
        usage = resource_usage(cfg, resources_dir)
    except FileNotFoundError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    for name, path in usage.found.items():
        out.print(Text.assemble(("[  FOUND  ]", "green"), " ", (name, "bold"), f" @ {path}"))
    for name in usage.missing:
        err.print(Text.assemble(("[ MISSING ]", "red"), " ", (name, "bold")))
    for name, path in usage.extra.items():
        err.print(Text.assemble(("[  EXTRA  ]", "yellow"), " ", (name, "bold"), f" @ {path}"))
    return 0


def run_version_server(use_windows: bool = False) -> int:
    """Print `{num}\\t{url}` for each build on the artifact server. Returns 0."""
    for af in get_artifacts(default_server(use_windows)):
        print(f"{af.num}\t{af.url}")
    return 0
