"""Find resource folders on disk and compare them with the resources a server.cfg starts."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from fivem_utility.config.parser import FivemConfig

log = logging.getLogger(__name__)


def is_category(name: str) -> bool:
    """[category] folders group resources and are not resources themselves."""
    return name.startswith("[") and name.endswith("]")


def detect_resources(resource_dir: str | Path) -> dict[str, Path]:
    """Map resource name -> folder for every resource under resource_dir, descending into [category] folders.

    Raises FileNotFoundError if resource_dir is not a directory.
    """
    root = Path(resource_dir)
    if not root.is_dir():
        msg = f"Resources directory not found: {root}"
        raise FileNotFoundError(msg)

    resources: dict[str, Path] = {}
    for entry in sorted(root.iterdir()):
        if not entry.is_dir():
            continue
        if is_category(entry.name):
            resources.update(detect_resources(entry))
        else:
            if entry.name in resources:
                log.warning("duplicate resource %s: %s shadows %s", entry.name, entry, resources[entry.name])
            resources[entry.name] = entry
    return resources


@dataclass
class ResourceUsage:
    found: dict[str, Path] = field(default_factory=dict)
    missing: list[str] = field(default_factory=list)
    extra: dict[str, Path] = field(default_factory=dict)


def resource_usage(config: FivemConfig, resource_dir: str | Path) -> ResourceUsage:
    """Split started resources into found/missing and list folders nothing starts as extra."""
    available = detect_resources(resource_dir)
    usage = ResourceUsage()
    for name in config.resources:
        path = available.pop(name, None)
        if path is not None:
            usage.found[name] = path
        elif name not in usage.found:
            usage.missing.append(name)
    usage.extra = available
    return usage
