"""FiveM artifact server listing."""

from .server import (
    LINUX_ARTIFACT_SERVER,
    WINDOWS_ARTIFACT_SERVER,
    Artifact,
    default_server,
    get_artifacts,
    parse_artifacts,
)

__all__ = [
    "LINUX_ARTIFACT_SERVER",
    "WINDOWS_ARTIFACT_SERVER",
    "Artifact",
    "default_server",
    "get_artifacts",
    "parse_artifacts",
]
