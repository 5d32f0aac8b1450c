"""Resource folder discovery and usage reporting against server.cfg."""

from .discovery import ResourceUsage, detect_resources, resource_usage

__all__ = ["ResourceUsage", "detect_resources", "resource_usage"]
