"""Shared helpers for fivem_utility (secrets, retry, YAML, registry owner).

Used by config, artifacts, docker and cli modules.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

# --- Text ---


def mask_secret(value: str) -> str:
    """Hide a secret for display: fully masked under 8 chars, otherwise keep the last 4."""
    if len(value) < 8:
        return "*" * len(value)
    return "*" * (len(value) - 4) + value[-4:]


# --- File ---


def load_yaml_mapping(p: Path) -> dict[str, Any]:
    """Load a YAML document that must be a mapping. Empty file -> {}. Raises ValueError otherwise."""
    with p.open() as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            msg = f"Malformed YAML in {p}: {e}"
            raise ValueError(msg) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"Expected a mapping at the top of {p}, got {type(data).__name__}"
        raise ValueError(msg)
    return data


# --- Retry ---


def fibonacci_backoff_sequence(max_total_seconds: int = 300) -> list[int]:
    """Generate Fibonacci backoff sequence (seconds) up to max_total_seconds."""
    sequence: list[int] = []
    total = 0
    a, b = 1, 1
    while total + a <= max_total_seconds:
        sequence.append(a)
        total += a
        a, b = b, a + b
    return sequence


def backoff_wait(sequence: list[int], attempt: int) -> int:
    """Wait time for attempt (0-based); past the end of sequence, repeat its last entry (1 if empty)."""
    if attempt < len(sequence):
        return sequence[attempt]
    return sequence[-1] if sequence else 1


# --- Registry ---


def registry_owner() -> str | None:
    """GHCR owner from GHCR_OWNER or GITHUB_REPOSITORY_OWNER, or None when neither is set."""
    return os.environ.get("GHCR_OWNER") or os.environ.get("GITHUB_REPOSITORY_OWNER") or None
