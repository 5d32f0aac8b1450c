"""List server builds published on the FiveM artifact server."""

from __future__ import annotations

import logging
import platform
import re
import time
from dataclasses import dataclass
from http.client import HTTPException
from urllib.error import HTTPError
from urllib.request import Request, urlopen

from fivem_utility import __version__
from fivem_utility.helpers import backoff_wait, fibonacci_backoff_sequence

log = logging.getLogger(__name__)

LINUX_ARTIFACT_SERVER = "https://runtime.fivem.net/artifacts/fivem/build_proot_linux/master/"
WINDOWS_ARTIFACT_SERVER = "https://runtime.fivem.net/artifacts/fivem/build_server_windows/master/"

_BUILD_RE = re.compile(r"(\d+)-([0-9a-f]+)")


@dataclass(frozen=True)
class Artifact:
    url: str
    # publishing number; higher is more recent
    num: int
    hash: str


def default_server(use_windows: bool = False) -> str:
    """Windows artifact server on Windows hosts or when asked, else the Linux one."""
    if use_windows or platform.system() == "Windows":
        return WINDOWS_ARTIFACT_SERVER
    return LINUX_ARTIFACT_SERVER


def parse_artifacts(body: str, base_url: str) -> list[Artifact]:
    """Extract {num}-{hash} builds from a listing page; first hit per build number wins, page order kept."""
    artifacts: list[Artifact] = []
    seen: set[int] = set()
    for m in _BUILD_RE.finditer(body):
        num = int(m.group(1))
        if num in seen:
            continue
        seen.add(num)
        artifacts.append(Artifact(url=f"{base_url}{m.group(1)}-{m.group(2)}/", num=num, hash=m.group(2)))
    return artifacts


def get_artifacts(url: str, max_retries: int = 3, timeout: int = 10) -> list[Artifact]:
    """Fetch and parse the artifact listing at url.

    Network, socket and HTTP protocol errors are retried with Fibonacci backoff. Returns [] on a 404
    or once retries run out, so an unreachable or changed server reads as "no builds".
    """
    headers = {"User-Agent": f"fivem-utility/{__version__}"}
    backoff_sequence = fibonacci_backoff_sequence(max_total_seconds=30)

    for attempt in range(max_retries):
        req = Request(url, headers=headers)
        try:
            with urlopen(req, timeout=timeout) as response:
                body = response.read().decode("utf-8", errors="replace")
            return parse_artifacts(body, url)
        except HTTPError as e:
            if e.code == 404:
                log.warning("artifact server %s returned 404", url)
                return []
            reason = f"HTTP {e.code}"
        except (OSError, HTTPException) as e:
            # includes URLError, socket resets and truncated reads
            reason = f"network error ({getattr(e, 'reason', e)})"
        if attempt + 1 < max_retries:
            wait_time = backoff_wait(backoff_sequence, attempt)
            log.warning("retry %d/%d: %s, waiting %ds...", attempt + 1, max_retries, reason, wait_time)
            time.sleep(wait_time)
        else:
            log.warning("giving up on %s after %d attempts: %s", url, max_retries, reason)
    return []
