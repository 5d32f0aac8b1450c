"""Check a packaged image: entry point, binary present, no build toolchain or sources, args reach the binary.

Filesystem checks read the output of `docker export`, so they work on shell-less
runtimes (distroless) too.
"""

from __future__ import annotations

import fnmatch
import json
import logging
import subprocess
import sys
import tarfile
import tempfile
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from fivem_utility.docker.config import PackagingConfig
from fivem_utility.docker.generate_dockerfile import SOURCE_WORKDIR
from fivem_utility.docker.variants import BaseImageVariant, get_toolchain

log = logging.getLogger(__name__)


@dataclass
class VerifyReport:
    image: str
    checks: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def inspect_entrypoint(image: str) -> list[str]:
    """Entrypoint of image as a list (empty when unset). Raises RuntimeError if docker inspect fails."""
    r = subprocess.run(
        ["docker", "image", "inspect", "--format", "{{json .Config.Entrypoint}}", image],
        capture_output=True,
        text=True,
    )
    if r.returncode != 0:
        msg = f"docker image inspect failed for {image}: {r.stderr.strip()}"
        raise RuntimeError(msg)
    value = json.loads(r.stdout.strip() or "null")
    return list(value or [])


def _normalize(name: str) -> str:
    return str(PurePosixPath("/", name)).lstrip("/")


def list_image_files(image: str) -> set[str]:
    """Paths (no leading slash) in the image filesystem. Raises RuntimeError on docker failure."""
    create = subprocess.run(["docker", "create", image], capture_output=True, text=True)
    if create.returncode != 0 or not create.stdout.strip():
        msg = f"docker create failed for {image}: {create.stderr.strip()}"
        raise RuntimeError(msg)
    container_id = create.stdout.strip()
    try:
        with tempfile.TemporaryDirectory() as tmp:
            tar_path = Path(tmp) / "rootfs.tar"
            export = subprocess.run(
                ["docker", "export", "-o", str(tar_path), container_id],
                capture_output=True,
                text=True,
            )
            if export.returncode != 0:
                msg = f"docker export failed for {image}: {export.stderr.strip()}"
                raise RuntimeError(msg)
            with tarfile.open(tar_path) as tar:
                names = {_normalize(n) for n in tar.getnames()}
    finally:
        subprocess.run(["docker", "rm", container_id], capture_output=True)
    names.discard("")
    return names


def run_image(image: str, args: list[str] | tuple[str, ...]) -> subprocess.CompletedProcess:
    """docker run --rm image *args, capturing output."""
    return subprocess.run(
        ["docker", "run", "--rm", image, *args],
        capture_output=True,
        text=True,
    )


def _contains(files: set[str], path: str) -> bool:
    prefix = path.strip("/")
    return any(f == prefix or f.startswith(prefix + "/") for f in files)


def check_filesystem(
    files: set[str],
    variant: BaseImageVariant,
    config: PackagingConfig,
    report: VerifyReport,
) -> None:
    """Binary present, toolchain and source tree absent, runtime libraries present."""
    artifact = config.artifact_path.lstrip("/")
    if artifact in files:
        report.checks.append(f"binary present at {config.artifact_path}")
    else:
        report.errors.append(f"binary missing at {config.artifact_path}")

    toolchain = get_toolchain(config.toolchain)
    workdir = SOURCE_WORKDIR.format(binary_name=config.binary_name)
    leaked = [m for m in (*toolchain.build_markers, workdir) if _contains(files, m)]
    for marker in leaked:
        report.errors.append(f"build-only path present in runtime image: /{marker.strip('/')}")
    if not leaked:
        report.checks.append("no toolchain or source tree in runtime image")

    basenames = {PurePosixPath(f).name for f in files}
    for pattern in variant.runtime_libraries:
        if fnmatch.filter(basenames, pattern):
            report.checks.append(f"runtime library present: {pattern}")
        else:
            report.errors.append(f"runtime library missing: {pattern}")


def verify_image(
    image: str,
    variant: BaseImageVariant,
    config: PackagingConfig,
    help_args: tuple[str, ...] = ("--help",),
    version_args: tuple[str, ...] = ("--version",),
) -> VerifyReport:
    """Run every image check and collect results. docker failures become report errors."""
    report = VerifyReport(image=image)

    try:
        entrypoint = inspect_entrypoint(image)
    except RuntimeError as e:
        report.errors.append(str(e))
        return report
    if entrypoint == [config.artifact_path]:
        report.checks.append(f"entrypoint is {config.artifact_path}")
    else:
        report.errors.append(f"entrypoint is {entrypoint}, expected [{config.artifact_path!r}]")

    try:
        check_filesystem(list_image_files(image), variant, config, report)
    except (RuntimeError, tarfile.TarError) as e:
        report.errors.append(str(e))

    help_run = run_image(image, help_args)
    if help_run.returncode == 0:
        report.checks.append(f"binary ran: {' '.join(help_args)} exited 0")
    else:
        report.errors.append(f"{' '.join(help_args)} exited {help_run.returncode}")

    version = run_image(image, version_args)
    output = (version.stdout or "").strip() or (version.stderr or "").strip()
    if version.returncode == 0 and output:
        report.checks.append(f"arguments forwarded: {' '.join(version_args)} -> {output.splitlines()[0]}")
    else:
        report.errors.append(
            f"{' '.join(version_args)} did not reach the binary (exit {version.returncode})"
        )
    log.debug("verify %s: %d checks, %d errors", image, len(report.checks), len(report.errors))
    return report


def run(
    image: str,
    variant: BaseImageVariant,
    config: PackagingConfig,
) -> int:
    """CLI entry: verify image and print each check. Returns 0 when all checks pass, else 1."""
    report = verify_image(image, variant, config)
    for check in report.checks:
        print(f"✅ {check}")
    for err in report.errors:
        print(f"❌ {err}", file=sys.stderr)
    if not report.ok:
        return 1
    print(f"🎉 {image} passed all checks")
    return 0
