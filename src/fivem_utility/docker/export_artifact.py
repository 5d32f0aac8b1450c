"""Copy the built binary out of the builder stage to the host, with a sha256 hash file beside it."""

from __future__ import annotations

import hashlib
import subprocess
import sys
import tempfile
from pathlib import Path

from fivem_utility.docker.config import PackagingConfig, image_tag
from fivem_utility.docker.generate_dockerfile import BUILDER_STAGE, render_dockerfile
from fivem_utility.docker.variants import BaseImageVariant, get_toolchain


def builder_tag(config: PackagingConfig, variant: BaseImageVariant) -> str:
    return image_tag(config, variant, f"{variant.name}-{BUILDER_STAGE}")


def export_artifact(
    config: PackagingConfig,
    variant: BaseImageVariant,
    project_root: Path,
    dest_dir: Path,
) -> int:
    """Build the builder stage, docker cp the binary to dest_dir/{variant}/, write {binary}.sha256. Returns 0 or 1."""
    root = project_root
    toolchain = get_toolchain(config.toolchain)
    source = config.source_path(root)
    if not (source / toolchain.manifest).is_file():
        print(f"❌ {toolchain.manifest} not found in {source}", file=sys.stderr)
        return 1

    tag = builder_tag(config, variant)
    with tempfile.NamedTemporaryFile(
        mode="w", suffix=".Dockerfile", delete=False, dir=str(root)
    ) as tmp_fd:
        tmp_fd.write(render_dockerfile(variant, config, toolchain))
        dockerfile_path = Path(tmp_fd.name)
    try:
        build = subprocess.run(
            [
                "docker",
                "build",
                "--target",
                BUILDER_STAGE,
                "-t",
                tag,
                "-f",
                str(dockerfile_path),
                str(source),
            ],
            cwd=str(root),
        )
    finally:
        dockerfile_path.unlink(missing_ok=True)
    if build.returncode != 0:
        print(f"❌ Build stage failed for {variant.name}", file=sys.stderr)
        return 1

    create = subprocess.run(
        ["docker", "create", tag],
        capture_output=True,
        text=True,
        cwd=str(root),
    )
    if create.returncode != 0 or not create.stdout.strip():
        print(f"❌ Could not create container from {tag}", file=sys.stderr)
        return 1
    container_id = create.stdout.strip()

    dest = dest_dir if dest_dir.is_absolute() else root / dest_dir
    dest = dest / variant.name
    dest.mkdir(parents=True, exist_ok=True)
    dest_bin = dest / config.binary_name
    src = config.build_artifact_path(toolchain)
    try:
        cp = subprocess.run(
            ["docker", "cp", f"{container_id}:{src}", str(dest_bin)],
            capture_output=True,
            text=True,
            cwd=str(root),
        )
    finally:
        subprocess.run(["docker", "rm", container_id], capture_output=True, cwd=str(root))

    if cp.returncode != 0 or not dest_bin.is_file():
        print(f"❌ Binary not found in {BUILDER_STAGE} stage: {src}", file=sys.stderr)
        return 1

    dest_bin.chmod(0o755)
    hash_path = dest / f"{config.binary_name}.sha256"
    hash_path.write_text(hashlib.sha256(dest_bin.read_bytes()).hexdigest())
    print(f"✅ {variant.name} binary copied and hash generated: {hash_path}")
    return 0
