"""Run the packaging pipeline for one or more variants: builder stage, then runner image, then optional push.

Each run is Building -> Packaged. A failure at any step stops the run with the
failing command's exit status and nothing is tagged for the registry.
"""

from __future__ import annotations

import enum
import logging
import subprocess
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path

from fivem_utility.docker.config import PackagingConfig, image_tag
from fivem_utility.docker.generate_dockerfile import BUILDER_STAGE, default_dockerfile_path, render_dockerfile
from fivem_utility.docker.variants import BaseImageVariant, get_toolchain
from fivem_utility.helpers import registry_owner

log = logging.getLogger(__name__)


class PipelineState(enum.Enum):
    BUILDING = "building"
    PACKAGED = "packaged"
    FAILED = "failed"


@dataclass
class PipelineResult:
    variant: str
    image: str
    state: PipelineState
    returncode: int = 0
    failed_stage: str | None = None

    @property
    def ok(self) -> bool:
        return self.state is PipelineState.PACKAGED


def remote_tag(config: PackagingConfig, variant: BaseImageVariant, owner: str, tag: str | None = None) -> str:
    return f"ghcr.io/{owner}/{image_tag(config, variant, tag)}"


def _builder_cmd(dockerfile: Path, source: Path) -> list[str]:
    return ["docker", "build", "--target", BUILDER_STAGE, "-f", str(dockerfile), str(source)]


def _runner_cmd(dockerfile: Path, source: Path, tags: list[str]) -> list[str]:
    return [
        "docker",
        "build",
        "-f",
        str(dockerfile),
        *[x for t in tags for x in ("-t", t)],
        str(source),
    ]


def build_image(
    config: PackagingConfig,
    variant: BaseImageVariant,
    project_root: Path,
    tag: str | None = None,
    push: bool = False,
    dry_run: bool = False,
) -> PipelineResult:
    """Build the builder stage, then the runner image for variant; push when asked. Never raises for docker failures."""
    local = image_tag(config, variant, tag)
    result = PipelineResult(variant=variant.name, image=local, state=PipelineState.BUILDING)

    def fail(stage: str, returncode: int) -> PipelineResult:
        result.state = PipelineState.FAILED
        result.failed_stage = stage
        result.returncode = returncode or 1
        return result

    toolchain = get_toolchain(config.toolchain)
    source = config.source_path(project_root)
    if not source.is_dir():
        print(f"❌ Source tree not found: {source}", file=sys.stderr)
        return fail("build", 1)
    if not (source / toolchain.manifest).is_file():
        print(f"❌ {toolchain.manifest} not found in {source}", file=sys.stderr)
        return fail("build", 1)

    owner = registry_owner()
    if push and owner is None:
        print("❌ For --push, set GHCR_OWNER or GITHUB_REPOSITORY_OWNER", file=sys.stderr)
        return fail("package", 1)
    tags = [local]
    if push:
        tags.append(remote_tag(config, variant, owner, tag))

    content = render_dockerfile(variant, config, toolchain)

    if dry_run:
        # a real run uses a temp file with this same content
        df = default_dockerfile_path(project_root, variant.name)
        print(f"[dry-run] Dockerfile: {df} (as written by `fivem-utility docker generate-dockerfile`)")
        print(f"[dry-run] would: {' '.join(_builder_cmd(df, source))}")
        print(f"[dry-run] would: {' '.join(_runner_cmd(df, source, tags))}")
        if push:
            print(f"[dry-run] would: docker push {tags[-1]}")
        result.state = PipelineState.PACKAGED
        return result

    with tempfile.NamedTemporaryFile(
        mode="w", suffix=".Dockerfile", delete=False, dir=str(project_root)
    ) as tmp_fd:
        tmp_fd.write(content)
        dockerfile_path = Path(tmp_fd.name)

    try:
        print(f"🔨 [{variant.name}] Building {BUILDER_STAGE} stage from {variant.builder_image}...")
        build = subprocess.run(_builder_cmd(dockerfile_path, source), cwd=str(project_root))
        if build.returncode != 0:
            print(f"❌ [{variant.name}] Build stage failed (exit {build.returncode})", file=sys.stderr)
            return fail("build", build.returncode)

        print(f"📦 [{variant.name}] Packaging {config.binary_name} onto {variant.runtime_image}...")
        package = subprocess.run(
            _runner_cmd(dockerfile_path, source, tags), cwd=str(project_root)
        )
        if package.returncode != 0:
            print(f"❌ [{variant.name}] Runtime stage failed (exit {package.returncode})", file=sys.stderr)
            return fail("package", package.returncode)
    finally:
        dockerfile_path.unlink(missing_ok=True)

    result.state = PipelineState.PACKAGED
    log.debug("variant %s packaged as %s", variant.name, ", ".join(tags))

    if push:
        pushed = subprocess.run(["docker", "push", tags[-1]], cwd=str(project_root))
        if pushed.returncode != 0:
            print(f"❌ [{variant.name}] Push failed: {tags[-1]}", file=sys.stderr)
            return fail("package", pushed.returncode)
        print(f"✅ [{variant.name}] Pushed: {tags[-1]}")

    print(f"✅ [{variant.name}] Image ready: {local}")
    return result


def build_all(
    config: PackagingConfig,
    variants: list[BaseImageVariant],
    project_root: Path,
    tag: str | None = None,
    push: bool = False,
    dry_run: bool = False,
) -> list[PipelineResult]:
    """Build variants one after another; stop at the first failure. Returns the results so far."""
    results: list[PipelineResult] = []
    for variant in variants:
        res = build_image(
            config,
            variant,
            project_root,
            tag=tag if tag is None or len(variants) == 1 else f"{tag}-{variant.name}",
            push=push,
            dry_run=dry_run,
        )
        results.append(res)
        if not res.ok:
            break
    return results


def run(
    config: PackagingConfig,
    variants: list[BaseImageVariant],
    project_root: Path,
    tag: str | None = None,
    push: bool = False,
    dry_run: bool = False,
) -> int:
    """CLI entry: build variants. Returns 0, or the exit status of the first failing step."""
    results = build_all(config, variants, project_root, tag=tag, push=push, dry_run=dry_run)
    for res in results:
        if not res.ok:
            return res.returncode
    if len(results) > 1:
        print(f"🎉 Built {len(results)} variants: {', '.join(r.image for r in results)}")
    return 0
