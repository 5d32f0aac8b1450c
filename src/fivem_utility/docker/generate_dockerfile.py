"""Render the two-stage Dockerfile (builder -> runner) for a base image variant."""

from __future__ import annotations

import json
import sys
from pathlib import Path

from fivem_utility.docker.config import PackagingConfig
from fivem_utility.docker.variants import BaseImageVariant, Toolchain, get_toolchain, get_variant

BUILDER_STAGE = "builder"
RUNNER_STAGE = "runner"
SOURCE_WORKDIR = "/usr/src/{binary_name}"


def _install_packages(package_manager: str, packages: tuple[str, ...]) -> list[str]:
    """RUN lines installing packages; the package index never outlives the layer."""
    if not packages:
        return []
    if package_manager == "apk":
        return [f"RUN apk add --no-cache {' '.join(packages)}"]
    pkg_lines = "".join(f"    {p} \\\n" for p in packages)
    return [
        "RUN apt-get update && apt-get install -y --no-install-recommends \\\n"
        f"{pkg_lines}    && rm -rf /var/lib/apt/lists/*"
    ]


def render_dockerfile(
    variant: BaseImageVariant,
    config: PackagingConfig,
    toolchain: Toolchain | None = None,
) -> str:
    """Return the Dockerfile text for variant. Pure: same inputs, same text."""
    tc = toolchain or get_toolchain(config.toolchain)
    workdir = SOURCE_WORKDIR.format(binary_name=config.binary_name)

    lines = [f"FROM {variant.builder_image} AS {BUILDER_STAGE}"]
    lines += _install_packages(variant.package_manager, variant.build_packages)
    lines += [
        f"WORKDIR {workdir}",
        "COPY . .",
        f"RUN {' '.join(tc.install_command)}",
        "",
        f"FROM {variant.runtime_image} AS {RUNNER_STAGE}",
    ]
    lines += _install_packages(variant.package_manager, variant.runtime_packages)
    lines += [
        f"COPY --from={BUILDER_STAGE} {config.build_artifact_path(tc)} {config.artifact_path}",
        f"ENTRYPOINT {json.dumps([config.artifact_path])}",
    ]
    return "\n".join(lines) + "\n"


def default_dockerfile_path(project_root: Path, variant_name: str) -> Path:
    return project_root / "docker" / f"Dockerfile.{variant_name}"


def generate_dockerfile(
    variant_name: str,
    project_root: Path | None = None,
    output_path: Path | None = None,
    config: PackagingConfig | None = None,
) -> Path:
    """
    Write the Dockerfile for variant_name.
    Writes to docker/Dockerfile.{variant} under project_root unless output_path is set.
    Raises KeyError for an unknown variant or toolchain. Returns the output path.
    """
    root = Path(project_root) if project_root is not None else Path.cwd()
    cfg = config or PackagingConfig()
    variant = get_variant(variant_name, cfg.variants)
    out = output_path or default_dockerfile_path(root, variant.name)

    content = render_dockerfile(variant, cfg)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(content)
    print(f"✅ Generated: {out}")
    return out


def run(
    variant_name: str,
    project_root: Path | None = None,
    output_path: Path | None = None,
    config: PackagingConfig | None = None,
) -> int:
    """CLI entry: generate Dockerfile. Returns 0 on success, 1 on error."""
    try:
        generate_dockerfile(
            variant_name,
            project_root=project_root,
            output_path=output_path,
            config=config,
        )
        return 0
    except KeyError as e:
        print(f"❌ {e.args[0]}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"❌ Could not write Dockerfile: {e}", file=sys.stderr)
        return 1
