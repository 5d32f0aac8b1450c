"""`fivem-utility docker` subcommands: variants, generate-dockerfile, build, export-artifact, verify."""

import sys
from pathlib import Path

from fivem_utility.cli.parse_common import FlagError, parse_flags, pop_switch, resolve_path, wants_help
from fivem_utility.docker.build_image import run as run_build_image
from fivem_utility.docker.config import PackagingConfig, image_tag, load_packaging_config
from fivem_utility.docker.export_artifact import export_artifact
from fivem_utility.docker.generate_dockerfile import run as run_generate_dockerfile
from fivem_utility.docker.variants import BaseImageVariant, get_variant, list_variants
from fivem_utility.docker.verify_image import run as run_verify_image

SUBCOMMANDS = "variants, generate-dockerfile, build, export-artifact, verify"

USAGE = f"""usage: fivem-utility docker <subcommand> [--project-root DIR] [--packaging-config FILE] [--variant NAME|all]

subcommands: {SUBCOMMANDS}
  generate-dockerfile  [--output FILE]
  build                [--tag TAG] [--push] [--dry-run]
  export-artifact      [--dest DIR]
  verify               [--tag TAG] [IMAGE]
"""

COMMON_FLAGS = (
    ("project_root", "--project-root", Path.cwd, resolve_path),
    ("packaging_config", "--packaging-config", None, resolve_path),
    ("variant", "--variant", None, None),
)


def _load_config(opts: dict) -> PackagingConfig:
    try:
        return load_packaging_config(opts["packaging_config"], project_root=opts["project_root"])
    except (OSError, ValueError) as e:
        print(f"❌ Invalid packaging config: {e}", file=sys.stderr)
        sys.exit(1)


def _resolve_variants(name: str | None, config: PackagingConfig) -> list[BaseImageVariant]:
    """--variant all -> every variant; unset -> the configured default."""
    if name == "all":
        return list_variants(config.variants)
    try:
        return [get_variant(name or config.default_variant, config.variants)]
    except KeyError as e:
        print(f"❌ {e.args[0]}", file=sys.stderr)
        sys.exit(1)


def run_docker_argv(argv: list[str] | None = None) -> None:
    """Parse docker subcommand from argv and run. argv defaults to sys.argv[2:] when called from main."""
    if argv is None:
        argv = sys.argv[2:] if len(sys.argv) > 2 else []
    if not argv:
        print("fivem-utility docker: missing subcommand", file=sys.stderr)
        print(f"  {SUBCOMMANDS}", file=sys.stderr)
        sys.exit(1)
    if wants_help(argv):
        print(USAGE, end="")
        sys.exit(0)
    try:
        _dispatch(argv[0], argv[1:])
    except FlagError as e:
        print(f"❌ {e}", file=sys.stderr)
        sys.exit(1)


def _dispatch(cmd: str, argv: list[str]) -> None:
    opts, rest = parse_flags(argv, *COMMON_FLAGS)
    project_root: Path = opts["project_root"]

    if cmd == "variants":
        config = _load_config(opts)
        for v in list_variants(config.variants):
            marker = "*" if v.name == config.default_variant else " "
            print(f"{marker} {v.name:<12} {v.builder_image} -> {v.runtime_image}  {v.description}")
        sys.exit(0)

    if cmd == "generate-dockerfile":
        flags, rest = parse_flags(rest, ("output", "--output", None, resolve_path))
        config = _load_config(opts)
        variants = _resolve_variants(opts["variant"], config)
        if flags["output"] is not None and len(variants) > 1:
            print("❌ --output needs a single --variant", file=sys.stderr)
            sys.exit(1)
        for v in variants:
            rc = run_generate_dockerfile(
                v.name, project_root=project_root, output_path=flags["output"], config=config
            )
            if rc != 0:
                sys.exit(rc)
        sys.exit(0)

    if cmd == "build":
        push, rest = pop_switch(rest, "--push")
        dry_run, rest = pop_switch(rest, "--dry-run")
        flags, rest = parse_flags(rest, ("tag", "--tag", None, None))
        config = _load_config(opts)
        variants = _resolve_variants(opts["variant"], config)
        rc = run_build_image(
            config,
            variants,
            project_root,
            tag=flags["tag"],
            push=push,
            dry_run=dry_run,
        )
        sys.exit(rc)

    if cmd == "export-artifact":
        flags, rest = parse_flags(rest, ("dest", "--dest", Path("build_artifacts"), Path))
        config = _load_config(opts)
        for v in _resolve_variants(opts["variant"], config):
            rc = export_artifact(config, v, project_root, flags["dest"])
            if rc != 0:
                sys.exit(rc)
        sys.exit(0)

    if cmd == "verify":
        flags, rest = parse_flags(rest, ("tag", "--tag", None, None))
        config = _load_config(opts)
        variants = _resolve_variants(opts["variant"], config)
        if rest and len(variants) > 1:
            print("❌ An explicit image needs a single --variant", file=sys.stderr)
            sys.exit(1)
        failed = 0
        for v in variants:
            tag = flags["tag"]
            if tag is not None and len(variants) > 1:
                tag = f"{tag}-{v.name}"
            image = rest[0] if rest else image_tag(config, v, tag)
            failed |= run_verify_image(image, v, config)
        sys.exit(failed)

    print(f"Unknown docker subcommand: {cmd}", file=sys.stderr)
    sys.exit(1)
