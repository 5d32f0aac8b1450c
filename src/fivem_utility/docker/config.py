"""Packaging configuration (binary name, install path, toolchain, variants) from fivem-packaging.yaml."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from fivem_utility.docker.variants import BaseImageVariant, Toolchain, variant_from_mapping
from fivem_utility.helpers import load_yaml_mapping

DEFAULT_CONFIG_FILE = "fivem-packaging.yaml"

DEFAULT_PACKAGING: dict[str, str] = {
    "binary_name": "fivem-utility",
    "image_name": "",
    "install_dir": "/usr/local/bin",
    "source_dir": ".",
    "toolchain": "cargo",
    "default_variant": "slim",
}


@dataclass
class PackagingConfig:
    binary_name: str = DEFAULT_PACKAGING["binary_name"]
    image_name: str = ""
    install_dir: str = DEFAULT_PACKAGING["install_dir"]
    source_dir: str = DEFAULT_PACKAGING["source_dir"]
    toolchain: str = DEFAULT_PACKAGING["toolchain"]
    default_variant: str = DEFAULT_PACKAGING["default_variant"]
    variants: dict[str, BaseImageVariant] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.image_name:
            self.image_name = self.binary_name

    @property
    def artifact_path(self) -> str:
        """Fixed path of the binary in the runtime image; also the image entry point."""
        return f"{self.install_dir.rstrip('/')}/{self.binary_name}"

    def build_artifact_path(self, toolchain: Toolchain) -> str:
        """Where the toolchain's install command leaves the binary in the builder stage."""
        return f"{toolchain.output_dir.rstrip('/')}/{self.binary_name}"

    def source_path(self, project_root: Path) -> Path:
        src = Path(self.source_dir)
        return src if src.is_absolute() else project_root / src


def resolve_packaging(data: dict[str, Any] | None) -> PackagingConfig:
    """Build a PackagingConfig from a raw mapping with defaults filled. Raises ValueError on unknown keys."""
    if data is None:
        return PackagingConfig()
    allowed = set(DEFAULT_PACKAGING) | {"variants"}
    unknown = set(data) - allowed
    if unknown:
        msg = f"Unknown packaging keys: {', '.join(sorted(unknown))}"
        raise ValueError(msg)

    out = dict(DEFAULT_PACKAGING)
    out.update({k: str(v) for k, v in data.items() if k in DEFAULT_PACKAGING})

    raw_variants = data.get("variants") or {}
    if not isinstance(raw_variants, dict):
        msg = "variants must be a mapping of name -> settings"
        raise ValueError(msg)
    variants = {
        str(name): variant_from_mapping(str(name), settings or {})
        for name, settings in raw_variants.items()
    }
    return PackagingConfig(variants=variants, **out)


def load_packaging_config(path: Path | None = None, project_root: Path | None = None) -> PackagingConfig:
    """Load packaging config from path (default: project_root/fivem-packaging.yaml). Missing file -> defaults."""
    if path is None:
        root = project_root if project_root is not None else Path.cwd()
        path = root / DEFAULT_CONFIG_FILE
    if not path.is_file():
        return PackagingConfig()
    return resolve_packaging(load_yaml_mapping(path))


def image_tag(config: PackagingConfig, variant: BaseImageVariant, tag: str | None = None) -> str:
    """Local image reference: {image_name}:{tag}, tag defaulting to the variant name."""
    return f"{config.image_name}:{tag or variant.name}"
