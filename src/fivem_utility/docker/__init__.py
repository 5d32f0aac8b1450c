"""Docker packaging: variants, Dockerfile rendering, pipeline build, artifact export, image verification."""

from .build_image import PipelineResult, PipelineState, build_all, build_image
from .build_image import run as run_build_image
from .config import PackagingConfig, image_tag, load_packaging_config
from .export_artifact import export_artifact
from .generate_dockerfile import generate_dockerfile, render_dockerfile
from .generate_dockerfile import run as run_generate_dockerfile
from .variants import BaseImageVariant, Toolchain, get_toolchain, get_variant, list_variants
from .verify_image import VerifyReport, verify_image
from .verify_image import run as run_verify_image

__all__ = [
    "BaseImageVariant",
    "PackagingConfig",
    "PipelineResult",
    "PipelineState",
    "Toolchain",
    "VerifyReport",
    "build_all",
    "build_image",
    "export_artifact",
    "generate_dockerfile",
    "get_toolchain",
    "get_variant",
    "image_tag",
    "list_variants",
    "load_packaging_config",
    "render_dockerfile",
    "run_build_image",
    "run_generate_dockerfile",
    "run_verify_image",
    "verify_image",
]
