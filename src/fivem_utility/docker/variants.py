"""Base image variants and toolchains for the two-stage (builder -> runner) image build.

A variant picks the builder image, the runtime image and the system packages each
stage needs. The toolchain says how the builder stage turns the source tree into
the single binary and where that binary lands.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

PACKAGE_MANAGERS = ("apt", "apk")


@dataclass(frozen=True)
class Toolchain:
    name: str
    install_command: tuple[str, ...]
    output_dir: str
    manifest: str
    build_markers: tuple[str, ...] = ()


@dataclass(frozen=True)
class BaseImageVariant:
    name: str
    description: str
    builder_image: str
    runtime_image: str
    package_manager: str = "apt"
    build_packages: tuple[str, ...] = ()
    runtime_packages: tuple[str, ...] = ()
    # globs matched against file names in the final image
    runtime_libraries: tuple[str, ...] = field(default=())


TOOLCHAINS: dict[str, Toolchain] = {
    "cargo": Toolchain(
        name="cargo",
        install_command=("cargo", "install", "--path", "."),
        output_dir="/usr/local/cargo/bin",
        manifest="Cargo.toml",
        build_markers=("usr/local/cargo", "usr/local/rustup"),
    ),
}

# Only slim installs build packages. The full rust images already ship the
# OpenSSL headers and pkg-config, and distroless cc carries libssl itself.
VARIANTS: dict[str, BaseImageVariant] = {
    "standard": BaseImageVariant(
        name="standard",
        description="Full Debian stable runtime (largest, most system libraries and shell tooling)",
        builder_image="rust:latest",
        runtime_image="debian:stable",
        runtime_packages=("libssl3", "ca-certificates"),
        runtime_libraries=("libssl.so*",),
    ),
    "slim": BaseImageVariant(
        name="slim",
        description="Debian stable-slim runtime; builds against OpenSSL (libssl-dev, pkg-config)",
        builder_image="rust:slim",
        runtime_image="debian:stable-slim",
        build_packages=("libssl-dev", "pkg-config"),
        runtime_packages=("libssl3", "ca-certificates"),
        runtime_libraries=("libssl.so*",),
    ),
    "pinned": BaseImageVariant(
        name="pinned",
        description="Debian bookworm-slim runtime pinned to a fixed release",
        builder_image="rust:1-bookworm",
        runtime_image="debian:bookworm-slim",
        runtime_packages=("libssl3", "ca-certificates"),
        runtime_libraries=("libssl.so*",),
    ),
    "distroless": BaseImageVariant(
        name="distroless",
        description="Distroless cc runtime (smallest; glibc and OpenSSL, no shell)",
        builder_image="rust:1-bookworm",
        runtime_image="gcr.io/distroless/cc-debian12",
        runtime_libraries=("libssl.so*",),
    ),
}

_VARIANT_KEYS = {
    "description",
    "builder_image",
    "runtime_image",
    "package_manager",
    "build_packages",
    "runtime_packages",
    "runtime_libraries",
}


def get_toolchain(name: str) -> Toolchain:
    """Return a known toolchain. Raises KeyError listing the known names."""
    try:
        return TOOLCHAINS[name]
    except KeyError:
        msg = f"Unknown toolchain: {name}. Known: {', '.join(sorted(TOOLCHAINS))}"
        raise KeyError(msg) from None


def list_variants(extra: dict[str, BaseImageVariant] | None = None) -> list[BaseImageVariant]:
    """Built-in variants merged with extra (extra wins on name clash), in definition order."""
    merged = dict(VARIANTS)
    if extra:
        merged.update(extra)
    return list(merged.values())


def get_variant(name: str, extra: dict[str, BaseImageVariant] | None = None) -> BaseImageVariant:
    """Look up a variant by name in extra, then the built-ins. Raises KeyError listing the known names."""
    if extra and name in extra:
        return extra[name]
    if name in VARIANTS:
        return VARIANTS[name]
    known = sorted({v.name for v in list_variants(extra)})
    msg = f"Unknown variant: {name}. Known: {', '.join(known)}"
    raise KeyError(msg)


def _as_tuple(key: str, value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, (list, tuple)):
        msg = f"{key} must be a list of strings"
        raise ValueError(msg)
    return tuple(str(v) for v in value)


def variant_from_mapping(
    name: str,
    data: dict[str, Any],
    base: BaseImageVariant | None = None,
) -> BaseImageVariant:
    """Build a variant from config data, overriding base (or a built-in of the same name) when given.

    A new variant (no base) must set builder_image and runtime_image.
    A non-mapping data, unknown keys, missing images or an unsupported package
    manager raise ValueError.
    """
    if not isinstance(data, dict):
        msg = f"Variant {name} must be a mapping of settings, got {type(data).__name__}"
        raise ValueError(msg)
    unknown = set(data) - _VARIANT_KEYS
    if unknown:
        msg = f"Unknown keys for variant {name}: {', '.join(sorted(unknown))}"
        raise ValueError(msg)
    if base is None:
        base = VARIANTS.get(name)

    changes: dict[str, Any] = {}
    for key, value in data.items():
        if key in ("build_packages", "runtime_packages", "runtime_libraries"):
            changes[key] = _as_tuple(key, value)
        else:
            changes[key] = str(value)

    if base is None:
        for required in ("builder_image", "runtime_image"):
            if required not in changes:
                msg = f"Variant {name} must set {required}"
                raise ValueError(msg)
        variant = BaseImageVariant(
            name=name,
            description=changes.pop("description", ""),
            builder_image=changes.pop("builder_image"),
            runtime_image=changes.pop("runtime_image"),
        )
        variant = replace(variant, **changes)
    else:
        variant = replace(base, name=name, **changes)

    if variant.package_manager not in PACKAGE_MANAGERS:
        msg = f"Variant {name}: package_manager must be one of {', '.join(PACKAGE_MANAGERS)}"
        raise ValueError(msg)
    return variant
