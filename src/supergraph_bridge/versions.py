"""Composition versions and the artifact each one runs."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Version:
    name: str
    artifact: str
    description: str


VERSIONS: tuple[Version, ...] = (
    Version(
        name="1",
        artifact="supergraph_bridge.artifacts.fed1",
        description="single-schema merge, errors only",
    ),
    Version(
        name="2",
        artifact="supergraph_bridge.artifacts.fed2",
        description="merge with composition hints",
    ),
)

_VERSIONS_BY_NAME = {version.name: version for version in VERSIONS}

_VERSION_ALIASES = {
    "1.0": "1",
    "1.1": "1",
    "fed1": "1",
    "2.0": "2",
    "2.1": "2",
    "2.2": "2",
    "2.3": "2",
    "fed2": "2",
    "latest": "2",
}


def normalize_version(version: str) -> str:
    normalized = version.strip().lower()
    if normalized[:1] == "v" and normalized[1:2].isdigit():
        normalized = normalized[1:]
    resolved = _VERSION_ALIASES.get(normalized, normalized)
    if resolved not in _VERSIONS_BY_NAME:
        supported = sorted({*_VERSIONS_BY_NAME, *_VERSION_ALIASES})
        raise ValueError(f"Unsupported composition version '{version}'. Supported: {supported}")
    return resolved


def find_version(version: str) -> Version:
    return _VERSIONS_BY_NAME[normalize_version(version)]
