"""Loading of framework plugins from entry points."""

from collections.abc import Mapping, Sequence
from importlib.metadata import EntryPoint, entry_points
from typing import Any

from dotnet_test_bridge.runners.manifest import FrameworkManifest

ENTRY_POINT_GROUP = "dotnet_test_bridge.frameworks"


class FrameworkNotFoundError(Exception):
    """Raised when a framework is not found."""


def _registered() -> Mapping[str, EntryPoint]:
    return {entry.name: entry for entry in entry_points(group=ENTRY_POINT_GROUP)}


def load_framework_manifest(key: str) -> FrameworkManifest[Any]:
    """Load the manifest of one framework, as selected with ``--framework``.

    Raises:
        FrameworkNotFoundError: If no framework is registered under ``key``

    """
    registered = _registered()
    if key not in registered:
        raise FrameworkNotFoundError(
            f"Framework '{key}' not found. Available frameworks: {sorted(registered)}"
        )
    manifest: FrameworkManifest[Any] = registered[key].load()
    return manifest


def load_framework_manifests() -> Sequence[FrameworkManifest[Any]]:
    """Load every registered framework, in classification priority order."""
    manifests: list[FrameworkManifest[Any]] = [
        entry.load() for entry in _registered().values()
    ]
    return sorted(manifests, key=lambda manifest: manifest.convention.priority)
