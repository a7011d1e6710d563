"""Host device passthrough discovery"""

from __future__ import annotations

import glob
from typing import Iterable

__all__ = ["devicePaths_find", "deviceMappings_build"]


def devicePaths_find(patterns: Iterable[str]) -> list[str]:
    """
    Expand device globs such as /dev/dri/* in pattern order.

    Args:
        patterns: Shell globs for device nodes.

    Returns:
        Sorted, de-duplicated matches per pattern.
    """
    paths: list[str] = []
    for pattern in patterns:
        for path in sorted(glob.glob(pattern)):
            if path not in paths:
                paths.append(path)
    return paths


def deviceMappings_build(paths: Iterable[str], permissions: str = "mrw") -> list[str]:
    """
    Docker device mappings exposing each node at the same path.

    Args:
        paths: Host device nodes.
        permissions: cgroup permissions.

    Returns:
        Mappings in `host:container:perms` form.
    """
    return [f"{path}:{path}:{permissions}" for path in paths]
