"""Module specifier computation for the generated wrapper import."""

from __future__ import annotations

import os
from pathlib import Path

_STRIPPED_SUFFIXES = (".tsx", ".ts", ".jsx", ".mjs", ".cjs", ".js")


def resolve_import_path(target_file: str | Path, helper_file: str | Path) -> str:
    """Return the specifier that imports ``helper_file`` from ``target_file``.

    >>> resolve_import_path("/app/src/screens/Home.tsx", "/app/src/utils/withProfiler.tsx")
    '../utils/withProfiler'
    >>> resolve_import_path("/app/src/Home.tsx", "/app/src/withProfiler.ts")
    './withProfiler'
    """
    target_dir = os.path.dirname(os.path.abspath(os.fspath(target_file)))
    helper = os.path.abspath(os.fspath(helper_file))
    relative = os.path.relpath(helper, target_dir).replace(os.sep, "/")
    for suffix in _STRIPPED_SUFFIXES:
        if relative.lower().endswith(suffix):
            relative = relative[: -len(suffix)]
            break
    if not relative.startswith(("./", "../")):
        relative = f"./{relative}"
    return relative


__all__ = ["resolve_import_path"]
