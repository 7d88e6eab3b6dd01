"""Locating the React Native app, the wrapper helper and component files."""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Iterator, Optional, Sequence

from .config import DEFAULT_EXTENSIONS
from .logging import get_logger
from .repo_scanner import EXCLUDED_DIRS

# Monorepo layouts probed, in order, for the app package.
PROJECT_CANDIDATES = (
    "",
    "apps/mobile",
    "apps/react-native",
    "packages/mobile",
    "packages/app",
    "mobile",
    "app",
)

_HELPER_SUFFIXES = (".tsx", ".ts", ".jsx", ".js")
_PARENT_SEARCH_LIMIT = 10

_logger = get_logger("project")


def is_react_native_package(directory: Path) -> bool:
    """True when ``directory/package.json`` depends on ``react-native``."""
    manifest = directory / "package.json"
    try:
        payload = json.loads(manifest.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return False
    except (OSError, ValueError) as exc:
        _logger.debug("Unreadable %s: %s", manifest, exc)
        return False
    if not isinstance(payload, dict):
        return False
    for section in ("dependencies", "devDependencies"):
        deps = payload.get(section)
        if isinstance(deps, dict) and "react-native" in deps:
            return True
    return False


def find_project_root(workspace: str | Path) -> Optional[Path]:
    """Return the React Native app directory inside ``workspace``, if any."""
    base = Path(workspace).expanduser().resolve()
    for relative in PROJECT_CANDIDATES:
        candidate = base / relative if relative else base
        if is_react_native_package(candidate):
            return candidate
    return None


def find_helper_file(
    workspace: str | Path, component_file: str | Path, symbol: str
) -> Optional[Path]:
    """Find the file that defines the wrapper helper ``symbol``.

    Walks up from the component to the nearest React Native package, searches
    it recursively, then falls back to the whole workspace.
    """
    workspace_path = Path(workspace).expanduser().resolve()
    component_path = Path(component_file)
    if not component_path.is_absolute():
        component_path = workspace_path / component_path

    search_root = workspace_path
    current = component_path.parent
    for _ in range(_PARENT_SEARCH_LIMIT):
        if is_react_native_package(current):
            search_root = current
            break
        if current.parent == current:
            break
        current = current.parent

    found = _search_helper(search_root, symbol)
    if found is None and search_root != workspace_path:
        found = _search_helper(workspace_path, symbol)
    if found is None:
        _logger.warning("Could not find %s helper under %s", symbol, workspace_path)
    return found


def _search_helper(root: Path, symbol: str) -> Optional[Path]:
    wanted = {f"{symbol}{suffix}".lower() for suffix in _HELPER_SUFFIXES}
    for path in _walk_files(root):
        if path.name.lower() not in wanted:
            continue
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError:
            continue
        if symbol in content:
            return path
    return None


def find_file_by_component(
    component_name: str,
    search_root: str | Path,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
) -> Optional[Path]:
    """Search ``src/`` then the root for a file exporting ``component_name``."""
    root = Path(search_root).expanduser().resolve()
    name = re.escape(component_name)
    patterns = (
        re.compile(rf"export\s+(?:default\s+)?(?:function|const|class)\s+{name}\b"),
        re.compile(rf"export\s+default\s+{name}\b"),
        re.compile(rf"export\s+{{[^}}]*\b{name}\b[^}}]*}}"),
    )
    for base in (root / "src", root):
        if not base.is_dir():
            continue
        for path in _walk_files(base):
            if not path.name.lower().endswith(tuple(extensions)):
                continue
            try:
                content = path.read_text(encoding="utf-8", errors="replace")
            except OSError:
                continue
            if any(pattern.search(content) for pattern in patterns):
                return path
    return None


def _walk_files(root: Path) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(
            name for name in dirnames if name not in EXCLUDED_DIRS and not name.startswith(".")
        )
        current = Path(dirpath)
        for filename in sorted(filenames):
            yield current / filename


__all__ = [
    "PROJECT_CANDIDATES",
    "find_file_by_component",
    "find_helper_file",
    "find_project_root",
    "is_react_native_package",
]
