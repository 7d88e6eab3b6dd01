"""Walks a project tree and lists the component source files worth parsing."""

from __future__ import annotations

import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Sequence

from .config import ConfigError, ProfwrapConfig, ScanConfig, load_config
from .logging import get_logger
from .models import SourceFileMeta, SourceManifest
from .syntax.parser import dialect_for

EXCLUDED_DIRS = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        "node_modules",
        "build",
        "dist",
        "coverage",
        ".next",
        ".expo",
        ".turbo",
        "Pods",
        "__generated__",
    }
)

_EXCLUDED_SUFFIXES = (".d.ts", ".min.js", ".bundle.js")

_logger = get_logger("scanner")


@dataclass
class IgnoreRule:
    """Represents an ignore rule parsed from .gitignore or .profwrap.yml."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            return self.directory_only and rel_path.startswith(f"{self.pattern}/")

        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


def _build_ignore_rule(pattern: str, negate: bool = False) -> IgnoreRule | None:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def _parse_gitignore(path: Path) -> List[IgnoreRule]:
    if not path.exists():
        return []

    rules: List[IgnoreRule] = []
    for raw_line in path.read_text(encoding="utf-8", errors="replace").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = _build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def _should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


def _is_source_file(filename: str, extensions: Sequence[str]) -> bool:
    lower = filename.lower()
    if lower.endswith(_EXCLUDED_SUFFIXES):
        return False
    return any(lower.endswith(ext) for ext in extensions)


class SourceScanner:
    """Produces a manifest of component sources below a root directory.

    Hidden directories, dependency caches and build output are never entered;
    ``.gitignore`` rules and ``scan.exclude_paths`` prune further, and
    ``scan.max_depth`` bounds how deep the walk goes.
    """

    def __init__(self, config: ScanConfig | None = None) -> None:
        self._config = config

    def scan(self, root: str | Path) -> SourceManifest:
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise FileNotFoundError(f"Project path not found: {root}")
        if not root_path.is_dir():
            raise NotADirectoryError(f"Project path is not a directory: {root}")

        settings = self._config or self._load_settings(root_path)
        rules = _parse_gitignore(root_path / ".gitignore")
        rules.extend(
            rule
            for rule in (_build_ignore_rule(pattern) for pattern in settings.exclude_paths)
            if rule is not None
        )

        files: List[SourceFileMeta] = []
        for path in self._iter_files(root_path, rules, settings):
            rel_path = path.relative_to(root_path).as_posix()
            try:
                size = path.stat().st_size
            except OSError as exc:
                _logger.warning("Cannot stat %s: %s", rel_path, exc)
                continue
            files.append(SourceFileMeta(path=rel_path, size=size, dialect=dialect_for(path)))

        files.sort(key=lambda meta: meta.path)
        _logger.debug("Scanner found %d source files under %s", len(files), root_path)
        return SourceManifest(root=str(root_path), files=files)

    @staticmethod
    def _load_settings(root: Path) -> ScanConfig:
        try:
            config: ProfwrapConfig = load_config(root)
        except ConfigError as exc:
            _logger.warning("Ignoring invalid configuration: %s", exc)
            return ScanConfig()
        return config.scan

    @staticmethod
    def _iter_files(root: Path, rules: Sequence[IgnoreRule], settings: ScanConfig) -> Iterator[Path]:
        for dirpath, dirnames, filenames in os.walk(root):
            current_dir = Path(dirpath)
            rel_dir = current_dir.relative_to(root).as_posix() if current_dir != root else ""
            depth = rel_dir.count("/") + 1 if rel_dir else 0

            if depth >= settings.max_depth:
                _logger.debug("Depth limit reached at %s", rel_dir)
                dirnames[:] = []
            else:
                kept = []
                for name in sorted(dirnames):
                    if name in EXCLUDED_DIRS or name.startswith("."):
                        continue
                    rel_path = f"{rel_dir}/{name}" if rel_dir else name
                    if _should_ignore(rel_path, True, rules):
                        continue
                    kept.append(name)
                dirnames[:] = kept

            for filename in filenames:
                if not _is_source_file(filename, settings.extensions):
                    continue
                rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
                if _should_ignore(rel_path, False, rules):
                    continue
                yield current_dir / filename


__all__ = ["EXCLUDED_DIRS", "IgnoreRule", "SourceScanner"]
