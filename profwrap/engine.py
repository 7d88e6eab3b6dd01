"""Detection and wrapping pipelines over files and project trees."""

from __future__ import annotations

import difflib
import os
import stat
import tempfile
from dataclasses import replace
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Set

from .config import DEFAULT_SYMBOL, ProfwrapConfig, load_config
from .import_path import resolve_import_path
from .logging import file_logger, get_logger
from .models import (
    BatchReport,
    ComponentCandidate,
    ImportTarget,
    SourceFile,
    TransformResult,
    WrapOutcome,
    WrapRequest,
    split_target,
)
from .project import find_file_by_component, find_helper_file, find_project_root
from .repo_scanner import SourceScanner
from .strategies import InstrumentationStrategy, build_strategies, select_strategy
from .syntax.parser import SourceParser, dialect_for

DEFAULT_FILE_NAME = "component.tsx"


class SourceIOError(OSError):
    """Raised when a source file cannot be read or written."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{reason}: {path}")
        self.path = path
        self.reason = reason


class InstrumentationEngine:
    """Entry point for detecting components and wrapping them in place.

    Every call parses its input afresh and drops the tree when it returns, so
    files can be processed independently (and in parallel by a caller).
    """

    def __init__(
        self,
        config: ProfwrapConfig | None = None,
        parser: SourceParser | None = None,
        strategies: Optional[Iterable[InstrumentationStrategy]] = None,
        scanner: SourceScanner | None = None,
    ) -> None:
        self.config = config
        max_bytes = config.detection.max_file_bytes if config else None
        self.parser = parser or (SourceParser(max_bytes) if max_bytes else SourceParser())
        self.strategies: List[InstrumentationStrategy] = (
            list(strategies) if strategies is not None else build_strategies(config)
        )
        self.scanner = scanner or SourceScanner(config.scan if config else None)
        self.symbol = config.instrumentation.symbol if config else DEFAULT_SYMBOL
        self.logger = get_logger("engine")

    @classmethod
    def for_project(cls, root: str | Path) -> "InstrumentationEngine":
        """Build an engine configured from ``root/.profwrap.yml``."""
        return cls(config=load_config(Path(root)))

    # Detection

    def candidates(self, source_text: str, file_name: str = DEFAULT_FILE_NAME) -> List[ComponentCandidate]:
        parsed = self.parser.parse(source_text, file_name)
        log = file_logger(self.logger, file_name)
        if parsed.oversize:
            log.info(
                "Skipped: %d bytes exceeds the %d byte ceiling",
                len(parsed.source_bytes),
                self.parser.max_file_bytes,
            )
            return []
        strategy = select_strategy(parsed, self.strategies)
        if strategy.degraded:
            log.warning("Syntax errors found; detection degraded to %s matching", strategy.name)
        return strategy.detect(parsed)

    def detect(self, source_text: str, file_name: str = DEFAULT_FILE_NAME) -> Set[str]:
        """Return the names of exported declarations classified as components."""
        return {candidate.name for candidate in self.candidates(source_text, file_name)}

    def scan_components(self, root: str | Path) -> List[ComponentCandidate]:
        """Detect components in every source file below ``root``.

        Unreadable files are logged and skipped; candidate paths are relative
        to the scanned root.
        """
        manifest = self.scanner.scan(root)
        base = Path(manifest.root)
        found: List[ComponentCandidate] = []
        for meta in manifest.files:
            if meta.size > self.parser.max_file_bytes:
                self.logger.info("Skipped %s: %d bytes exceeds the size ceiling", meta.path, meta.size)
                continue
            try:
                source = self.read_source(base / meta.path)
            except SourceIOError as exc:
                self.logger.warning("%s", exc)
                continue
            for candidate in self.candidates(source.text, meta.path):
                found.append(replace(candidate, path=meta.path))
        self.logger.info("Found %d component(s) in %d file(s)", len(found), len(manifest.files))
        return found

    # Transformation

    def transform(
        self,
        source_text: str,
        component_name: str,
        *,
        import_module: str,
        file_name: str = DEFAULT_FILE_NAME,
        symbol: str | None = None,
    ) -> TransformResult:
        """Wrap ``component_name`` in memory; nothing touches the disk."""
        symbol = symbol or self.symbol
        if not symbol.isidentifier():
            raise ValueError(f"Wrapper symbol is not a valid identifier: {symbol!r}")
        parsed = self.parser.parse(source_text, file_name)
        strategy = select_strategy(parsed, self.strategies)
        if strategy.degraded:
            reason = "file exceeds the size ceiling" if parsed.oversize else "syntax errors found"
            file_logger(self.logger, file_name).warning(
                "%s; transform degraded to %s matching", reason.capitalize(), strategy.name
            )
        return strategy.transform(parsed, component_name, ImportTarget(symbol, import_module))

    def wrap_file(self, request: WrapRequest, *, dry_run: bool = False) -> WrapOutcome:
        """Wrap one component and write the file back if, and only if, it changed."""
        path = Path(request.file_path)
        module = request.import_module
        if module is None:
            if request.helper_path is None:
                raise ValueError("WrapRequest needs an import_module or a helper_path")
            module = resolve_import_path(path, request.helper_path)

        source = self.read_source(path)
        result = self.transform(
            source.text,
            request.component_name,
            import_module=module,
            file_name=path.name,
            symbol=request.symbol,
        )
        if not result.success or result.source is None:
            return WrapOutcome(
                success=False,
                path=path,
                component_name=request.component_name,
                degraded=result.degraded,
                reason=result.reason,
            )

        diff = "".join(
            difflib.unified_diff(
                source.text.splitlines(keepends=True),
                result.source.splitlines(keepends=True),
                fromfile=f"a/{path.name}",
                tofile=f"b/{path.name}",
            )
        )
        if dry_run:
            self.logger.info("Dry-run: %s not written", path)
        else:
            self.write_source(path, result.source)
            self.logger.info("Wrapped %s in %s", request.component_name, path)
        return WrapOutcome(
            success=True,
            path=path,
            component_name=request.component_name,
            changed=True,
            degraded=result.degraded,
            diff=diff,
        )

    def wrap_component(
        self,
        root: str | Path,
        file_path: str | Path,
        component_name: str,
        *,
        helper_path: str | Path | None = None,
        import_module: str | None = None,
        symbol: str | None = None,
        dry_run: bool = False,
    ) -> WrapOutcome:
        """Wrap ``component_name`` in ``file_path`` (relative to ``root`` or absolute)."""
        root_path = Path(root).expanduser().resolve()
        path = Path(file_path)
        if not path.is_absolute():
            path = root_path / path
        symbol = symbol or self.symbol

        if import_module is None and self.config is not None:
            import_module = self.config.instrumentation.module
        helper: Optional[Path] = None
        if import_module is None:
            if helper_path is not None:
                helper = Path(helper_path)
            elif self.config is not None and self.config.instrumentation.helper is not None:
                helper = self.config.instrumentation.helper
            else:
                helper = find_helper_file(root_path, path, symbol)
            if helper is None:
                return WrapOutcome(
                    success=False, path=path, component_name=component_name, reason="helper-not-found"
                )
            if not helper.is_absolute():
                helper = root_path / helper

        request = WrapRequest(
            file_path=path,
            component_name=component_name,
            symbol=symbol,
            import_module=import_module,
            helper_path=helper,
        )
        return self.wrap_file(request, dry_run=dry_run)

    def wrap_components(
        self,
        root: str | Path,
        targets: Sequence[str],
        *,
        helper_path: str | Path | None = None,
        import_module: str | None = None,
        symbol: str | None = None,
        dry_run: bool = False,
    ) -> BatchReport:
        """Wrap many ``path::Name`` targets, continuing past individual failures."""
        root_path = Path(root).expanduser().resolve()
        app_root = find_project_root(root_path) or root_path
        extensions = tuple(self.config.scan.extensions) if self.config else (".tsx", ".jsx", ".ts", ".js")
        report = BatchReport()
        self.logger.info("Wrapping %d component(s)", len(targets))

        for target in targets:
            file_part, name = split_target(target)
            if name is None and "/" not in file_part and "\\" not in file_part:
                self.logger.warning("Target %s has no file path; select it as path::Name", target)
                report.fail(target, "target has no file path")
                continue
            if not file_part.strip():
                report.fail(target, "target has an empty file path")
                continue
            if not file_part.lower().endswith(extensions):
                self.logger.info("Skipping %s: not a component source file", target)
                report.skipped += 1
                continue
            if name is None:
                name = Path(file_part).stem

            path = root_path / file_part
            if not path.is_file():
                self.logger.warning("%s not found; searching for %s under %s", path, name, app_root)
                located = find_file_by_component(name, app_root, extensions)
                if located is None:
                    report.fail(target, f"no file exports {name}")
                    continue
                path = located

            try:
                outcome = self.wrap_component(
                    root_path,
                    path,
                    name,
                    helper_path=helper_path,
                    import_module=import_module,
                    symbol=symbol,
                    dry_run=dry_run,
                )
            except (SourceIOError, ValueError) as exc:
                self.logger.error("Failed to wrap %s: %s", target, exc)
                report.fail(target, str(exc))
                continue
            if not outcome.success:
                self.logger.warning("Could not wrap %s in %s (%s)", name, path, outcome.reason)
                report.errors[target] = outcome.reason or "no-match"
            report.record(outcome)

        self.logger.info(
            "Wrapped %d component(s), %d failed, %d skipped",
            report.succeeded,
            report.failed,
            report.skipped,
        )
        return report

    # File I/O

    @staticmethod
    def read_source(path: Path) -> SourceFile:
        try:
            with open(path, encoding="utf-8", newline="") as handle:
                text = handle.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise SourceIOError(path, f"Cannot read source ({exc.__class__.__name__})") from exc
        return SourceFile(path=path, text=text, dialect=dialect_for(path))

    @staticmethod
    def write_source(path: Path, text: str) -> None:
        """Replace ``path`` atomically: readers see the old or the new file, never a mix."""
        directory = path.parent
        try:
            mode = stat.S_IMODE(os.stat(path).st_mode)
            handle = tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", newline="", dir=directory, prefix=f".{path.name}.", delete=False
            )
        except OSError as exc:
            raise SourceIOError(path, f"Cannot write source ({exc.__class__.__name__})") from exc
        temp_path = Path(handle.name)
        try:
            with handle:
                handle.write(text)
            os.chmod(temp_path, mode)
            os.replace(temp_path, path)
        except OSError as exc:
            temp_path.unlink(missing_ok=True)
            raise SourceIOError(path, f"Cannot write source ({exc.__class__.__name__})") from exc


__all__ = ["InstrumentationEngine", "SourceIOError"]
