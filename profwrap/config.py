"""Configuration loading for profwrap (.profwrap.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".profwrap.yml"

DEFAULT_SYMBOL = "withProfiler"
DEFAULT_MAX_FILE_BYTES = 1024 * 1024
DEFAULT_MAX_DEPTH = 32
DEFAULT_EXTENSIONS = (".tsx", ".jsx", ".ts", ".js")
DEFAULT_COMPONENT_HELPERS = ("memo", "forwardRef", "lazy")
DEFAULT_BASE_CLASSES = ("Component", "PureComponent")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class InstrumentationConfig:
    """Which wrapper to apply and where it is imported from."""

    symbol: str = DEFAULT_SYMBOL
    helper: Optional[Path] = None
    module: Optional[str] = None


@dataclass
class DetectionConfig:
    """Component classification knobs."""

    max_file_bytes: int = DEFAULT_MAX_FILE_BYTES
    component_helpers: List[str] = field(default_factory=lambda: list(DEFAULT_COMPONENT_HELPERS))
    base_classes: List[str] = field(default_factory=lambda: list(DEFAULT_BASE_CLASSES))


@dataclass
class ScanConfig:
    """Directory traversal settings."""

    max_depth: int = DEFAULT_MAX_DEPTH
    extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    exclude_paths: List[str] = field(default_factory=list)


@dataclass
class PrinterConfig:
    """Formatting of generated code."""

    quote_style: str = "single"

    @property
    def quote(self) -> str:
        return '"' if self.quote_style == "double" else "'"


@dataclass
class ProfwrapConfig:
    """Represents the settings defined in .profwrap.yml."""

    root: Path
    instrumentation: InstrumentationConfig = field(default_factory=InstrumentationConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    scan: ScanConfig = field(default_factory=ScanConfig)
    printer: PrinterConfig = field(default_factory=PrinterConfig)


def load_config(config_path: Path) -> ProfwrapConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ProfwrapConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    instrumentation = InstrumentationConfig()
    instrumentation_data = _as_dict(data.get("instrumentation"))
    if instrumentation_data:
        symbol = _as_str(instrumentation_data.get("symbol"))
        if symbol is not None:
            if not symbol.isidentifier():
                raise ConfigError(f"instrumentation.symbol is not a valid identifier: {symbol!r}")
            instrumentation.symbol = symbol
        helper = _as_str(instrumentation_data.get("helper"))
        instrumentation.helper = root / helper if helper else None
        instrumentation.module = _as_str(instrumentation_data.get("module"))

    detection = DetectionConfig()
    detection_data = _as_dict(data.get("detection"))
    if detection_data:
        max_bytes = _as_int(detection_data.get("max_file_bytes"))
        if max_bytes is not None:
            if max_bytes <= 0:
                raise ConfigError("detection.max_file_bytes must be positive")
            detection.max_file_bytes = max_bytes
        if "component_helpers" in detection_data:
            detection.component_helpers = _as_str_list(detection_data.get("component_helpers"))
        if "base_classes" in detection_data:
            detection.base_classes = _as_str_list(detection_data.get("base_classes"))

    scan = ScanConfig()
    scan_data = _as_dict(data.get("scan"))
    if scan_data:
        max_depth = _as_int(scan_data.get("max_depth"))
        if max_depth is not None:
            scan.max_depth = max_depth
        extensions = _as_str_list(scan_data.get("extensions"))
        if extensions:
            scan.extensions = [_normalise_extension(ext) for ext in extensions]
        scan.exclude_paths = _as_str_list(scan_data.get("exclude_paths"))

    printer = PrinterConfig()
    printer_data = _as_dict(data.get("printer"))
    if printer_data:
        style = _as_str(printer_data.get("quote_style"))
        if style is not None:
            if style not in {"single", "double"}:
                raise ConfigError(f"printer.quote_style must be 'single' or 'double', got {style!r}")
            printer.quote_style = style

    return ProfwrapConfig(
        root=root,
        instrumentation=instrumentation,
        detection=detection,
        scan=scan,
        printer=printer,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _normalise_extension(value: str) -> str:
    value = value.strip().lower()
    return value if value.startswith(".") else f".{value}"


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DetectionConfig",
    "InstrumentationConfig",
    "PrinterConfig",
    "ProfwrapConfig",
    "ScanConfig",
    "load_config",
]
