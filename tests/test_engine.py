"""Tests for the file and project level wrapping pipeline."""

from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest

from profwrap.config import load_config
from profwrap.engine import InstrumentationEngine, SourceIOError
from profwrap.models import WrapRequest

HELPER = "export function instrument(Component, name) { return Component; }\n"
GREETING = "export default function Greeting(){ return <Text>Hi</Text>; }\n"


def _app(repo_builder) -> Path:
    repo_builder.react_native_package()
    repo_builder.write(
        {
            "src/perf/instrument.ts": HELPER,
            "src/Greeting.tsx": GREETING,
            "src/Theme.tsx": "export const Theme = { color: 'red' };\n",
        }
    )
    return repo_builder.path()


def test_wrap_file_writes_wrapped_source(engine, tmp_path: Path) -> None:
    target = tmp_path / "Greeting.tsx"
    target.write_text(GREETING, encoding="utf-8")

    outcome = engine.wrap_file(
        WrapRequest(file_path=target, component_name="Greeting", symbol="instrument", import_module="./x")
    )

    assert outcome.success is True
    assert outcome.changed is True
    assert target.read_text(encoding="utf-8") == (
        "import { instrument } from './x';\n"
        "function Greeting(){ return <Text>Hi</Text>; }\n"
        "export default instrument(Greeting, 'Greeting');\n"
    )
    assert "+export default instrument(Greeting, 'Greeting');" in outcome.diff


def test_wrap_file_keeps_permissions_and_leaves_no_temp_files(engine, tmp_path: Path) -> None:
    target = tmp_path / "Greeting.tsx"
    target.write_text(GREETING, encoding="utf-8")
    os.chmod(target, 0o640)

    engine.wrap_file(WrapRequest(target, "Greeting", "instrument", import_module="./x"))

    assert stat.S_IMODE(target.stat().st_mode) == 0o640
    assert sorted(path.name for path in tmp_path.iterdir()) == ["Greeting.tsx"]


def test_wrap_file_resolves_helper_relative_to_target(engine, tmp_path: Path) -> None:
    target = tmp_path / "src" / "screens" / "Home.tsx"
    target.parent.mkdir(parents=True)
    target.write_text("export const Home = () => <View/>;\n", encoding="utf-8")

    engine.wrap_file(
        WrapRequest(target, "Home", "instrument", helper_path=tmp_path / "src" / "perf" / "instrument.ts")
    )

    assert target.read_text(encoding="utf-8").startswith("import { instrument } from '../perf/instrument';\n")


def test_wrap_file_requires_import_source(engine, tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        engine.wrap_file(WrapRequest(tmp_path / "A.tsx", "A", "instrument"))


def test_wrap_file_missing_file_raises_source_io_error(engine, tmp_path: Path) -> None:
    missing = tmp_path / "Missing.tsx"
    with pytest.raises(SourceIOError) as excinfo:
        engine.wrap_file(WrapRequest(missing, "Missing", "instrument", import_module="./x"))
    assert excinfo.value.path == missing
    assert isinstance(excinfo.value, OSError)


def test_wrap_file_untouched_when_nothing_matches(engine, tmp_path: Path) -> None:
    target = tmp_path / "Greeting.tsx"
    wrapped = "import { instrument } from './x';\nexport default instrument(Greeting, 'Greeting');\n"
    target.write_text(wrapped, encoding="utf-8")
    before = target.stat().st_mtime_ns

    outcome = engine.wrap_file(WrapRequest(target, "Greeting", "instrument", import_module="./x"))

    assert outcome.success is False
    assert outcome.changed is False
    assert outcome.reason == "no-match"
    assert target.read_text(encoding="utf-8") == wrapped
    assert target.stat().st_mtime_ns == before


def test_dry_run_does_not_write(engine, tmp_path: Path) -> None:
    target = tmp_path / "Greeting.tsx"
    target.write_text(GREETING, encoding="utf-8")

    outcome = engine.wrap_file(WrapRequest(target, "Greeting", "instrument", import_module="./x"), dry_run=True)

    assert outcome.success is True
    assert outcome.diff.startswith("--- a/Greeting.tsx\n+++ b/Greeting.tsx\n")
    assert target.read_text(encoding="utf-8") == GREETING


def test_wrap_component_finds_helper(engine, repo_builder) -> None:
    root = _app(repo_builder)

    outcome = engine.wrap_component(root, "src/Greeting.tsx", "Greeting")

    assert outcome.success is True
    assert repo_builder.read("src/Greeting.tsx").startswith("import { instrument } from './perf/instrument';\n")


def test_wrap_component_without_helper(engine, repo_builder) -> None:
    repo_builder.write({"src/Greeting.tsx": GREETING})

    outcome = engine.wrap_component(repo_builder.path(), "src/Greeting.tsx", "Greeting")

    assert outcome.success is False
    assert outcome.reason == "helper-not-found"
    assert repo_builder.read("src/Greeting.tsx") == GREETING


def test_wrap_component_uses_configured_module(repo_builder) -> None:
    repo_builder.write(
        {
            ".profwrap.yml": """
            instrumentation:
              symbol: track
              module: "@app/perf"
            printer:
              quote_style: double
            """,
            "src/Box.tsx": "export const Box = () => <View/>;\n",
        }
    )
    engine = InstrumentationEngine.for_project(repo_builder.path())

    outcome = engine.wrap_component(repo_builder.path(), "src/Box.tsx", "Box")

    assert outcome.success is True
    assert repo_builder.read("src/Box.tsx") == (
        'import { track } from "@app/perf";\nexport const Box = track(() => <View/>, "Box");\n'
    )


def test_wrap_components_reports_batch_counts(engine, repo_builder) -> None:
    root = _app(repo_builder)

    report = engine.wrap_components(
        root,
        [
            "src/Greeting.tsx::Greeting",
            "Greeting",
            "::Orphan",
            "src/styles.css::Styles",
            "src/Theme.tsx::Theme",
        ],
    )

    assert (report.succeeded, report.failed, report.skipped) == (1, 3, 1)
    assert set(report.errors) == {"Greeting", "::Orphan", "src/Theme.tsx::Theme"}
    assert report.errors["src/Theme.tsx::Theme"] == "no-match"
    assert "export default instrument(Greeting, 'Greeting');" in repo_builder.read("src/Greeting.tsx")


def test_wrap_components_uses_file_stem_without_name(engine, repo_builder) -> None:
    root = _app(repo_builder)

    report = engine.wrap_components(root, ["src/Greeting.tsx"])

    assert report.succeeded == 1


def test_wrap_components_locates_moved_file(engine, repo_builder) -> None:
    root = _app(repo_builder)
    repo_builder.write({"src/screens/Profile.tsx": "export function Profile() { return <View/>; }\n"})

    report = engine.wrap_components(root, ["src/Profile.tsx::Profile"])

    assert report.succeeded == 1
    assert repo_builder.read("src/screens/Profile.tsx").endswith(
        "export const Profile = instrument(Profile, 'Profile');\n"
    )


def test_wrap_components_missing_file_without_export(engine, repo_builder) -> None:
    root = _app(repo_builder)

    report = engine.wrap_components(root, ["src/Gone.tsx::Gone"])

    assert report.failed == 1
    assert "Gone" in report.errors["src/Gone.tsx::Gone"]


def test_wrap_components_counts_write_failures(engine, repo_builder, monkeypatch: pytest.MonkeyPatch) -> None:
    root = _app(repo_builder)

    def _refuse(path: Path, text: str) -> None:
        raise SourceIOError(path, "Cannot write source (PermissionError)")

    monkeypatch.setattr(InstrumentationEngine, "write_source", staticmethod(_refuse))

    report = engine.wrap_components(root, ["src/Greeting.tsx::Greeting"])

    assert (report.succeeded, report.failed) == (0, 1)
    assert "PermissionError" in report.errors["src/Greeting.tsx::Greeting"]
    assert repo_builder.read("src/Greeting.tsx") == GREETING


def test_scan_components_returns_relative_paths(repo_builder) -> None:
    repo_builder.write(
        {
            "App.tsx": "export default function App() { return <View />; }\n",
            "src/Row.tsx": "export const Row = () => <Text />;\nexport const rowHeight = 44;\n",
            "src/api.ts": "export function Api() { return fetch('/'); }\n",
            "src/Broken.tsx": "export function Broken() { return <View>; }\n",
        }
    )

    candidates = InstrumentationEngine().scan_components(repo_builder.path())

    assert sorted(candidate.target for candidate in candidates) == [
        "App.tsx::App",
        "src/Broken.tsx::Broken",
        "src/Row.tsx::Row",
    ]


def test_scan_components_skips_oversize_files(repo_builder) -> None:
    repo_builder.write(
        {
            ".profwrap.yml": "detection:\n  max_file_bytes: 64\n",
            "Big.tsx": "export function Big() { return <View />; }\n// " + "x" * 100 + "\n",
            "Small.tsx": "export const Small = () => <View />;\n",
        }
    )
    engine = InstrumentationEngine(config=load_config(repo_builder.path()))

    assert [candidate.name for candidate in engine.scan_components(repo_builder.path())] == ["Small"]


def test_read_source_keeps_line_endings(tmp_path: Path) -> None:
    target = tmp_path / "Win.tsx"
    target.write_bytes(b"export const A = 1;\r\n")

    source = InstrumentationEngine.read_source(target)

    assert source.text == "export const A = 1;\r\n"
    assert source.dialect.markup is True


def test_read_source_rejects_undecodable_bytes(tmp_path: Path) -> None:
    target = tmp_path / "Bad.tsx"
    target.write_bytes(b"\xff\xfe\x00export")

    with pytest.raises(SourceIOError):
        InstrumentationEngine.read_source(target)
