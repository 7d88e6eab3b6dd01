from __future__ import annotations

from pathlib import Path

import pytest

from profwrap.import_path import resolve_import_path


@pytest.mark.parametrize(
    ("target", "helper", "expected"),
    [
        ("src/screens/Home.tsx", "src/utils/withProfiler.tsx", "../utils/withProfiler"),
        ("src/Home.tsx", "src/withProfiler.ts", "./withProfiler"),
        ("src/Home.tsx", "src/perf/withProfiler.js", "./perf/withProfiler"),
        ("App.tsx", "src/perf/withProfiler.mjs", "./src/perf/withProfiler"),
        ("src/a/b/c/Deep.tsx", "withProfiler.jsx", "../../../../withProfiler"),
        ("src/Home.tsx", "src/perf/profiler.helpers.ts", "./perf/profiler.helpers"),
    ],
)
def test_resolve_import_path(tmp_path: Path, target: str, helper: str, expected: str) -> None:
    assert resolve_import_path(tmp_path / target, tmp_path / helper) == expected


def test_helper_without_known_suffix_is_kept(tmp_path: Path) -> None:
    assert resolve_import_path(tmp_path / "src/Home.tsx", tmp_path / "src/perf/index.vue") == "./perf/index.vue"
