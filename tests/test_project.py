"""Tests for app, helper and component file discovery."""

from __future__ import annotations

import json

from profwrap.project import (
    find_file_by_component,
    find_helper_file,
    find_project_root,
    is_react_native_package,
)

HELPER = "export function withProfiler(Component, name) { return Component; }\n"


def test_is_react_native_package(repo_builder) -> None:
    root = repo_builder.path()
    assert is_react_native_package(root) is False

    (root / "package.json").write_text(json.dumps({"devDependencies": {"react-native": "*"}}), encoding="utf-8")
    assert is_react_native_package(root) is True

    (root / "package.json").write_text("{not json", encoding="utf-8")
    assert is_react_native_package(root) is False


def test_find_project_root_probes_monorepo_layouts(repo_builder) -> None:
    repo_builder.write({"package.json": '{"name": "workspace", "private": true}\n'})
    repo_builder.react_native_package("apps/mobile")

    assert find_project_root(repo_builder.path()) == (repo_builder.path() / "apps/mobile").resolve()


def test_find_project_root_prefers_workspace_itself(repo_builder) -> None:
    repo_builder.react_native_package()
    repo_builder.react_native_package("mobile")

    assert find_project_root(repo_builder.path()) == repo_builder.path().resolve()


def test_find_project_root_without_app(repo_builder) -> None:
    assert find_project_root(repo_builder.path()) is None


def test_find_helper_prefers_nearest_app(repo_builder) -> None:
    repo_builder.react_native_package("apps/mobile")
    repo_builder.write(
        {
            "tools/withProfiler.ts": HELPER,
            "apps/mobile/src/perf/WithProfiler.tsx": HELPER,
            "apps/mobile/src/screens/Home.tsx": "export const Home = () => null;\n",
        }
    )
    root = repo_builder.path()

    found = find_helper_file(root, "apps/mobile/src/screens/Home.tsx", "withProfiler")

    assert found == (root / "apps/mobile/src/perf/WithProfiler.tsx").resolve()


def test_find_helper_requires_symbol_in_contents(repo_builder) -> None:
    repo_builder.write(
        {
            "src/withProfiler.ts": "export const unrelated = 1;\n",
            "utils/withProfiler.js": HELPER,
            "src/Home.tsx": "export const Home = () => null;\n",
        }
    )
    root = repo_builder.path()

    assert find_helper_file(root, root / "src/Home.tsx", "withProfiler") == (root / "utils/withProfiler.js").resolve()


def test_find_helper_falls_back_to_workspace(repo_builder) -> None:
    repo_builder.react_native_package("app")
    repo_builder.write({"shared/withProfiler.ts": HELPER, "app/src/Home.tsx": "export {};\n"})
    root = repo_builder.path()

    assert find_helper_file(root, "app/src/Home.tsx", "withProfiler") == (root / "shared/withProfiler.ts").resolve()


def test_find_helper_missing(repo_builder) -> None:
    repo_builder.write({"src/Home.tsx": "export {};\n", "node_modules/x/withProfiler.js": HELPER})

    assert find_helper_file(repo_builder.path(), "src/Home.tsx", "withProfiler") is None


def test_find_file_by_component_searches_src_first(repo_builder) -> None:
    repo_builder.write(
        {
            "legacy/Profile.tsx": "export default function Profile() { return null; }\n",
            "src/screens/ProfileScreen.tsx": "export const Profile = () => null;\n",
            "src/screens/ProfileCard.tsx": "export const ProfileCard = () => null;\n",
        }
    )
    root = repo_builder.path()

    assert find_file_by_component("Profile", root) == (root / "src/screens/ProfileScreen.tsx").resolve()
    assert find_file_by_component("ProfileCard", root) == (root / "src/screens/ProfileCard.tsx").resolve()


def test_find_file_by_component_recognises_export_shapes(repo_builder) -> None:
    repo_builder.write(
        {
            "a/Settings.js": "const Settings = () => null;\nexport default Settings;\n",
            "b/Badge.jsx": "const Badge = () => null;\nexport { Badge, other };\n",
            "c/notes.md": "export const Missing = 1;\n",
        }
    )
    root = repo_builder.path()

    assert find_file_by_component("Settings", root) == (root / "a/Settings.js").resolve()
    assert find_file_by_component("Badge", root) == (root / "b/Badge.jsx").resolve()
    assert find_file_by_component("Missing", root) is None
