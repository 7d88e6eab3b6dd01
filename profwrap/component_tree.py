"""Groups detected components into a directory / file / component tree."""

from __future__ import annotations

from typing import Dict, Iterable, List

from .models import ComponentCandidate, ComponentTreeNode


def build_component_tree(candidates: Iterable[ComponentCandidate]) -> List[ComponentTreeNode]:
    """Return root-level nodes; components are addressed as ``path::Name``.

    Directories sort before files, then everything sorts by name.
    """
    roots: List[ComponentTreeNode] = []
    directories: Dict[str, ComponentTreeNode] = {}
    files: Dict[str, ComponentTreeNode] = {}

    for candidate in candidates:
        if not candidate.path:
            continue
        file_node = files.get(candidate.path)
        if file_node is None:
            parts = candidate.path.split("/")
            siblings = roots
            for index, part in enumerate(parts[:-1]):
                dir_path = "/".join(parts[: index + 1])
                dir_node = directories.get(dir_path)
                if dir_node is None:
                    dir_node = ComponentTreeNode(name=part, path=dir_path, type="directory")
                    directories[dir_path] = dir_node
                    siblings.append(dir_node)
                siblings = dir_node.children
            file_node = ComponentTreeNode(name=parts[-1], path=candidate.path, type="file")
            files[candidate.path] = file_node
            siblings.append(file_node)
        file_node.children.append(
            ComponentTreeNode(name=candidate.name, path=candidate.target, type="component")
        )

    _sort(roots)
    return roots


def _sort(nodes: List[ComponentTreeNode]) -> None:
    nodes.sort(key=lambda node: (node.type != "directory", node.name.lower()))
    for node in nodes:
        if node.type == "directory":
            _sort(node.children)


def render_tree(nodes: Iterable[ComponentTreeNode], indent: str = "") -> List[str]:
    """Render nodes as indented text lines for terminal output."""
    lines: List[str] = []
    for node in nodes:
        label = f"{node.name}/" if node.type == "directory" else node.name
        lines.append(f"{indent}{label}")
        lines.extend(render_tree(node.children, indent + "  "))
    return lines


__all__ = ["build_component_tree", "render_tree"]
