"""Safety tests: module import boundary enforcement.

State, rendering and directory code must stay importable and testable
without Textual; the directory layer must not reach up into the UI.
"""

from __future__ import annotations

import ast
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src" / "proxyswitch"


def _collect_imports(filepath: Path) -> list[str]:
    """Return all import source strings from a Python file."""
    tree = ast.parse(filepath.read_text(), filename=str(filepath))

    imports: list[str] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.ImportFrom) and node.module:
            imports.append(node.module)
        elif isinstance(node, ast.Import):
            for alias in node.names:
                imports.append(alias.name)
    return imports


def _violations(files: list[Path], prefixes: tuple[str, ...]) -> list[str]:
    found: list[str] = []
    for pyfile in files:
        for imp in _collect_imports(pyfile):
            if imp.startswith(prefixes):
                found.append(f"{pyfile.relative_to(ROOT)}: {imp}")
    return found


def test_state_and_render_do_not_import_textual() -> None:
    files = [SRC / "ui" / "state.py", SRC / "ui" / "render.py", SRC / "ui" / "engine.py"]
    violations = _violations(files, ("textual",))
    assert not violations, "state/render/engine must not import textual:\n" + "\n".join(
        f"  - {v}" for v in violations
    )


def test_directory_independent_of_ui() -> None:
    files = list((SRC / "directory").rglob("*.py"))
    assert files
    violations = _violations(files, ("textual", "proxyswitch.ui", "proxyswitch.cli"))
    assert not violations, "directory/ must not import the UI or CLI:\n" + "\n".join(
        f"  - {v}" for v in violations
    )


def test_core_independent_of_ui() -> None:
    files = list((SRC / "core").rglob("*.py"))
    violations = _violations(files, ("textual", "proxyswitch.ui", "proxyswitch.cli"))
    assert not violations, "core/ must not import the UI or CLI:\n" + "\n".join(
        f"  - {v}" for v in violations
    )


def test_cli_imports_textual_app_lazily() -> None:
    """cli/ may only reach the Textual app through a function-level import."""
    tree = ast.parse((SRC / "cli" / "main.py").read_text())
    top_level = [
        node.module
        for node in tree.body
        if isinstance(node, ast.ImportFrom) and node.module is not None
    ]
    assert "proxyswitch.ui.app" not in top_level
    assert not any(m.startswith("textual") for m in top_level)
