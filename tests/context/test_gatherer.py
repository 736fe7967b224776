from pathlib import Path
from unittest.mock import patch

from gitp.context import gatherer
from gitp.context.gatherer import (
    MAX_CONTEXT_SIZE,
    TRIM_MARKER,
    gather_smart_context,
    truncate_context,
)
from gitp.diff.diff_parser import extract_changed_files


def _write(root: Path, relative: str, content: str) -> None:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)


def test_button_component_context(tmp_path):
    _write(tmp_path, "src/Button.tsx", "export function Button(props) { return null; }")
    diff = "diff --git a/src/Button.tsx b/src/Button.tsx\n+export function Button(props)\n"

    context = gather_smart_context(diff, ["src/Button.tsx"], root=tmp_path)

    assert "### Context for Button.tsx:" in context
    assert "Component: Button" in context


def test_component_below_lib_directory(tmp_path):
    _write(tmp_path, "lib/Button.tsx", "export function Button() {}")
    diff = "diff --git a/lib/Button.tsx b/lib/Button.tsx\n+export function Button() {}\n"

    context = gather_smart_context(diff, extract_changed_files(diff), root=tmp_path)

    assert "### Context for Button.tsx:" in context
    assert "Component: Button" in context


def test_used_by_and_style_association(tmp_path):
    _write(tmp_path, "src/Card.jsx", "import './Card.css';\nexport const Card = () => null;")
    _write(tmp_path, "src/List.jsx", "import Card from './Card';\nexport function List() {}")
    _write(tmp_path, "src/Card.css", ".card {}")

    context = gather_smart_context("", ["src/Card.jsx", "src/Card.css"], root=tmp_path)

    assert "Used by: List.jsx" in context
    assert "### Style context:\nCard.css belongs to Card.jsx" in context


def test_missing_files_are_skipped(tmp_path):
    _write(tmp_path, "src/Here.ts", "export function Here() {}")

    context = gather_smart_context("", ["src/Gone.ts", "src/Here.ts"], root=tmp_path)

    assert "Gone.ts" not in context
    assert "Component: Here" in context


def test_unexpected_errors_become_warnings(tmp_path):
    with patch.object(gatherer, "build_file_context", side_effect=RuntimeError("boom")):
        with patch.object(gatherer.logger, "warning") as warning:
            context = gather_smart_context("", ["src/A.ts"], root=tmp_path)
    assert context == ""
    warning.assert_called_once()


def test_truncation_bound():
    text = "x" * (MAX_CONTEXT_SIZE + 1234)
    trimmed = truncate_context(text)
    assert len(trimmed) <= MAX_CONTEXT_SIZE + len(TRIM_MARKER)
    assert trimmed.endswith("(context trimmed)")
    assert truncate_context("short") == "short"


def test_truncation_keeps_multibyte_characters_whole():
    text = "é" * (MAX_CONTEXT_SIZE + 10)
    trimmed = truncate_context(text)
    assert trimmed == "é" * MAX_CONTEXT_SIZE + TRIM_MARKER


def test_large_context_is_trimmed(tmp_path):
    hooks = " ".join(f"useHook{index}()" for index in range(6000))
    for index in range(3):
        _write(tmp_path, f"src/Big{index}.ts", f"export function Big{index}() {{ {hooks} }}")
    files = [f"src/Big{index}.ts" for index in range(3)]

    context = gather_smart_context("", files, root=tmp_path)

    assert len(context) <= MAX_CONTEXT_SIZE + len(TRIM_MARKER)
    assert context.endswith(TRIM_MARKER)
