"""
Pattern based extraction of structural hints from source files.

This is a heuristic layer, not a parser: a handful of regular
expressions pick out the declared component or class, local imports,
hooks, props definitions and state-management idioms. Everything is
reachable through :func:`extract_context`, so the regexes can be swapped
for a real parser without touching the callers.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import PurePath
from typing import FrozenSet, Optional, Tuple


SCRIPT_EXTENSIONS = frozenset({".ts", ".tsx", ".js", ".jsx"})
CLASS_EXTENSIONS = frozenset({".java"})
STYLE_EXTENSIONS = frozenset({".css", ".scss", ".sass", ".less"})

_IMPORT_RE = re.compile(r"""import\s+(?:{[^}]+}|[\w\s,*]+)\s+from\s+['"]([^'"]+)['"]""")

# Tried in order; the first match names the component.
_COMPONENT_PATTERNS = (
    re.compile(r"export\s+(?:default\s+)?function\s+(\w+)"),
    re.compile(r"export\s+(?:default\s+)?const\s+(\w+)\s*[:=]\s*(?:\([^)]*\)|[^=(])*=>"),
    re.compile(r"const\s+(\w+)\s*[:=]\s*(?:\([^)]*\)|[^=(])*=>[^;]+export\s+default\s+\1"),
    re.compile(r"class\s+(\w+)\s+extends\s+(?:React\.)?Component"),
)

_PROPS_PATTERNS = (
    re.compile(r"interface\s+(\w*Props)\s*{([^}]+)}"),
    re.compile(r"type\s+(\w*Props)\s*=\s*{([^}]+)}"),
)

_HOOK_RE = re.compile(r"use[A-Z]\w*")

STATE_MANAGEMENT_PATTERNS = {
    "redux": re.compile(r"useSelector|useDispatch|connect\("),
    "zustand": re.compile(r"create\(|useStore"),
    "mobx": re.compile(r"observer|observable|makeObservable"),
    "context": re.compile(r"useContext|createContext"),
    "recoil": re.compile(r"useRecoilState|useRecoilValue|atom\("),
}

_CLASS_DECL_RE = re.compile(r"(?:public\s+)?(?:class|interface|enum)\s+(\w+)")
_ENDPOINT_RE = re.compile(r"@(?:Get|Post|Put|Delete|Patch|Request)Mapping\s*\([^)]*\)")
FRAMEWORK_ANNOTATIONS = (
    "@RestController",
    "@Controller",
    "@Service",
    "@Repository",
    "@Component",
    "@Configuration",
    "@Entity",
    "@Table",
)


@dataclass(frozen=True)
class Definition:
    """A structural definition block such as a ``ButtonProps`` interface."""

    name: str
    text: str


@dataclass(frozen=True)
class FileContext:
    """Structural hints gathered for one changed file.

    Attributes
    ----------
    file : str
        Path of the file as it appears in the diff.
    kind : str
        ``"script"`` or ``"class"``.
    symbol_name : str, optional
        Declared component or class name.
    local_imports : Tuple[str, ...]
        Relative import paths, in source order.
    usage_markers : Tuple[str, ...]
        Names of reusable logic units the file uses (hooks), deduplicated.
    state_management : FrozenSet[str]
        State-management idioms detected in the file.
    definition : Definition, optional
        The props definition block, when present.
    imported_by : Tuple[str, ...]
        Project files importing this one, filled in by the gatherer.
    annotations : Tuple[str, ...]
        Framework annotations present in a class-style source.
    endpoint_count : int
        Number of request-mapping endpoints in a class-style source.
    """

    file: str
    kind: str
    symbol_name: Optional[str] = None
    local_imports: Tuple[str, ...] = ()
    usage_markers: Tuple[str, ...] = ()
    state_management: FrozenSet[str] = frozenset()
    definition: Optional[Definition] = None
    imported_by: Tuple[str, ...] = ()
    annotations: Tuple[str, ...] = ()
    endpoint_count: int = 0

    def summary_lines(self) -> Tuple[str, ...]:
        """Render the findings as ``Label: value`` lines."""
        if self.kind == "class":
            lines = []
            if self.symbol_name:
                lines.append(f"Class/Interface: {self.symbol_name}")
            if self.annotations:
                lines.append(f"Spring annotations: {', '.join(self.annotations)}")
            if self.endpoint_count:
                lines.append(f"REST endpoints: {self.endpoint_count} defined")
            return tuple(lines)

        lines = []
        if self.symbol_name:
            lines.append(f"Component: {self.symbol_name}")
        if self.imported_by:
            names = ", ".join(PurePath(path).name for path in self.imported_by)
            lines.append(f"Used by: {names}")
        if self.local_imports:
            lines.append(f"Local imports: {', '.join(self.local_imports)}")
        if self.usage_markers:
            lines.append(f"Hooks: {', '.join(self.usage_markers)}")
        if self.definition:
            lines.append(f"Props interface: {self.definition.name}")
        if self.state_management:
            lines.append(f"State management: {', '.join(sorted(self.state_management))}")
        return tuple(lines)


def has_extension(file_path: str, extensions: FrozenSet[str]) -> bool:
    return PurePath(file_path).suffix in extensions


def extract_imports(content: str) -> Tuple[str, ...]:
    """Return every ``import ... from '<path>'`` target, in order."""
    return tuple(match.group(1) for match in _IMPORT_RE.finditer(content))


def extract_component_name(content: str, file_path: str) -> str:
    """Return the declared component name, or the file's base name."""
    for pattern in _COMPONENT_PATTERNS:
        match = pattern.search(content)
        if match:
            return match.group(1)
    return PurePath(file_path).stem


def extract_props_definition(content: str) -> Optional[Definition]:
    for pattern in _PROPS_PATTERNS:
        match = pattern.search(content)
        if match:
            return Definition(name=match.group(1), text=match.group(0))
    return None


def extract_hooks(content: str) -> Tuple[str, ...]:
    """Return the distinct hook names used, in order of first appearance."""
    return tuple(dict.fromkeys(_HOOK_RE.findall(content)))


def detect_state_management(content: str) -> FrozenSet[str]:
    """Return the names of all state-management idioms found in ``content``."""
    return frozenset(
        name for name, pattern in STATE_MANAGEMENT_PATTERNS.items() if pattern.search(content)
    )


def _extract_script_context(file_path: str, content: str) -> FileContext:
    return FileContext(
        file=file_path,
        kind="script",
        symbol_name=extract_component_name(content, file_path),
        local_imports=tuple(imp for imp in extract_imports(content) if imp.startswith(".")),
        usage_markers=extract_hooks(content),
        state_management=detect_state_management(content),
        definition=extract_props_definition(content),
    )


def _extract_class_context(file_path: str, content: str) -> FileContext:
    match = _CLASS_DECL_RE.search(content)
    return FileContext(
        file=file_path,
        kind="class",
        symbol_name=match.group(1) if match else None,
        annotations=tuple(ann for ann in FRAMEWORK_ANNOTATIONS if ann in content),
        endpoint_count=len(_ENDPOINT_RE.findall(content)),
    )


def extract_context(file_path: str, content: str) -> Optional[FileContext]:
    """Extract a :class:`FileContext` for ``file_path``.

    Returns ``None`` for file types without an extractor.
    """
    if has_extension(file_path, SCRIPT_EXTENSIONS):
        return _extract_script_context(file_path, content)
    if has_extension(file_path, CLASS_EXTENSIONS):
        return _extract_class_context(file_path, content)
    return None
