#!/usr/bin/env python
"""Repository code policy for the `cloud_asr` package.

Checks (package sources only, tests are exempt):
- at most 300 code lines per file (barrel `__init__.py` files exempt)
- at most 60 code lines per function
- one top-level non-dataclass class per file
- `__all__`, when present, is a single assignment and the last statement
- no lazy singleton patterns
- no two modules in one directory sharing an underscore prefix
- no imports inside functions or classes (the CLI entry point is exempt)

Blank lines, comment-only lines and docstrings do not count as code lines.
"""

from __future__ import annotations

import ast
import sys
import tokenize
from pathlib import Path
from collections import defaultdict
from collections.abc import Callable

ROOT = Path(__file__).resolve().parents[1]
PACKAGE_DIR = ROOT / "cloud_asr"

FILE_LIMIT = 300
FUNCTION_LIMIT = 60
LOCAL_IMPORT_EXEMPT = {"__main__.py"}
SINGLETON_FN_NAMES = {"get_instance", "reset_instance"}

_FUNCTION_NODES = (ast.FunctionDef, ast.AsyncFunctionDef)


class _Module:
    """Parsed source plus the line numbers that never count as code."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.rel = path.relative_to(ROOT)
        self.source = path.read_text(encoding="utf-8")
        self.lines = self.source.splitlines()
        self.tree = ast.parse(self.source, filename=str(path))
        self.skipped = self._comment_lines() | self._docstring_lines()

    def _comment_lines(self) -> set[int]:
        comments: set[int] = set()
        with self.path.open("rb") as f:
            for tok in tokenize.tokenize(f.readline):
                if tok.type == tokenize.COMMENT:
                    comments.add(tok.start[0])
        return comments

    def _docstring_lines(self) -> set[int]:
        lines: set[int] = set()
        for node in ast.walk(self.tree):
            if not isinstance(node, (ast.Module, ast.ClassDef, ast.FunctionDef, ast.AsyncFunctionDef)):
                continue
            first = node.body[0] if node.body else None
            if isinstance(first, ast.Expr) and isinstance(first.value, ast.Constant):
                if isinstance(first.value.value, str):
                    lines.update(range(first.lineno, first.end_lineno + 1))
        return lines

    def code_lines(self, start: int = 1, end: int | None = None) -> int:
        end = end or len(self.lines)
        return sum(
            1 for i in range(start, end + 1) if i not in self.skipped and self.lines[i - 1].strip()
        )

    def is_barrel_init(self) -> bool:
        if self.path.name != "__init__.py":
            return False
        for node in self.tree.body:
            if isinstance(node, (ast.Import, ast.ImportFrom, ast.Pass)):
                continue
            if isinstance(node, ast.Expr) and isinstance(node.value, ast.Constant):
                continue
            if isinstance(node, ast.Assign) and _assigns_all(node):
                continue
            return False
        return True


def _assigns_all(node: ast.stmt) -> bool:
    if isinstance(node, ast.Assign):
        return any(isinstance(t, ast.Name) and t.id == "__all__" for t in node.targets)
    if isinstance(node, (ast.AnnAssign, ast.AugAssign)):
        return isinstance(node.target, ast.Name) and node.target.id == "__all__"
    return False


def _is_dataclass(node: ast.ClassDef) -> bool:
    for decorator in node.decorator_list:
        target = decorator.func if isinstance(decorator, ast.Call) else decorator
        name = target.attr if isinstance(target, ast.Attribute) else getattr(target, "id", "")
        if name == "dataclass":
            return True
    return False


def check_file_length(module: _Module) -> list[str]:
    if module.is_barrel_init():
        return []
    size = module.code_lines()
    return [f"{module.rel}: {size} code lines (limit {FILE_LIMIT})"] if size > FILE_LIMIT else []


def check_function_length(module: _Module) -> list[str]:
    out: list[str] = []
    for node in ast.walk(module.tree):
        if isinstance(node, _FUNCTION_NODES):
            size = module.code_lines(node.lineno, node.end_lineno)
            if size > FUNCTION_LIMIT:
                out.append(f"{module.rel}:{node.lineno} {node.name} -> {size} code lines (limit {FUNCTION_LIMIT})")
    return out


def check_one_class(module: _Module) -> list[str]:
    classes = [n.name for n in module.tree.body if isinstance(n, ast.ClassDef) and not _is_dataclass(n)]
    return [f"{module.rel}: {len(classes)} classes ({', '.join(classes)})"] if len(classes) > 1 else []


def check_all_at_bottom(module: _Module) -> list[str]:
    body = module.tree.body
    positions = [i for i, node in enumerate(body) if _assigns_all(node)]
    if not positions:
        return []
    if len(positions) > 1 or not isinstance(body[positions[0]], ast.Assign):
        return [f"{module.rel}: `__all__` must be set by exactly one assignment"]
    trailing = body[positions[0] + 1 :]
    return [f"{module.rel}:{node.lineno} statement after `__all__`" for node in trailing]


def check_singletons(module: _Module) -> list[str]:
    out: list[str] = []
    for node in module.tree.body:
        if isinstance(node, ast.ClassDef) and node.name.endswith("Singleton"):
            out.append(f"{module.rel}:{node.lineno} class `{node.name}` uses singleton naming")
        elif isinstance(node, _FUNCTION_NODES) and node.name in SINGLETON_FN_NAMES:
            out.append(f"{module.rel}:{node.lineno} function `{node.name}` suggests a singleton lifecycle")
        elif isinstance(node, ast.Assign) and isinstance(node.value, ast.Constant) and node.value.value is None:
            names = [t.id for t in node.targets if isinstance(t, ast.Name) and t.id.lower().endswith("_instance")]
            if names:
                out.append(f"{module.rel}:{node.lineno} lazy singleton state: {', '.join(names)}")
    return out


def check_local_imports(module: _Module) -> list[str]:
    if module.path.name in LOCAL_IMPORT_EXEMPT:
        return []
    out: list[str] = []
    for scope in ast.walk(module.tree):
        if not isinstance(scope, (ast.ClassDef, *_FUNCTION_NODES)):
            continue
        for node in ast.walk(scope):
            if isinstance(node, (ast.Import, ast.ImportFrom)):
                out.append(f"{module.rel}:{node.lineno} local import")
    return sorted(set(out))


def check_prefix_collisions(package_dir: Path = PACKAGE_DIR) -> list[str]:
    out: list[str] = []
    for directory in sorted({p.parent for p in package_dir.rglob("*.py")}):
        groups: dict[str, list[str]] = defaultdict(list)
        for path in directory.glob("*.py"):
            stem = path.stem
            if stem.startswith("_") or "_" not in stem:
                continue
            groups[stem.split("_")[0]].append(path.name)
        for prefix, names in sorted(groups.items()):
            if len(names) > 1:
                out.append(f"{directory.relative_to(ROOT)}/: prefix '{prefix}' shared by {', '.join(sorted(names))}")
    return out


MODULE_CHECKS: dict[str, Callable[[_Module], list[str]]] = {
    "file-length": check_file_length,
    "function-length": check_function_length,
    "one-class-per-file": check_one_class,
    "all-at-bottom": check_all_at_bottom,
    "no-singletons": check_singletons,
    "no-local-imports": check_local_imports,
}


def collect_violations(package_dir: Path = PACKAGE_DIR) -> dict[str, list[str]]:
    found: dict[str, list[str]] = defaultdict(list)
    for path in sorted(package_dir.rglob("*.py")):
        if "__pycache__" in path.parts:
            continue
        module = _Module(path)
        for name, check in MODULE_CHECKS.items():
            found[name].extend(check(module))
    found["prefix-collisions"].extend(check_prefix_collisions(package_dir))
    return {name: items for name, items in found.items() if items}


def main() -> int:
    violations = collect_violations()
    for name, items in violations.items():
        print(f"{name} violations:", file=sys.stderr)
        for item in items:
            print(f"  {item}", file=sys.stderr)
    return 1 if violations else 0


if __name__ == "__main__":
    raise SystemExit(main())
