"""Static import boundary guard for the getback package layers.

Two kinds of rule: which internal layers a layer may import, and which
third-party libraries are confined to particular layers (the web framework to
the HTTP edge, the HTTP client to the outbound adapter, sqlite to the stores).
"""

from __future__ import annotations

import argparse
import ast
from dataclasses import dataclass
from pathlib import Path

PACKAGE = "getback"
KNOWN_LAYERS = {
    "api",
    "application",
    "config",
    "domain",
    "infrastructure",
    "persistence",
    "security",
    "shared",
}
FORBIDDEN_IMPORTS = {
    ("domain", "api"): "domain layer must not import api layer",
    ("domain", "application"): "domain layer must not import application layer",
    ("domain", "persistence"): "domain layer must not import persistence layer",
    ("domain", "infrastructure"): "domain layer must not import infrastructure layer",
    ("domain", "config"): "domain layer must not read runtime settings",
    ("persistence", "application"): "stores must not call use-cases",
    ("persistence", "api"): "persistence layer must not import api layer",
    ("infrastructure", "application"): "infrastructure must not call use-cases",
    ("infrastructure", "persistence"): "infrastructure must not reach into stores",
    ("infrastructure", "api"): "infrastructure layer must not import api layer",
    ("application", "api"): "application layer must not import api layer",
    ("shared", "domain"): "shared helpers must stay dependency-free",
    ("shared", "application"): "shared helpers must stay dependency-free",
    ("shared", "persistence"): "shared helpers must stay dependency-free",
}
CONFINED_LIBRARIES = {
    "fastapi": {"api", "security"},
    "starlette": {"api"},
    "uvicorn": {"api"},
    "httpx": {"security"},
    "sqlite3": {"persistence"},
}


@dataclass(frozen=True)
class ImportRecord:
    source_file: Path
    source_module: str
    source_layer: str | None
    target_module: str
    lineno: int

    @property
    def target_layer(self) -> str | None:
        return _layer_from_module(self.target_module)

    @property
    def target_root(self) -> str:
        return self.target_module.split(".", 1)[0]


def _layer_from_module(module_name: str) -> str | None:
    parts = module_name.split(".")
    if len(parts) < 2 or parts[0] != PACKAGE:
        return None
    return parts[1] if parts[1] in KNOWN_LAYERS else None


def _module_name(path: Path, root: Path) -> str:
    parts = list(path.relative_to(root.parent).with_suffix("").parts)
    if parts[-1] == "__init__":
        parts.pop()
    return ".".join(parts)


def _absolute_target(node: ast.ImportFrom, current_module: str, is_package: bool) -> str | None:
    """Resolve ``from . import x`` style imports against the importing module."""
    package = current_module if is_package else current_module.rpartition(".")[0]
    parts = package.split(".")
    if node.level - 1 > len(parts):
        return None
    base = parts[: len(parts) - (node.level - 1)]
    if node.module:
        base.append(node.module)
    return ".".join(part for part in base if part) or None


def _targets(node: ast.AST, current_module: str, is_package: bool) -> list[str]:
    if isinstance(node, ast.Import):
        return [alias.name for alias in node.names]
    if not isinstance(node, ast.ImportFrom):
        return []
    if node.level == 0:
        return [node.module] if node.module else []
    base = _absolute_target(node, current_module, is_package)
    if not base:
        return []
    if node.module:
        return [base]
    return [f"{base}.{alias.name}" for alias in node.names if alias.name != "*"]


def collect_import_records(root: str | Path = PACKAGE) -> list[ImportRecord]:
    root_path = Path(root).resolve()
    records: list[ImportRecord] = []
    for path in sorted(root_path.rglob("*.py")):
        if "__pycache__" in path.parts:
            continue
        tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
        module = _module_name(path, root_path)
        layer = _layer_from_module(module)
        is_package = path.name == "__init__.py"
        for node in ast.walk(tree):
            for target in _targets(node, module, is_package):
                records.append(
                    ImportRecord(
                        source_file=path,
                        source_module=module,
                        source_layer=layer,
                        target_module=target,
                        lineno=getattr(node, "lineno", 1),
                    )
                )
    return records


def _violation(rec: ImportRecord) -> str | None:
    if rec.source_layer is None:
        return None
    allowed = CONFINED_LIBRARIES.get(rec.target_root)
    if allowed is not None and rec.source_layer not in allowed:
        return f"{rec.target_root} is confined to the {', '.join(sorted(allowed))} layer(s)"
    if rec.target_layer is None:
        return None
    return FORBIDDEN_IMPORTS.get((rec.source_layer, rec.target_layer))


def check_import_boundaries(root: str | Path = PACKAGE) -> list[str]:
    violations: list[str] = []
    for rec in collect_import_records(root):
        rule = _violation(rec)
        if rule:
            violations.append(f"{rec.source_file.as_posix()}:{rec.lineno} {rec.source_module} -> {rec.target_module}: {rule}")
    return sorted(set(violations))


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Check getback import boundaries")
    parser.add_argument("--root", default=PACKAGE, help="Package directory to scan")
    args = parser.parse_args(argv)

    violations = check_import_boundaries(args.root)
    if violations:
        print("Import boundary violations:")
        for line in violations:
            print(f"- {line}")
        return 1

    print("Import boundary check passed.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
