from __future__ import annotations

import ast
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]


def _line_count(path: Path) -> int:
    return len(path.read_text(encoding="utf-8", errors="ignore").splitlines())


def _python_files(root: Path):
    for path in root.rglob("*.py"):
        if "dist" in path.parts or "build" in path.parts:
            continue
        yield path


def _imported_modules(path: Path):
    tree = ast.parse(path.read_text(encoding="utf-8", errors="ignore"))
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                yield alias.name
        elif isinstance(node, ast.ImportFrom):
            yield node.module or ""


def test_no_python_module_exceeds_hard_line_limit():
    offenders = []
    for path in _python_files(ROOT):
        lines = _line_count(path)
        if lines > 1200:
            offenders.append((str(path.relative_to(ROOT)), lines))
    assert not offenders, f"Modules exceed hard 1200-line limit: {offenders}"


def test_core_layer_does_not_import_infra_layer():
    violations: list[tuple[str, str]] = []
    for path in _python_files(ROOT / "core"):
        for name in _imported_modules(path):
            if name == "infra" or name.startswith("infra."):
                violations.append((str(path.relative_to(ROOT)), name))

    assert not violations, f"Core layer imports infra layer: {violations}"


def test_scheduling_engine_does_not_touch_the_database():
    violations: list[tuple[str, str]] = []
    for path in _python_files(ROOT / "core" / "services" / "scheduling"):
        for name in _imported_modules(path):
            if name == "sqlalchemy" or name.startswith("sqlalchemy."):
                violations.append((str(path.relative_to(ROOT)), name))

    assert not violations, f"Scheduling engine imports sqlalchemy: {violations}"


def test_known_large_modules_have_growth_budgets():
    budgets = {
        "core/services/scheduling/validator.py": 340,
        "core/services/scheduling/dates.py": 300,
        "core/services/scheduling/critical_path.py": 220,
        "core/services/work_calendar/engine.py": 240,
        "infra/db/repositories.py": 160,
    }

    breaches = []
    for rel_path, max_lines in budgets.items():
        lines = _line_count(ROOT / rel_path)
        if lines > max_lines:
            breaches.append((rel_path, lines, max_lines))

    assert not breaches, f"Large-module budgets exceeded: {breaches}"
