"""Architecture guard tests."""

from pathlib import Path

from tools.check_import_boundaries import check_import_boundaries

PACKAGE_ROOT = Path(__file__).resolve().parents[2] / "getback"


def test_import_boundaries_guard():
    violations = check_import_boundaries(PACKAGE_ROOT)
    assert violations == [], "Import boundary violations:\n" + "\n".join(violations)


def test_guard_reports_layer_and_library_violations(tmp_path):
    domain = tmp_path / "getback" / "domain"
    domain.mkdir(parents=True)
    (tmp_path / "getback" / "__init__.py").write_text("", encoding="utf-8")
    (domain / "__init__.py").write_text("", encoding="utf-8")
    (domain / "leaky.py").write_text(
        "from getback.persistence.repository import TripStore\n"
        "from ..api import main\n"
        "import sqlite3\n",
        encoding="utf-8",
    )

    violations = check_import_boundaries(tmp_path / "getback")

    assert len(violations) == 3
    assert any("getback.domain.leaky -> getback.persistence.repository" in v for v in violations)
    assert any("getback.domain.leaky -> getback.api: domain layer" in v for v in violations)
    assert any("sqlite3 is confined to the persistence layer(s)" in v for v in violations)
