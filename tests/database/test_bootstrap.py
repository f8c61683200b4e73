from __future__ import annotations

from pathlib import Path

from src.employee_portal.employee_portal.database.bootstrap import _iter_sql_statements

SCHEMA = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


def test_schema_splits_into_one_statement_per_table():
    statements = list(_iter_sql_statements(SCHEMA.read_text(encoding="utf-8")))

    created = [s for s in statements if s.upper().startswith("CREATE TABLE")]
    assert len(created) == 4
    assert all(not s.endswith(";") for s in statements)


def test_semicolon_inside_literal_and_comment_lines():
    sql = "-- setup; ignored\nINSERT INTO t VALUES ('a;b');\nSELECT 1"

    assert list(_iter_sql_statements(sql)) == ["INSERT INTO t VALUES ('a;b')", "SELECT 1"]
