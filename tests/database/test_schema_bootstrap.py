from __future__ import annotations

from pathlib import Path

from gym_membership.database.bootstrap import iter_sql_statements

SCHEMA = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


def test_semicolons_inside_strings_do_not_split():
    sql = "INSERT INTO t VALUES ('a;b');\nINSERT INTO t VALUES (\"c;d\");\n"

    assert list(iter_sql_statements(sql)) == [
        "INSERT INTO t VALUES ('a;b')",
        'INSERT INTO t VALUES ("c;d")',
    ]


def test_trailing_statement_without_semicolon():
    assert list(iter_sql_statements("SELECT 1; SELECT 2")) == ["SELECT 1", "SELECT 2"]


def test_schema_declares_the_uniqueness_the_engine_relies_on():
    statements = list(iter_sql_statements(SCHEMA.read_text(encoding="utf-8")))
    joined = "\n".join(statements)

    assert any("CREATE TABLE IF NOT EXISTS attendance_records" in s for s in statements)
    assert "uq_attendance_member_date UNIQUE (member_id, attendance_date)" in joined
    assert "receipt_number" in joined
