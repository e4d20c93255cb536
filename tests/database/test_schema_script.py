from pathlib import Path

from src.attendance_engine.attendance_engine.database.bootstrap import (
    _strip_create_db_and_use,
    _strip_line_comments,
    iter_sql_statements,
)

SCHEMA = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


def test_schema_splits_into_idempotent_statements():
    sql = _strip_line_comments(_strip_create_db_and_use(SCHEMA.read_text(encoding="utf-8")))
    statements = list(iter_sql_statements(sql))

    tables = [s.split()[5] for s in statements if s.upper().startswith("CREATE TABLE")]
    assert tables == ["attendance_settings", "holidays", "attendance_records", "leave_requests"]
    assert all("IF NOT EXISTS" in s or s.startswith("INSERT IGNORE") for s in statements)
    assert not any(s.upper().startswith(("CREATE DATABASE", "USE ")) for s in statements)


def test_splitter_keeps_semicolons_inside_quotes():
    sql = "INSERT INTO t VALUES ('a;b'); INSERT INTO t VALUES (\"c;d\");"
    assert list(iter_sql_statements(sql)) == ["INSERT INTO t VALUES ('a;b')", 'INSERT INTO t VALUES ("c;d")']
