from __future__ import annotations

from pathlib import Path

from class_attendance.database.bootstrap import _strip_create_db_and_use, iter_sql_statements

DATABASE_DIR = Path(__file__).resolve().parents[2] / "database"


def test_splits_on_semicolons_outside_quotes():
    sql = "INSERT INTO t VALUES('a;b');\nINSERT INTO t VALUES(\"c;d\");"
    assert list(iter_sql_statements(sql)) == ["INSERT INTO t VALUES('a;b')", 'INSERT INTO t VALUES("c;d")']


def test_skips_comments_and_blank_statements():
    sql = "-- header; not a statement\nSELECT 1;;\n  -- trailing\n"
    assert list(iter_sql_statements(sql)) == ["SELECT 1"]


def test_escaped_quote_inside_string():
    sql = "INSERT INTO t VALUES('it\\'s; fine');SELECT 2"
    assert list(iter_sql_statements(sql)) == ["INSERT INTO t VALUES('it\\'s; fine')", "SELECT 2"]


def test_strip_create_database_and_use():
    sql = "CREATE DATABASE IF NOT EXISTS x;\nUSE x;\nCREATE TABLE a(id INT);"
    assert list(iter_sql_statements(_strip_create_db_and_use(sql))) == ["CREATE TABLE a(id INT)"]


def test_schema_defines_session_tables():
    statements = list(iter_sql_statements(_strip_create_db_and_use((DATABASE_DIR / "schema.sql").read_text(encoding="utf-8"))))
    joined = "\n".join(statements)

    assert "CREATE TABLE IF NOT EXISTS attendance_sessions" in joined
    assert "UNIQUE KEY uq_attendance_sessions_class_date (class_id, session_date)" in joined
    assert all(not s.upper().startswith("USE ") for s in statements)
