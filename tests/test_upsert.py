"""
Tests for the dialect-native insert-or-update statements.
"""
import pytest
from sqlalchemy import func
from sqlalchemy.dialects import mysql, sqlite

from database import Enrollment, Mark, upsert, insert_ignore


def _mark_upsert(dialect_name):
    return upsert(
        dialect_name,
        Mark.__table__,
        values={"assessment_id": 1, "student_id": 2, "application_received": 5.0},
        key_columns=["assessment_id", "student_id"],
        set_={"application_received": 5.0, "updated_at": func.now()},
    )


class TestUpsertStatements:

    def test_mysql_uses_on_duplicate_key(self):
        sql = str(_mark_upsert("mysql").compile(dialect=mysql.dialect()))
        assert sql.startswith("INSERT INTO marks")
        assert "ON DUPLICATE KEY UPDATE" in sql

    def test_sqlite_uses_on_conflict(self):
        sql = str(_mark_upsert("sqlite").compile(dialect=sqlite.dialect()))
        assert "ON CONFLICT (assessment_id, student_id) DO UPDATE" in sql

    def test_insert_ignore(self):
        values = {"class_id": 1, "student_id": 2}
        key = ["student_id", "class_id"]
        mysql_sql = str(insert_ignore("mysql", Enrollment.__table__, values, key).compile(dialect=mysql.dialect()))
        sqlite_sql = str(insert_ignore("sqlite", Enrollment.__table__, values, key).compile(dialect=sqlite.dialect()))
        assert mysql_sql.startswith("INSERT IGNORE INTO enrollments")
        assert "DO NOTHING" in sqlite_sql

    def test_unknown_dialect(self):
        with pytest.raises(NotImplementedError):
            _mark_upsert("oracle")
