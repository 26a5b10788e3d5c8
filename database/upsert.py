"""
Dialect-native insert-or-update statements.

MySQL/MariaDB get INSERT ... ON DUPLICATE KEY UPDATE (or INSERT IGNORE),
SQLite and PostgreSQL get INSERT ... ON CONFLICT. Each is a single
statement, so two writers on the same unique key never collide with a
duplicate-key error: the later one overwrites or is skipped.
"""
from typing import Any, Dict, List

from sqlalchemy import Table
from sqlalchemy.dialects import mysql, postgresql, sqlite

MYSQL_DIALECTS = ("mysql", "mariadb")


def _insert_for(dialect_name: str):
    if dialect_name in MYSQL_DIALECTS:
        return mysql.insert
    if dialect_name == "sqlite":
        return sqlite.insert
    if dialect_name == "postgresql":
        return postgresql.insert
    raise NotImplementedError(f"No upsert support for the '{dialect_name}' dialect")


def upsert(
    dialect_name: str,
    table: Table,
    values: Dict[str, Any],
    key_columns: List[str],
    set_: Dict[str, Any],
):
    """
    Build an INSERT that updates `set_` when a row with the same key exists.

    Args:
        dialect_name: Name of the target dialect (engine.dialect.name)
        table: Table to write
        values: Full row to insert
        key_columns: Columns of the unique key the conflict is detected on
        set_: Column values to write over an existing row
    """
    statement = _insert_for(dialect_name)(table).values(**values)
    if dialect_name in MYSQL_DIALECTS:
        return statement.on_duplicate_key_update(set_)
    return statement.on_conflict_do_update(index_elements=key_columns, set_=set_)


def insert_ignore(dialect_name: str, table: Table, values: Dict[str, Any], key_columns: List[str]):
    """
    Build an INSERT that does nothing when a row with the same key exists.
    The result's rowcount is 1 when a row was written and 0 otherwise.
    """
    statement = _insert_for(dialect_name)(table).values(**values)
    if dialect_name in MYSQL_DIALECTS:
        return statement.prefix_with("IGNORE")
    return statement.on_conflict_do_nothing(index_elements=key_columns)
