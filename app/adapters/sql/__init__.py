"""Relational ("table") backend adapters built on SQLite."""

from app.adapters.sql.database import SCHEMA_STATEMENTS, SqliteDatabase

__all__ = ["SCHEMA_STATEMENTS", "SqliteDatabase"]
