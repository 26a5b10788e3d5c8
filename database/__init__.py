"""Database module."""
from .models import (
    Base,
    User,
    Student,
    Class,
    Enrollment,
    Assessment,
    Mark,
    UserRole,
    MARK_COMPONENTS,
    MARK_FIELDS,
    PRONOUN_LABELS,
)
from .connection import Database, build_engine
from .upsert import upsert, insert_ignore

__all__ = [
    "Base",
    "User",
    "Student",
    "Class",
    "Enrollment",
    "Assessment",
    "Mark",
    "UserRole",
    "MARK_COMPONENTS",
    "MARK_FIELDS",
    "PRONOUN_LABELS",
    "Database",
    "build_engine",
    "upsert",
    "insert_ignore",
]
