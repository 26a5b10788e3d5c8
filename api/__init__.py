"""API module for the Sharpmarks gradebook."""
from .routes import (
    auth_router,
    legacy_auth_router,
    classes_router,
    students_router,
    assessments_router,
)
from .deps import get_db, get_app_settings, get_current_caller, get_optional_caller

__all__ = [
    "auth_router",
    "legacy_auth_router",
    "classes_router",
    "students_router",
    "assessments_router",
    "get_db",
    "get_app_settings",
    "get_current_caller",
    "get_optional_caller",
]
