"""
Service layer for the Sharpmarks gradebook.

Every operation takes a database session and the verified caller, and
enforces the authorization policy before reading or writing.
"""
from .exceptions import (
    GradebookError,
    AuthenticationError,
    AccessDeniedError,
    NotFoundError,
    ValidationError,
    ConflictError,
)

from .policy import (
    Action,
    AdminCaller,
    Caller,
    Decision,
    OwnerChain,
    ResourceKind,
    StudentCaller,
    TeacherCaller,
    caller_from_user,
    decide,
)

from .authorization import (
    AuthorizationService,
)

from .identity import (
    get_user,
    register_user,
    authenticate_user,
    create_access_token,
    login,
    resolve_caller,
)

from .classes import (
    list_classes,
    get_class,
    create_class,
    enroll_student,
    list_class_students,
)

from .students import (
    list_students,
    create_student,
)

from .assessments import (
    list_assessments,
    create_assessment,
    update_assessment,
    delete_assessment,
)

from .marks import (
    coerce_mark_value,
    coerce_components,
    upsert_mark,
    list_marks,
)

__all__ = [
    # Exceptions
    "GradebookError",
    "AuthenticationError",
    "AccessDeniedError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    # Policy
    "Action",
    "AdminCaller",
    "Caller",
    "Decision",
    "OwnerChain",
    "ResourceKind",
    "StudentCaller",
    "TeacherCaller",
    "caller_from_user",
    "decide",
    # Authorization
    "AuthorizationService",
    # Identity
    "get_user",
    "register_user",
    "authenticate_user",
    "create_access_token",
    "login",
    "resolve_caller",
    # Classes
    "list_classes",
    "get_class",
    "create_class",
    "enroll_student",
    "list_class_students",
    # Students
    "list_students",
    "create_student",
    # Assessments
    "list_assessments",
    "create_assessment",
    "update_assessment",
    "delete_assessment",
    # Marks
    "coerce_mark_value",
    "coerce_components",
    "upsert_mark",
    "list_marks",
]
