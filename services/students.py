"""
Roster tools for the Sharpmarks gradebook.
Students are global: any admin or teacher can list and create them.
"""
import logging
from typing import Dict, Any, List, Optional

from sqlalchemy.orm import Session

from database import Student, PRONOUN_LABELS
from .authorization import AuthorizationService
from .exceptions import ValidationError
from .policy import Action, Caller, ResourceKind

logger = logging.getLogger(__name__)


def list_students(db: Session, caller: Optional[Caller]) -> List[Dict[str, Any]]:
    """
    List every roster student.

    AUTHORIZATION: Admin and teacher.
    """
    auth_service = AuthorizationService(db, caller)
    auth_service.enforce(Action.LIST, ResourceKind.STUDENT)

    students = (
        auth_service.scoped(ResourceKind.STUDENT)
        .order_by(Student.last_name, Student.first_name, Student.id)
        .all()
    )
    return [s.to_dict() for s in students]


def create_student(
    db: Session,
    caller: Optional[Caller],
    first_name: str,
    last_name: str,
    pronoun: int = 3
) -> Dict[str, Any]:
    """
    Add a student to the roster.

    AUTHORIZATION: Admin and teacher.

    Raises:
        ValidationError: Blank name or pronoun outside 1-3
    """
    auth_service = AuthorizationService(db, caller)
    auth_service.enforce(Action.CREATE, ResourceKind.STUDENT)

    first_name = (first_name or "").strip()
    last_name = (last_name or "").strip()
    if not first_name:
        raise ValidationError("First name is required", "first_name")
    if not last_name:
        raise ValidationError("Last name is required", "last_name")
    if pronoun not in PRONOUN_LABELS:
        raise ValidationError("Pronoun must be 1, 2 or 3", "pronoun")

    student = Student(first_name=first_name, last_name=last_name, pronoun=pronoun)
    db.add(student)
    db.commit()
    db.refresh(student)

    logger.info("Student %s created by user %s", student.id, caller.user_id)
    return student.to_dict()
