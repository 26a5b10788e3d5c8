"""
Marks tools for the Sharpmarks gradebook.

A mark holds four (received, out_of) component pairs for one student on one
assessment. There is at most one mark per (assessment, student): saving
marks is a create-or-replace of all eight fields, never a partial merge.
"""
import logging
import math
from typing import Dict, Any, List, Mapping, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from database import Enrollment, Mark, Student, MARK_FIELDS, upsert
from .authorization import AuthorizationService
from .exceptions import NotFoundError, ValidationError
from .policy import Action, Caller, ResourceKind

logger = logging.getLogger(__name__)


def coerce_mark_value(value) -> float:
    """
    Coerce one submitted component to a float.

    Missing, blank and non-numeric input becomes 0.0, matching what the
    marks entry form sends for empty cells.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def coerce_components(components: Optional[Mapping[str, Any]]) -> Dict[str, float]:
    """Return all eight mark fields, coerced, ignoring unknown keys."""
    components = components or {}
    return {field: coerce_mark_value(components.get(field)) for field in MARK_FIELDS}


def upsert_mark(
    db: Session,
    caller: Optional[Caller],
    assessment_id: int,
    student_id: int,
    components: Optional[Mapping[str, Any]] = None
) -> Dict[str, Any]:
    """
    Record or replace a student's mark for an assessment.

    AUTHORIZATION: Admin, or the teacher who owns the assessment's class.

    Args:
        db: Database session
        caller: Verified caller
        assessment_id: Assessment being marked
        student_id: Roster student being marked
        components: The eight component fields; absent ones become 0

    Returns:
        The stored mark

    Raises:
        NotFoundError: Unknown assessment or student
        AccessDeniedError: Caller does not own the class
        ValidationError: Student is not enrolled in the assessment's class
    """
    auth_service = AuthorizationService(db, caller)
    assessment = auth_service.load(ResourceKind.ASSESSMENT, assessment_id)
    auth_service.enforce(
        Action.CREATE, ResourceKind.MARK,
        chain=auth_service.owner_chain(ResourceKind.ASSESSMENT, assessment)
    )

    student = db.query(Student).filter(Student.id == student_id).first()
    if not student:
        raise NotFoundError("student", student_id)

    enrolled = (
        db.query(Enrollment)
        .filter(Enrollment.class_id == assessment.class_id)
        .filter(Enrollment.student_id == student_id)
        .first()
    )
    if enrolled is None:
        raise ValidationError(
            f"Student {student_id} is not enrolled in class {assessment.class_id}", "student_id"
        )

    values = coerce_components(components)

    # one statement keyed on uq_marks_assessment_student; a concurrent
    # writer on the same pair is overwritten, not reported as a conflict
    db.execute(
        upsert(
            db.get_bind().dialect.name,
            Mark.__table__,
            values={"assessment_id": assessment_id, "student_id": student_id, **values},
            key_columns=["assessment_id", "student_id"],
            set_={**values, "updated_at": func.now()},
        )
    )
    db.commit()

    mark = (
        db.query(Mark)
        .filter(Mark.assessment_id == assessment_id)
        .filter(Mark.student_id == student_id)
        .one()
    )

    logger.info(
        "Mark for assessment %s / student %s saved by user %s",
        assessment_id, student_id, caller.user_id
    )
    return mark.to_dict()


def list_marks(db: Session, caller: Optional[Caller], assessment_id: int) -> List[Dict[str, Any]]:
    """
    List the marks recorded for an assessment.

    AUTHORIZATION:
    - Admin: all marks
    - Teacher: all marks, if they own the assessment's class
    - Student: only their own mark, if enrolled in the class
    """
    auth_service = AuthorizationService(db, caller)
    assessment = auth_service.load(ResourceKind.ASSESSMENT, assessment_id)
    auth_service.enforce(
        Action.LIST, ResourceKind.MARK,
        chain=auth_service.owner_chain(ResourceKind.ASSESSMENT, assessment)
    )

    marks = (
        auth_service.scoped(ResourceKind.MARK)
        .filter(Mark.assessment_id == assessment_id)
        .order_by(Mark.student_id)
        .all()
    )
    return [m.to_dict() for m in marks]
