"""
Assessment tools for the Sharpmarks gradebook.
Every operation resolves the owning class first and checks it before
touching the assessment.
"""
import logging
import math
from typing import Dict, Any, List, Optional

from sqlalchemy.orm import Session

from database import Assessment
from .authorization import AuthorizationService
from .exceptions import ValidationError
from .policy import Action, Caller, ResourceKind

logger = logging.getLogger(__name__)


def _validate(name: str, weight) -> tuple:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Assessment name is required", "name")
    try:
        weight = float(weight)
    except (TypeError, ValueError):
        raise ValidationError("Weight must be a number", "weight")
    if not math.isfinite(weight) or weight <= 0:
        raise ValidationError("Weight must be a positive number", "weight")
    return name, weight


def list_assessments(db: Session, caller: Optional[Caller], class_id: int) -> List[Dict[str, Any]]:
    """
    List the assessments of a class.

    AUTHORIZATION:
    - Admin: any class
    - Teacher: owned classes
    - Student: classes they are enrolled in
    """
    auth_service = AuthorizationService(db, caller)
    class_row = auth_service.load(ResourceKind.CLASS, class_id)
    auth_service.enforce(Action.LIST, ResourceKind.ASSESSMENT, chain=auth_service.class_chain(class_row))

    assessments = (
        auth_service.scoped(ResourceKind.ASSESSMENT)
        .filter(Assessment.class_id == class_id)
        .order_by(Assessment.id)
        .all()
    )
    return [a.to_dict() for a in assessments]


def create_assessment(
    db: Session,
    caller: Optional[Caller],
    class_id: int,
    name: str,
    weight: float
) -> Dict[str, Any]:
    """
    Add an assessment to a class.

    AUTHORIZATION: Admin, or the teacher who owns the class.

    Raises:
        NotFoundError: Unknown class
        AccessDeniedError: Caller does not own the class
        ValidationError: Blank name or non-positive weight
    """
    auth_service = AuthorizationService(db, caller)
    class_row = auth_service.load(ResourceKind.CLASS, class_id, for_update=True)
    auth_service.enforce(Action.CREATE, ResourceKind.ASSESSMENT, chain=auth_service.class_chain(class_row))

    name, weight = _validate(name, weight)

    assessment = Assessment(class_id=class_id, name=name, weight=weight)
    db.add(assessment)
    db.commit()
    db.refresh(assessment)

    logger.info("Assessment %s created in class %s by user %s", assessment.id, class_id, caller.user_id)
    return assessment.to_dict()


def update_assessment(
    db: Session,
    caller: Optional[Caller],
    assessment_id: int,
    name: str,
    weight: float
) -> Dict[str, Any]:
    """
    Replace the name and weight of an assessment.

    AUTHORIZATION: Admin, or the teacher who owns the assessment's class.
    """
    auth_service = AuthorizationService(db, caller)
    assessment = auth_service.load(ResourceKind.ASSESSMENT, assessment_id, for_update=True)
    auth_service.enforce(Action.UPDATE, ResourceKind.ASSESSMENT, assessment)

    assessment.name, assessment.weight = _validate(name, weight)
    db.commit()
    db.refresh(assessment)

    logger.info("Assessment %s updated by user %s", assessment_id, caller.user_id)
    return assessment.to_dict()


def delete_assessment(db: Session, caller: Optional[Caller], assessment_id: int) -> Dict[str, Any]:
    """
    Delete an assessment together with all of its marks.

    AUTHORIZATION: Admin, or the teacher who owns the assessment's class.
    """
    auth_service = AuthorizationService(db, caller)
    assessment = auth_service.load(ResourceKind.ASSESSMENT, assessment_id, for_update=True)
    auth_service.enforce(Action.DELETE, ResourceKind.ASSESSMENT, assessment)

    marks_deleted = len(assessment.marks)
    db.delete(assessment)
    db.commit()

    logger.info(
        "Assessment %s deleted by user %s (%d marks removed)",
        assessment_id, caller.user_id, marks_deleted
    )
    return {"id": assessment_id, "deleted": True, "marks_deleted": marks_deleted}
