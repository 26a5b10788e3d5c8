"""
Class and enrollment tools for the Sharpmarks gradebook.

AUTHORIZATION:
- Admins: every class
- Teachers: the classes they own
- Students: read-only, the classes they are enrolled in
"""
import logging
from typing import Dict, Any, List, Optional

from sqlalchemy.orm import Session

from database import Class, Enrollment, Student, User, UserRole, insert_ignore
from .authorization import AuthorizationService
from .exceptions import NotFoundError, ValidationError
from .policy import Action, AdminCaller, Caller, OwnerChain, ResourceKind

logger = logging.getLogger(__name__)


def list_classes(db: Session, caller: Optional[Caller]) -> List[Dict[str, Any]]:
    """
    List the classes visible to the caller.

    The role scope is part of the SQL query: teachers filter on
    teacher_id, students join through their enrollments.
    """
    auth_service = AuthorizationService(db, caller)
    auth_service.enforce(Action.LIST, ResourceKind.CLASS)

    classes = auth_service.scoped(ResourceKind.CLASS).order_by(Class.id).all()
    return [c.to_dict() for c in classes]


def get_class(db: Session, caller: Optional[Caller], class_id: int) -> Dict[str, Any]:
    """
    Get a single class.

    Raises:
        NotFoundError: Unknown class
        AccessDeniedError: Not owner / not enrolled
    """
    auth_service = AuthorizationService(db, caller)
    class_row = auth_service.load(ResourceKind.CLASS, class_id)
    auth_service.enforce(Action.READ, ResourceKind.CLASS, class_row)
    return class_row.to_dict()


def create_class(
    db: Session,
    caller: Optional[Caller],
    name: str,
    description: Optional[str] = None,
    teacher_id: Optional[int] = None
) -> Dict[str, Any]:
    """
    Create a class.

    Teachers always own the classes they create. Admins may name the owning
    teacher with `teacher_id`; without it the admin owns the class.

    Args:
        db: Database session
        caller: Verified caller
        name: Class name
        description: Optional description
        teacher_id: Owning teacher (admin only)

    Returns:
        Created class data

    Raises:
        AccessDeniedError: Student caller, or teacher naming another owner
        ValidationError: Blank name, or owner is not a teacher
        NotFoundError: Owner does not exist
    """
    auth_service = AuthorizationService(db, caller)

    owner_id = teacher_id if teacher_id is not None else getattr(caller, "user_id", None)
    auth_service.enforce(Action.CREATE, ResourceKind.CLASS, chain=OwnerChain(teacher_id=owner_id))

    name = (name or "").strip()
    if not name:
        raise ValidationError("Class name is required", "name")

    if isinstance(caller, AdminCaller) and teacher_id is not None:
        owner = db.query(User).filter(User.id == teacher_id).first()
        if not owner:
            raise NotFoundError("user", teacher_id)
        if owner.role != UserRole.TEACHER.value:
            raise ValidationError(f"User {teacher_id} is not a teacher", "teacher_id")

    class_row = Class(name=name, description=description, teacher_id=owner_id)
    db.add(class_row)
    db.commit()
    db.refresh(class_row)

    logger.info("Class %s created by user %s (owner %s)", class_row.id, caller.user_id, owner_id)
    return class_row.to_dict()


def enroll_student(
    db: Session,
    caller: Optional[Caller],
    class_id: int,
    student_id: int
) -> Dict[str, Any]:
    """
    Enroll a roster student in a class. Enrolling twice is a no-op.

    AUTHORIZATION: Admin, or the teacher who owns the class.

    Returns:
        Dict with class_id, student_id and whether a row was created

    Raises:
        NotFoundError: Unknown class or student
        AccessDeniedError: Caller does not own the class
    """
    auth_service = AuthorizationService(db, caller)
    class_row = auth_service.load(ResourceKind.CLASS, class_id, for_update=True)
    auth_service.enforce(Action.CREATE, ResourceKind.ENROLLMENT, chain=auth_service.class_chain(class_row))

    student = db.query(Student).filter(Student.id == student_id).first()
    if not student:
        raise NotFoundError("student", student_id)

    result = db.execute(
        insert_ignore(
            db.get_bind().dialect.name,
            Enrollment.__table__,
            values={"class_id": class_id, "student_id": student_id},
            key_columns=["student_id", "class_id"],
        )
    )
    created = result.rowcount == 1
    db.commit()

    if created:
        logger.info("Student %s enrolled in class %s by user %s", student_id, class_id, caller.user_id)
    return {"class_id": class_id, "student_id": student_id, "created": created}


def list_class_students(db: Session, caller: Optional[Caller], class_id: int) -> List[Dict[str, Any]]:
    """
    List the students enrolled in a class.

    AUTHORIZATION: Admin, or the teacher who owns the class.
    """
    auth_service = AuthorizationService(db, caller)
    class_row = auth_service.load(ResourceKind.CLASS, class_id)
    auth_service.enforce(Action.LIST, ResourceKind.ENROLLMENT, chain=auth_service.class_chain(class_row))

    students = (
        db.query(Student)
        .join(Enrollment, Enrollment.student_id == Student.id)
        .filter(Enrollment.class_id == class_id)
        .order_by(Student.last_name, Student.first_name, Student.id)
        .all()
    )
    return [s.to_dict() for s in students]
