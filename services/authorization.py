"""
Access-scoped query layer for the Sharpmarks gradebook.

Combines the pure policy in `policy.py` with the database:

1. Load the target row, or raise NotFoundError
2. Work out its ownership chain (class owner, caller enrollment, mark owner)
3. Ask the policy, and raise AccessDeniedError on DENY
4. For lists, push the caller's scope into the SQL predicate; rows outside
   the scope are never fetched
"""
import logging
from typing import Optional

from sqlalchemy import false
from sqlalchemy.orm import Session, Query

from database import Class, Student, Enrollment, Assessment, Mark
from .exceptions import AccessDeniedError, NotFoundError
from .policy import (
    Action,
    AdminCaller,
    Caller,
    Decision,
    OwnerChain,
    ResourceKind,
    StudentCaller,
    TeacherCaller,
    decide,
)

logger = logging.getLogger(__name__)


MODELS = {
    ResourceKind.CLASS: Class,
    ResourceKind.STUDENT: Student,
    ResourceKind.ENROLLMENT: Enrollment,
    ResourceKind.ASSESSMENT: Assessment,
    ResourceKind.MARK: Mark,
}


class AuthorizationService:
    """
    Per-request service that scopes every read and gates every write.
    The caller comes from the verified token, never from the payload.
    """

    def __init__(self, db: Session, caller: Optional[Caller]):
        self.db = db
        self.caller = caller

    def load(self, kind: ResourceKind, resource_id: int, for_update: bool = False):
        """
        Fetch a row by primary key.

        Args:
            kind: Resource kind to load
            resource_id: Primary key
            for_update: Lock the row for the rest of the transaction
                (ignored by SQLite)

        Raises:
            NotFoundError: If the row does not exist
            ValueError: For enrollments, which have no single-column key
        """
        if kind == ResourceKind.ENROLLMENT:
            raise ValueError("Enrollments are keyed by (student_id, class_id); load the class instead")
        model = MODELS[kind]
        query = self.db.query(model).filter(model.id == resource_id)
        if for_update:
            query = query.with_for_update()
        row = query.first()
        if row is None:
            raise NotFoundError(kind.value, resource_id)
        return row

    def is_enrolled(self, class_id: int) -> bool:
        """Check whether the calling student is enrolled in a class."""
        if not isinstance(self.caller, StudentCaller) or self.caller.student_id is None:
            return False
        return (
            self.db.query(Enrollment)
            .filter(Enrollment.class_id == class_id)
            .filter(Enrollment.student_id == self.caller.student_id)
            .first()
        ) is not None

    def class_chain(self, class_row: Class) -> OwnerChain:
        return OwnerChain(
            teacher_id=class_row.teacher_id,
            enrolled=self.is_enrolled(class_row.id),
        )

    def owner_chain(self, kind: ResourceKind, row) -> OwnerChain:
        """
        Follow foreign keys from a row up to the class that owns it.

        Args:
            kind: Kind of `row`
            row: A loaded Class, Assessment, Mark or Enrollment

        Returns:
            OwnerChain for the policy
        """
        if kind == ResourceKind.CLASS:
            return self.class_chain(row)
        if kind == ResourceKind.ENROLLMENT:
            return self.class_chain(row.class_)
        if kind == ResourceKind.ASSESSMENT:
            return self.class_chain(row.class_)
        if kind == ResourceKind.MARK:
            chain = self.class_chain(row.assessment.class_)
            return OwnerChain(
                teacher_id=chain.teacher_id,
                enrolled=chain.enrolled,
                student_id=row.student_id,
            )
        # students are not owned by anyone
        return OwnerChain()

    def enforce(
        self,
        action: Action,
        kind: ResourceKind,
        row=None,
        chain: Optional[OwnerChain] = None
    ) -> None:
        """
        Enforce the policy for one action.

        Args:
            action: Action being attempted
            kind: Resource kind targeted
            row: Loaded target row, used to derive the chain
            chain: Explicit chain, overrides `row`

        Raises:
            AccessDeniedError: If the policy says DENY
        """
        if chain is None:
            chain = self.owner_chain(kind, row) if row is not None else OwnerChain()

        if decide(self.caller, action, kind, chain) == Decision.DENY:
            user_id = getattr(self.caller, "user_id", None)
            logger.warning(
                "Denied %s %s for caller %s (%s)",
                action.value, kind.value, user_id, type(self.caller).__name__
            )
            raise AccessDeniedError(user_id=user_id, action=action.value, resource=kind.value)

    def scoped(self, kind: ResourceKind) -> Query:
        """
        Build a query over `kind` restricted to what the caller may see.

        Callers add their own filters (class_id, assessment_id, ...) on top.
        """
        model = MODELS[kind]
        query = self.db.query(model)
        caller = self.caller

        if isinstance(caller, AdminCaller):
            return query

        if kind == ResourceKind.STUDENT:
            if isinstance(caller, TeacherCaller):
                return query
            return query.filter(false())

        if isinstance(caller, TeacherCaller):
            if kind == ResourceKind.CLASS:
                return query.filter(Class.teacher_id == caller.user_id)
            if kind == ResourceKind.ENROLLMENT:
                return (
                    query.join(Class, Enrollment.class_id == Class.id)
                    .filter(Class.teacher_id == caller.user_id)
                )
            if kind == ResourceKind.ASSESSMENT:
                return (
                    query.join(Class, Assessment.class_id == Class.id)
                    .filter(Class.teacher_id == caller.user_id)
                )
            if kind == ResourceKind.MARK:
                return (
                    query.join(Assessment, Mark.assessment_id == Assessment.id)
                    .join(Class, Assessment.class_id == Class.id)
                    .filter(Class.teacher_id == caller.user_id)
                )

        if isinstance(caller, StudentCaller) and caller.student_id is not None:
            if kind == ResourceKind.CLASS:
                return (
                    query.join(Enrollment, Enrollment.class_id == Class.id)
                    .filter(Enrollment.student_id == caller.student_id)
                )
            if kind == ResourceKind.ASSESSMENT:
                return (
                    query.join(Enrollment, Enrollment.class_id == Assessment.class_id)
                    .filter(Enrollment.student_id == caller.student_id)
                )
            if kind == ResourceKind.MARK:
                return query.filter(Mark.student_id == caller.student_id)

        return query.filter(false())
