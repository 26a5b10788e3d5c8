"""
Authorization policy for the Sharpmarks gradebook.

Pure decision functions: given who is calling, what they want to do and the
ownership chain of the target, answer ALLOW or DENY. Nothing here touches
the database or raises; the access layer turns DENY into an error.

RULES:
1. Admins may do anything
2. Teachers act only on classes they own, and on the assessments, marks and
   enrollments hanging off those classes; students (the roster) are global
3. Students may only read: classes and assessments they are enrolled in,
   and their own marks
4. Anything else is denied
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from database import User, UserRole


@dataclass(frozen=True)
class AdminCaller:
    user_id: int


@dataclass(frozen=True)
class TeacherCaller:
    user_id: int


@dataclass(frozen=True)
class StudentCaller:
    """A student login; `student_id` is the roster entry it is linked to."""
    user_id: int
    student_id: Optional[int] = None


Caller = Union[AdminCaller, TeacherCaller, StudentCaller]


class Action(str, Enum):
    LIST = "list"
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class ResourceKind(str, Enum):
    CLASS = "class"
    STUDENT = "student"
    ENROLLMENT = "enrollment"
    ASSESSMENT = "assessment"
    MARK = "mark"


class Decision(str, Enum):
    ALLOW = "allow"
    DENY = "deny"


READ_ACTIONS = frozenset({Action.LIST, Action.READ})


@dataclass(frozen=True)
class OwnerChain:
    """
    Ownership facts about a target resource.

    Attributes:
        teacher_id: teacher_id of the class the resource belongs to (for a
            class being created, the requested owner)
        enrolled: whether the calling student is enrolled in that class
        student_id: the roster student a mark belongs to
    """
    teacher_id: Optional[int] = None
    enrolled: bool = False
    student_id: Optional[int] = None


NO_CHAIN = OwnerChain()


def caller_from_user(user: User) -> Optional[Caller]:
    """Build the caller variant from a stored user row."""
    role = user.role.value if isinstance(user.role, UserRole) else user.role
    if role == UserRole.ADMIN.value:
        return AdminCaller(user_id=user.id)
    if role == UserRole.TEACHER.value:
        return TeacherCaller(user_id=user.id)
    if role == UserRole.STUDENT.value:
        return StudentCaller(user_id=user.id, student_id=user.student_id)
    return None


def _owns(caller: TeacherCaller, chain: OwnerChain) -> bool:
    return chain.teacher_id is not None and chain.teacher_id == caller.user_id


def _teacher_may(caller: TeacherCaller, action: Action, kind: ResourceKind, chain: OwnerChain) -> bool:
    if kind == ResourceKind.STUDENT:
        return action in (Action.LIST, Action.READ, Action.CREATE)
    if kind == ResourceKind.CLASS and action == Action.LIST:
        # list results are narrowed to owned classes by the query scope
        return True
    if kind in (ResourceKind.CLASS, ResourceKind.ENROLLMENT, ResourceKind.ASSESSMENT, ResourceKind.MARK):
        return _owns(caller, chain)
    return False


def _student_may(caller: StudentCaller, action: Action, kind: ResourceKind, chain: OwnerChain) -> bool:
    if action not in READ_ACTIONS:
        return False
    if kind == ResourceKind.CLASS:
        return action == Action.LIST or chain.enrolled
    if kind == ResourceKind.ASSESSMENT:
        return chain.enrolled
    if kind == ResourceKind.MARK:
        if action == Action.LIST:
            return chain.enrolled
        return caller.student_id is not None and chain.student_id == caller.student_id
    return False


def decide(
    caller: Optional[Caller],
    action: Action,
    kind: ResourceKind,
    chain: OwnerChain = NO_CHAIN
) -> Decision:
    """
    Decide whether `caller` may perform `action` on a resource of `kind`.

    Total over every input: an unknown caller, action or kind is DENY.

    Args:
        caller: The verified caller, or None when unauthenticated
        action: What the caller wants to do
        kind: Which kind of resource is targeted
        chain: Ownership facts about the target

    Returns:
        Decision.ALLOW or Decision.DENY
    """
    if not isinstance(action, Action) or not isinstance(kind, ResourceKind):
        return Decision.DENY

    if isinstance(caller, AdminCaller):
        allowed = True
    elif isinstance(caller, TeacherCaller):
        allowed = _teacher_may(caller, action, kind, chain)
    elif isinstance(caller, StudentCaller):
        allowed = _student_may(caller, action, kind, chain)
    else:
        allowed = False

    return Decision.ALLOW if allowed else Decision.DENY
