"""
Tests for the pure authorization policy.
"""
import itertools

import pytest

from services import (
    Action,
    AdminCaller,
    Decision,
    OwnerChain,
    ResourceKind,
    StudentCaller,
    TeacherCaller,
    decide,
)
from services.policy import caller_from_user
from database import User


TEACHER = TeacherCaller(user_id=10)
OTHER_TEACHER = TeacherCaller(user_id=11)
STUDENT = StudentCaller(user_id=20, student_id=3)
UNLINKED_STUDENT = StudentCaller(user_id=21, student_id=None)
ADMIN = AdminCaller(user_id=1)

CHAINS = [
    OwnerChain(),
    OwnerChain(teacher_id=10),
    OwnerChain(teacher_id=11),
    OwnerChain(teacher_id=10, enrolled=True),
    OwnerChain(teacher_id=11, enrolled=True, student_id=3),
    OwnerChain(teacher_id=10, student_id=4),
]

CALLERS = [ADMIN, TEACHER, OTHER_TEACHER, STUDENT, UNLINKED_STUDENT, None, "admin", object()]


class TestTotality:
    """Every input yields exactly one decision."""

    def test_decide_is_total(self):
        for caller, action, kind, chain in itertools.product(CALLERS, Action, ResourceKind, CHAINS):
            decision = decide(caller, action, kind, chain)
            assert decision in (Decision.ALLOW, Decision.DENY)

    def test_unknown_callers_denied(self):
        for caller in (None, "admin", object()):
            for action, kind in itertools.product(Action, ResourceKind):
                assert decide(caller, action, kind, OwnerChain(teacher_id=10)) == Decision.DENY

    def test_unknown_action_denied(self):
        assert decide(ADMIN, "read", ResourceKind.CLASS) == Decision.DENY


class TestAdmin:

    def test_admin_allowed_everything(self):
        for action, kind, chain in itertools.product(Action, ResourceKind, CHAINS):
            assert decide(ADMIN, action, kind, chain) == Decision.ALLOW


class TestTeacher:

    @pytest.mark.parametrize("kind", [ResourceKind.ASSESSMENT, ResourceKind.MARK, ResourceKind.ENROLLMENT])
    def test_owned_class_resources(self, kind):
        for action in Action:
            assert decide(TEACHER, action, kind, OwnerChain(teacher_id=10)) == Decision.ALLOW
            assert decide(TEACHER, action, kind, OwnerChain(teacher_id=11)) == Decision.DENY
            assert decide(TEACHER, action, kind, OwnerChain()) == Decision.DENY

    def test_class_ownership(self):
        for action in (Action.READ, Action.UPDATE, Action.DELETE):
            assert decide(TEACHER, action, ResourceKind.CLASS, OwnerChain(teacher_id=10)) == Decision.ALLOW
            assert decide(TEACHER, action, ResourceKind.CLASS, OwnerChain(teacher_id=11)) == Decision.DENY

    def test_create_class_only_for_self(self):
        assert decide(TEACHER, Action.CREATE, ResourceKind.CLASS, OwnerChain(teacher_id=10)) == Decision.ALLOW
        assert decide(TEACHER, Action.CREATE, ResourceKind.CLASS, OwnerChain(teacher_id=11)) == Decision.DENY

    def test_list_classes_allowed(self):
        assert decide(TEACHER, Action.LIST, ResourceKind.CLASS) == Decision.ALLOW

    def test_roster_is_global(self):
        for action in (Action.LIST, Action.READ, Action.CREATE):
            assert decide(TEACHER, action, ResourceKind.STUDENT) == Decision.ALLOW
        for action in (Action.UPDATE, Action.DELETE):
            assert decide(TEACHER, action, ResourceKind.STUDENT) == Decision.DENY

    def test_enrollment_does_not_help_teacher(self):
        chain = OwnerChain(teacher_id=11, enrolled=True)
        assert decide(TEACHER, Action.READ, ResourceKind.CLASS, chain) == Decision.DENY


class TestStudent:

    def test_no_writes(self):
        chain = OwnerChain(teacher_id=10, enrolled=True, student_id=3)
        for kind in ResourceKind:
            for action in (Action.CREATE, Action.UPDATE, Action.DELETE):
                assert decide(STUDENT, action, kind, chain) == Decision.DENY

    def test_class_read_requires_enrollment(self):
        assert decide(STUDENT, Action.READ, ResourceKind.CLASS, OwnerChain(enrolled=True)) == Decision.ALLOW
        assert decide(STUDENT, Action.READ, ResourceKind.CLASS, OwnerChain(enrolled=False)) == Decision.DENY

    def test_assessment_read_requires_enrollment(self):
        for action in (Action.LIST, Action.READ):
            assert decide(STUDENT, action, ResourceKind.ASSESSMENT, OwnerChain(enrolled=True)) == Decision.ALLOW
            assert decide(STUDENT, action, ResourceKind.ASSESSMENT, OwnerChain()) == Decision.DENY

    def test_own_mark_only(self):
        assert decide(STUDENT, Action.READ, ResourceKind.MARK, OwnerChain(student_id=3)) == Decision.ALLOW
        assert decide(STUDENT, Action.READ, ResourceKind.MARK, OwnerChain(student_id=4)) == Decision.DENY
        assert decide(UNLINKED_STUDENT, Action.READ, ResourceKind.MARK, OwnerChain()) == Decision.DENY

    def test_list_marks_requires_enrollment(self):
        assert decide(STUDENT, Action.LIST, ResourceKind.MARK, OwnerChain(enrolled=True)) == Decision.ALLOW
        assert decide(STUDENT, Action.LIST, ResourceKind.MARK, OwnerChain()) == Decision.DENY

    def test_roster_and_enrollments_hidden(self):
        chain = OwnerChain(enrolled=True)
        for action in Action:
            assert decide(STUDENT, action, ResourceKind.STUDENT, chain) == Decision.DENY
            assert decide(STUDENT, action, ResourceKind.ENROLLMENT, chain) == Decision.DENY


class TestCallerFromUser:

    def test_roles(self):
        assert caller_from_user(User(id=1, role="admin")) == AdminCaller(user_id=1)
        assert caller_from_user(User(id=2, role="teacher")) == TeacherCaller(user_id=2)
        assert caller_from_user(User(id=3, role="student", student_id=7)) == StudentCaller(user_id=3, student_id=7)

    def test_unknown_role(self):
        assert caller_from_user(User(id=4, role="janitor")) is None
