"""
Tests for registration, login and bearer token resolution.
"""
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from config import Settings
from database import User
from services import (
    AccessDeniedError,
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
    AdminCaller,
    StudentCaller,
    TeacherCaller,
    register_user,
    authenticate_user,
    create_access_token,
    login,
    resolve_caller,
)
from conftest import PASSWORD


@pytest.fixture
def settings():
    return Settings(database_url="sqlite://", jwt_secret="test-secret-for-sharpmarks-0123456789", access_token_expire_minutes=5)


class TestRegistration:

    def test_anonymous_teacher(self, db):
        user = register_user(db, " New@School.test ", "long-enough", "teacher")
        assert user["email"] == "new@school.test"
        assert user["role"] == "teacher"
        stored = db.get(User, user["id"])
        assert stored.password_hash != "long-enough"

    def test_duplicate_email_conflicts(self, db, school):
        with pytest.raises(ConflictError):
            register_user(db, "T1@school.test", "long-enough", "teacher")

    def test_admin_requires_admin_caller(self, db, school):
        with pytest.raises(AccessDeniedError):
            register_user(db, "boss@school.test", "long-enough", "admin")
        with pytest.raises(AccessDeniedError):
            register_user(db, "boss@school.test", "long-enough", "admin", caller=school.t1)
        user = register_user(db, "boss@school.test", "long-enough", "admin", caller=school.admin)
        assert user["role"] == "admin"

    def test_link_student_account(self, db, school):
        user = register_user(db, "sam@school.test", "long-enough", "student", student_id=school.sam_id, caller=school.t1)
        assert user["student_id"] == school.sam_id

    def test_link_rules(self, db, school):
        with pytest.raises(AccessDeniedError):
            register_user(db, "sam@school.test", "long-enough", "student", student_id=school.sam_id)
        with pytest.raises(ValidationError):
            register_user(db, "sam@school.test", "long-enough", "teacher", student_id=school.sam_id, caller=school.admin)
        with pytest.raises(NotFoundError):
            register_user(db, "sam@school.test", "long-enough", "student", student_id=9999, caller=school.admin)
        with pytest.raises(ConflictError):
            register_user(db, "ana2@school.test", "long-enough", "student", student_id=school.ana_id, caller=school.admin)

    @pytest.mark.parametrize("email, password, role", [
        ("not-an-email", "long-enough", "teacher"),
        ("a@school.test", "short", "teacher"),
        ("a@school.test", "long-enough", "janitor"),
    ])
    def test_validation(self, db, email, password, role):
        with pytest.raises(ValidationError):
            register_user(db, email, password, role)


class TestLogin:

    def test_authenticate(self, db, school):
        user = authenticate_user(db, "t1@school.test", PASSWORD)
        assert user.id == school.t1_user_id

    def test_bad_credentials(self, db, school):
        with pytest.raises(AuthenticationError):
            authenticate_user(db, "t1@school.test", "wrong-password")
        with pytest.raises(AuthenticationError):
            authenticate_user(db, "nobody@school.test", PASSWORD)

    def test_login_returns_token(self, db, school, settings):
        result = login(db, "ana@school.test", PASSWORD, settings)
        assert result["role"] == "student"
        assert result["token_type"] == "bearer"
        caller = resolve_caller(db, result["token"], settings)
        assert caller == school.ana


class TestResolveCaller:

    def test_roles_resolved(self, db, school, settings):
        for user_id, expected in (
            (school.admin_user_id, AdminCaller),
            (school.t1_user_id, TeacherCaller),
        ):
            token = create_access_token(db.get(User, user_id), settings)
            assert isinstance(resolve_caller(db, token, settings), expected)

    def test_role_comes_from_database(self, db, school, settings):
        payload = {
            "sub": str(school.ana.user_id),
            "role": "admin",
            "exp": datetime.now(timezone.utc) + timedelta(minutes=5),
        }
        token = jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)
        caller = resolve_caller(db, token, settings)
        assert isinstance(caller, StudentCaller)

    def test_expired_token(self, db, school, settings):
        payload = {
            "sub": str(school.t1_user_id),
            "exp": datetime.now(timezone.utc) - timedelta(minutes=1),
        }
        token = jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)
        with pytest.raises(AuthenticationError):
            resolve_caller(db, token, settings)

    def test_wrong_secret(self, db, school, settings):
        token = create_access_token(db.get(User, school.t1_user_id), settings)
        other = Settings(database_url="sqlite://", jwt_secret="another-secret-for-sharpmarks-9876543210")
        with pytest.raises(AuthenticationError):
            resolve_caller(db, token, other)

    def test_garbage_and_unknown_user(self, db, school, settings):
        with pytest.raises(AuthenticationError):
            resolve_caller(db, "not.a.token", settings)
        token = jwt.encode(
            {"sub": "9999", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
        )
        with pytest.raises(AuthenticationError):
            resolve_caller(db, token, settings)
