"""
Identity tools for the Sharpmarks gradebook.
Handles registration, login, bearer tokens and caller resolution.

The token only says WHO is calling. The role is always re-read from the
database, never trusted from the token or the client.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Optional

import jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from werkzeug.security import generate_password_hash, check_password_hash

from config.settings import Settings
from database import User, Student, UserRole
from .exceptions import (
    AccessDeniedError,
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from .policy import AdminCaller, TeacherCaller, Caller, caller_from_user

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return check_password_hash(password_hash, password)


def _normalise_email(email: str) -> str:
    return (email or "").strip().lower()


def get_user(db: Session, user_id: int) -> Dict[str, Any]:
    """
    Get user information from database.

    Raises:
        NotFoundError: If user not found
    """
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("user", user_id)
    return user.to_dict()


def register_user(
    db: Session,
    email: str,
    password: str,
    role: str,
    student_id: Optional[int] = None,
    caller: Optional[Caller] = None
) -> Dict[str, Any]:
    """
    Create a login account.

    Anyone may register a teacher or student account. Creating an admin
    requires an admin caller, and linking a student account to a roster
    entry requires an admin or teacher caller.

    Args:
        db: Database session
        email: Login email, unique
        password: Plain password, hashed before storage
        role: 'admin', 'teacher' or 'student'
        student_id: Roster entry to link (student accounts only)
        caller: The registering caller, None when anonymous

    Returns:
        Dict with created user info

    Raises:
        ValidationError: Bad email, password, role or link
        AccessDeniedError: Caller may not create this kind of account
        NotFoundError: Linked roster entry does not exist
        ConflictError: Email already registered
    """
    email = _normalise_email(email)
    if not email or "@" not in email:
        raise ValidationError("A valid email is required", field="email")
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters", field="password"
        )
    if role not in [r.value for r in UserRole]:
        raise ValidationError("Invalid role. Must be 'admin', 'teacher' or 'student'", field="role")

    caller_id = getattr(caller, "user_id", None)
    if role == UserRole.ADMIN.value and not isinstance(caller, AdminCaller):
        raise AccessDeniedError(user_id=caller_id, action="create", resource="admin account")

    if student_id is not None:
        if role != UserRole.STUDENT.value:
            raise ValidationError("Only student accounts can be linked to a student", field="student_id")
        if not isinstance(caller, (AdminCaller, TeacherCaller)):
            raise AccessDeniedError(user_id=caller_id, action="link", resource="student account")
        student = db.query(Student).filter(Student.id == student_id).first()
        if not student:
            raise NotFoundError("student", student_id)
        if student.account is not None:
            raise ConflictError(f"Student {student_id} already has an account", field="student_id")

    if db.query(User).filter(User.email == email).first():
        raise ConflictError("Email already registered", field="email")

    user = User(
        email=email,
        password_hash=hash_password(password),
        role=role,
        student_id=student_id,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # lost a race with a concurrent registration
        db.rollback()
        raise ConflictError("Email already registered", field="email")
    db.refresh(user)

    logger.info("Registered user %s with role %s", user.id, user.role)
    return user.to_dict()


def authenticate_user(db: Session, email: str, password: str) -> User:
    """
    Check login credentials.

    Raises:
        AuthenticationError: Unknown email or wrong password
    """
    user = db.query(User).filter(User.email == _normalise_email(email)).first()
    if not user or not verify_password(password or "", user.password_hash):
        raise AuthenticationError("Invalid credentials")
    return user


def create_access_token(user: User, settings: Settings) -> str:
    """Issue a signed bearer token for a user."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user.id),
        "role": user.role,
        "email": user.email,
        "iat": now,
        "exp": now + timedelta(minutes=settings.access_token_expire_minutes),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def login(db: Session, email: str, password: str, settings: Settings) -> Dict[str, Any]:
    """Authenticate and return the token response."""
    user = authenticate_user(db, email, password)
    return {
        "message": "Login successful",
        "user_id": user.id,
        "role": user.role,
        "token": create_access_token(user, settings),
        "token_type": "bearer",
    }


def resolve_caller(db: Session, token: str, settings: Settings) -> Caller:
    """
    Turn a bearer token into a verified caller.

    Raises:
        AuthenticationError: Invalid/expired token or unknown user
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token expired")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid token")

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid token")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise AuthenticationError("Invalid token")

    caller = caller_from_user(user)
    if caller is None:
        raise AuthenticationError("Unknown role")
    return caller
