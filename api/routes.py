"""
API routes for the Sharpmarks gradebook.

Routes only translate HTTP to service calls. Authorization lives in the
service layer; errors are mapped to status codes by the handlers in main.py.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from config.settings import Settings
from services import (
    Caller,
    get_user,
    register_user,
    login,
    list_classes,
    get_class,
    create_class,
    enroll_student,
    list_class_students,
    list_students,
    create_student,
    list_assessments,
    create_assessment,
    update_assessment,
    delete_assessment,
    upsert_mark,
    list_marks,
)
from .deps import get_db, get_app_settings, get_current_caller, get_optional_caller
from .schemas import (
    RegisterRequest,
    LoginRequest,
    CreateClassRequest,
    CreateStudentRequest,
    EnrollRequest,
    AssessmentRequest,
    MarkRequest,
    UserResponse,
    TokenResponse,
    ClassResponse,
    StudentResponse,
    EnrollmentResponse,
    AssessmentResponse,
    MarkResponse,
    DeleteAssessmentResponse,
    ErrorResponse,
)


ERROR_RESPONSES = {
    401: {"model": ErrorResponse, "description": "Missing or invalid bearer token"},
    403: {"model": ErrorResponse, "description": "Caller may not perform this action"},
    404: {"model": ErrorResponse, "description": "Resource not found"},
}


# Router for registration and login
auth_router = APIRouter(prefix="/auth", tags=["Auth"])

# Router for classes, their roster and assessments
classes_router = APIRouter(prefix="/classes", tags=["Classes"], responses=ERROR_RESPONSES)

# Router for the student roster
students_router = APIRouter(prefix="/students", tags=["Students"], responses=ERROR_RESPONSES)

# Router for assessment edits and marks
assessments_router = APIRouter(prefix="/assessments", tags=["Assessments"], responses=ERROR_RESPONSES)


# ============== Auth Endpoints ==============

@auth_router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register_endpoint(
    request: RegisterRequest,
    db: Session = Depends(get_db),
    caller: Optional[Caller] = Depends(get_optional_caller),
):
    """
    Create a login account.

    Teacher and student accounts are open; admin accounts and roster links
    need an authorized caller.
    """
    return register_user(
        db=db,
        email=request.email,
        password=request.password,
        role=request.role,
        student_id=request.student_id,
        caller=caller,
    )


@auth_router.post("/login", response_model=TokenResponse)
def login_endpoint(
    request: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Exchange email and password for a bearer token."""
    return login(db, request.email, request.password, settings)


@auth_router.get("/me", response_model=UserResponse)
def me_endpoint(
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """Return the calling user."""
    return get_user(db, caller.user_id)


# Root-level paths used by existing clients, kept out of the OpenAPI schema
legacy_auth_router = APIRouter(tags=["Auth"], include_in_schema=False)
legacy_auth_router.add_api_route(
    "/register", register_endpoint, methods=["POST"],
    response_model=UserResponse, status_code=status.HTTP_201_CREATED,
)
legacy_auth_router.add_api_route("/login", login_endpoint, methods=["POST"], response_model=TokenResponse)
legacy_auth_router.add_api_route("/profile", me_endpoint, methods=["GET"], response_model=UserResponse)


# ============== Class Endpoints ==============

@classes_router.get("", response_model=List[ClassResponse])
def list_classes_endpoint(
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """List classes visible to the caller."""
    return list_classes(db, caller)


@classes_router.post("", response_model=ClassResponse, status_code=status.HTTP_201_CREATED)
def create_class_endpoint(
    request: CreateClassRequest,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """Create a class (teacher or admin)."""
    return create_class(db, caller, request.name, request.description, request.teacher_id)


@classes_router.get("/{class_id}", response_model=ClassResponse)
def get_class_endpoint(
    class_id: int,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    return get_class(db, caller, class_id)


@classes_router.get("/{class_id}/students", response_model=List[StudentResponse])
def list_class_students_endpoint(
    class_id: int,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """List the students enrolled in a class."""
    return list_class_students(db, caller, class_id)


@classes_router.post("/{class_id}/students", response_model=EnrollmentResponse)
def enroll_student_endpoint(
    class_id: int,
    request: EnrollRequest,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """Enroll a student. Repeating the call changes nothing."""
    return enroll_student(db, caller, class_id, request.student_id)


@classes_router.get("/{class_id}/assessments", response_model=List[AssessmentResponse])
def list_assessments_endpoint(
    class_id: int,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    return list_assessments(db, caller, class_id)


@classes_router.post(
    "/{class_id}/assessments",
    response_model=AssessmentResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_assessment_endpoint(
    class_id: int,
    request: AssessmentRequest,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """Add an assessment to a class."""
    return create_assessment(db, caller, class_id, request.name, request.weight)


# ============== Student Endpoints ==============

@students_router.get("", response_model=List[StudentResponse])
def list_students_endpoint(
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """List the whole roster (teacher or admin)."""
    return list_students(db, caller)


@students_router.post("", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
def create_student_endpoint(
    request: CreateStudentRequest,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    return create_student(db, caller, request.first_name, request.last_name, request.pronoun)


# ============== Assessment Endpoints ==============

@assessments_router.put("/{assessment_id}", response_model=AssessmentResponse)
def update_assessment_endpoint(
    assessment_id: int,
    request: AssessmentRequest,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """Replace an assessment's name and weight."""
    return update_assessment(db, caller, assessment_id, request.name, request.weight)


@assessments_router.delete("/{assessment_id}", response_model=DeleteAssessmentResponse)
def delete_assessment_endpoint(
    assessment_id: int,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """Delete an assessment and all of its marks."""
    return delete_assessment(db, caller, assessment_id)


@assessments_router.get("/{assessment_id}/marks", response_model=List[MarkResponse])
def list_marks_endpoint(
    assessment_id: int,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """
    List marks for an assessment.

    Students only ever receive their own mark.
    """
    return list_marks(db, caller, assessment_id)


@assessments_router.post("/{assessment_id}/marks", response_model=MarkResponse)
def upsert_mark_endpoint(
    assessment_id: int,
    request: MarkRequest,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db),
):
    """
    Save a student's marks for an assessment.

    Creates the mark or replaces all eight fields of the existing one.
    """
    return upsert_mark(db, caller, assessment_id, request.student_id, request.components())
