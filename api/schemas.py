"""
Pydantic schemas for API requests and responses.
"""
from typing import Optional, Dict
from pydantic import AliasChoices, BaseModel, Field, field_validator

from database import MARK_FIELDS
from services.marks import coerce_mark_value


# Request schemas
class RegisterRequest(BaseModel):
    """Request to create a login account."""
    email: str = Field(..., description="Login email", min_length=3, max_length=255)
    password: str = Field(..., description="Plain password, min 8 characters")
    role: str = Field(..., description="'admin', 'teacher' or 'student'")
    student_id: Optional[int] = Field(None, description="Roster student to link (student accounts)")


class LoginRequest(BaseModel):
    """Login with email and password."""
    email: str
    password: str


class CreateClassRequest(BaseModel):
    """Request to create a class."""
    name: str = Field(..., description="Class name", min_length=1, max_length=255)
    description: Optional[str] = Field(None, description="Class description", max_length=1000)
    teacher_id: Optional[int] = Field(None, description="Owning teacher (admin only)")


class CreateStudentRequest(BaseModel):
    """Request to add a student to the roster."""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    pronoun: int = Field(
        3,
        ge=1,
        le=3,
        description="1 = he/him, 2 = she/her, 3 = they/them",
        validation_alias=AliasChoices("pronoun", "pronouns"),
    )


class EnrollRequest(BaseModel):
    """Request to enroll a roster student in a class."""
    student_id: int


class AssessmentRequest(BaseModel):
    """Create or replace an assessment."""
    name: str = Field(..., min_length=1, max_length=255)
    weight: float = Field(..., gt=0, description="Relative weight, positive")


class MarkRequest(BaseModel):
    """
    Marks for one student. Missing, blank or non-numeric components are
    stored as 0.
    """
    student_id: int
    knowledge_and_understanding_received: float = 0
    knowledge_and_understanding_out_of: float = 0
    thinking_and_inquiry_received: float = 0
    thinking_and_inquiry_out_of: float = 0
    application_received: float = 0
    application_out_of: float = 0
    communication_received: float = 0
    communication_out_of: float = 0

    @field_validator(*MARK_FIELDS, mode="before")
    @classmethod
    def coerce_component(cls, value):
        return coerce_mark_value(value)

    def components(self) -> Dict[str, float]:
        return {field: getattr(self, field) for field in MARK_FIELDS}


# Response schemas
class UserResponse(BaseModel):
    """User information response."""
    id: int
    email: str
    role: str
    student_id: Optional[int] = None


class TokenResponse(BaseModel):
    """Login response."""
    message: str
    user_id: int
    role: str
    token: str
    token_type: str = "bearer"


class ClassResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    teacher_id: int


class StudentResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    pronoun: int
    pronoun_label: Optional[str]


class EnrollmentResponse(BaseModel):
    class_id: int
    student_id: int
    created: bool


class AssessmentResponse(BaseModel):
    id: int
    class_id: int
    name: str
    weight: float


class MarkResponse(BaseModel):
    """A stored mark with per-component percentages."""
    id: int
    assessment_id: int
    student_id: int
    knowledge_and_understanding_received: float
    knowledge_and_understanding_out_of: float
    thinking_and_inquiry_received: float
    thinking_and_inquiry_out_of: float
    application_received: float
    application_out_of: float
    communication_received: float
    communication_out_of: float
    percentage: Dict[str, Optional[float]]
    updated_at: Optional[str]


class DeleteAssessmentResponse(BaseModel):
    id: int
    deleted: bool
    marks_deleted: int


class ErrorResponse(BaseModel):
    """Error response."""
    detail: str
