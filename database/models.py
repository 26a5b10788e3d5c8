"""
Database models for the Sharpmarks gradebook.
Defines the SQLAlchemy models for users, the student roster, classes,
enrollments, weighted assessments and per-student component marks.
"""
from enum import Enum as PyEnum
from sqlalchemy import (
    Column, Integer, String, Float, DateTime, Enum, ForeignKey,
    UniqueConstraint, CheckConstraint
)
from sqlalchemy.orm import relationship, declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class UserRole(str, PyEnum):
    """User roles enum."""
    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


PRONOUN_LABELS = {1: "he/him", 2: "she/her", 3: "they/them"}

MARK_COMPONENTS = (
    "knowledge_and_understanding",
    "thinking_and_inquiry",
    "application",
    "communication",
)

MARK_FIELDS = tuple(
    f"{component}_{part}"
    for component in MARK_COMPONENTS
    for part in ("received", "out_of")
)


class User(Base):
    """
    Users table - login identities for admins, teachers and students.

    Attributes:
        id: Unique identifier
        email: Login email, unique
        password_hash: werkzeug password hash
        role: 'admin', 'teacher' or 'student'
        student_id: Roster entry a student account reads marks for
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(Enum("admin", "teacher", "student", name="user_role"), nullable=False)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="SET NULL"), nullable=True, unique=True)
    created_at = Column(DateTime, nullable=False, default=func.now())

    # Relationships
    classes = relationship("Class", back_populates="teacher")
    student = relationship("Student", back_populates="account")

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "role": self.role,
            "student_id": self.student_id,
        }


class Student(Base):
    """
    Students table - roster entries, not login identities.

    Attributes:
        id: Unique identifier
        first_name: Given name
        last_name: Family name
        pronoun: 1 = he/him, 2 = she/her, 3 = they/them
    """
    __tablename__ = "students"
    __table_args__ = (
        CheckConstraint("pronoun IN (1, 2, 3)", name="ck_students_pronoun"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    pronoun = Column(Integer, nullable=False, default=3)

    # Relationships
    enrollments = relationship("Enrollment", back_populates="student")
    account = relationship("User", back_populates="student", uselist=False)

    def __repr__(self):
        return f"<Student(id={self.id}, name='{self.first_name} {self.last_name}')>"

    def to_dict(self):
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "pronoun": self.pronoun,
            "pronoun_label": PRONOUN_LABELS.get(self.pronoun),
        }


class Class(Base):
    """
    Classes table. Every class has exactly one owning teacher.

    Attributes:
        id: Unique identifier
        name: Class name (e.g., "Bio101")
        description: Free text
        teacher_id: Owning user; scopes teacher access
    """
    __tablename__ = "classes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(String(1000), nullable=True)
    teacher_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Relationships
    teacher = relationship("User", back_populates="classes")
    enrollments = relationship("Enrollment", back_populates="class_", cascade="all, delete-orphan")
    assessments = relationship("Assessment", back_populates="class_", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Class(id={self.id}, name='{self.name}', teacher_id={self.teacher_id})>"

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "teacher_id": self.teacher_id,
        }


class Enrollment(Base):
    """
    Association table linking roster students to classes.
    The composite primary key makes each (student, class) pair unique.
    """
    __tablename__ = "enrollments"

    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), primary_key=True)
    class_id = Column(Integer, ForeignKey("classes.id", ondelete="CASCADE"), primary_key=True)

    # Relationships
    student = relationship("Student", back_populates="enrollments")
    class_ = relationship("Class", back_populates="enrollments")

    def __repr__(self):
        return f"<Enrollment(student_id={self.student_id}, class_id={self.class_id})>"


class Assessment(Base):
    """
    Assessments table.

    Attributes:
        id: Unique identifier
        class_id: Owning class
        name: Assessment name (e.g., "Quiz1")
        weight: Relative contribution factor, positive
    """
    __tablename__ = "assessments"
    __table_args__ = (
        CheckConstraint("weight > 0", name="ck_assessments_weight_positive"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    class_id = Column(Integer, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    weight = Column(Float, nullable=False, default=1)

    # Relationships
    class_ = relationship("Class", back_populates="assessments")
    marks = relationship("Mark", back_populates="assessment", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Assessment(id={self.id}, class_id={self.class_id}, name='{self.name}')>"

    def to_dict(self):
        return {
            "id": self.id,
            "class_id": self.class_id,
            "name": self.name,
            "weight": self.weight,
        }


class Mark(Base):
    """
    Marks table - one row per (assessment, student), four component pairs.
    received <= out_of is expected but not enforced.
    """
    __tablename__ = "marks"
    __table_args__ = (
        UniqueConstraint("assessment_id", "student_id", name="uq_marks_assessment_student"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    assessment_id = Column(Integer, ForeignKey("assessments.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    knowledge_and_understanding_received = Column(Float, nullable=False, default=0)
    knowledge_and_understanding_out_of = Column(Float, nullable=False, default=0)
    thinking_and_inquiry_received = Column(Float, nullable=False, default=0)
    thinking_and_inquiry_out_of = Column(Float, nullable=False, default=0)
    application_received = Column(Float, nullable=False, default=0)
    application_out_of = Column(Float, nullable=False, default=0)
    communication_received = Column(Float, nullable=False, default=0)
    communication_out_of = Column(Float, nullable=False, default=0)
    updated_at = Column(DateTime, nullable=False, default=func.now(), onupdate=func.now())

    # Relationships
    assessment = relationship("Assessment", back_populates="marks")
    student = relationship("Student")

    def __repr__(self):
        return f"<Mark(assessment_id={self.assessment_id}, student_id={self.student_id})>"

    def components(self):
        """Return the eight component fields as a plain dict."""
        return {field: getattr(self, field) for field in MARK_FIELDS}

    def to_dict(self):
        """Convert mark to dictionary for API responses."""
        data = {
            "id": self.id,
            "assessment_id": self.assessment_id,
            "student_id": self.student_id,
        }
        data.update(self.components())

        percentages = {}
        total_received = total_out_of = 0.0
        for component in MARK_COMPONENTS:
            received = getattr(self, f"{component}_received") or 0.0
            out_of = getattr(self, f"{component}_out_of") or 0.0
            percentages[component] = round(received / out_of * 100, 2) if out_of else None
            total_received += received
            total_out_of += out_of
        percentages["overall"] = round(total_received / total_out_of * 100, 2) if total_out_of else None
        data["percentage"] = percentages
        data["updated_at"] = self.updated_at.isoformat() if self.updated_at else None
        return data
