"""
Seed data script for the Sharpmarks gradebook.
Creates sample data for testing and demonstration.

Run with `python -m database.seed`.
"""
import random
from typing import Dict, Any

from sqlalchemy.orm import Session
from werkzeug.security import generate_password_hash

from .models import User, Student, Class, Enrollment, Assessment, Mark, MARK_COMPONENTS

DEMO_PASSWORD = "sharpmarks"


def seed_database(db: Session) -> Dict[str, Any]:
    """
    Populate the database with sample data. Existing rows are removed.

    Returns:
        The created rows, grouped by kind
    """
    # Clear existing data
    db.query(Mark).delete()
    db.query(Assessment).delete()
    db.query(Enrollment).delete()
    db.query(Class).delete()
    db.query(User).delete()
    db.query(Student).delete()

    password_hash = generate_password_hash(DEMO_PASSWORD)

    # Roster
    students = [
        Student(first_name="Miguel", last_name="Ferreira", pronoun=1),
        Student(first_name="Ana", last_name="Costa", pronoun=2),
        Student(first_name="Pedro", last_name="Almeida", pronoun=1),
        Student(first_name="Sam", last_name="Rivera", pronoun=3),
    ]
    db.add_all(students)
    db.flush()

    # Accounts
    admin = User(email="admin@sharpmarks.test", password_hash=password_hash, role="admin")
    teachers = [
        User(email="silva@sharpmarks.test", password_hash=password_hash, role="teacher"),
        User(email="santos@sharpmarks.test", password_hash=password_hash, role="teacher"),
    ]
    student_users = [
        User(
            email=f"{s.first_name.lower()}@sharpmarks.test",
            password_hash=password_hash,
            role="student",
            student_id=s.id,
        )
        for s in students
    ]
    db.add_all([admin, *teachers, *student_users])
    db.flush()

    # Classes, one per teacher
    classes = [
        Class(name="Bio101", description="Introductory biology", teacher_id=teachers[0].id),
        Class(name="Chem201", description="Organic chemistry", teacher_id=teachers[1].id),
    ]
    db.add_all(classes)
    db.flush()

    # First three students in Bio101, last two in Chem201
    enrollments = [
        Enrollment(student_id=students[0].id, class_id=classes[0].id),
        Enrollment(student_id=students[1].id, class_id=classes[0].id),
        Enrollment(student_id=students[2].id, class_id=classes[0].id),
        Enrollment(student_id=students[2].id, class_id=classes[1].id),
        Enrollment(student_id=students[3].id, class_id=classes[1].id),
    ]
    db.add_all(enrollments)
    db.flush()

    assessments = [
        Assessment(class_id=classes[0].id, name="Quiz1", weight=10),
        Assessment(class_id=classes[0].id, name="Unit Test", weight=30),
        Assessment(class_id=classes[1].id, name="Lab Report", weight=20),
    ]
    db.add_all(assessments)
    db.flush()

    marks = []
    for assessment in assessments:
        for enrollment in enrollments:
            if enrollment.class_id != assessment.class_id:
                continue
            values = {}
            for component in MARK_COMPONENTS:
                values[f"{component}_out_of"] = 10.0
                values[f"{component}_received"] = float(random.randint(5, 10))
            marks.append(Mark(assessment_id=assessment.id, student_id=enrollment.student_id, **values))
    db.add_all(marks)
    db.commit()

    return {
        "admin": admin,
        "teachers": teachers,
        "students": students,
        "student_users": student_users,
        "classes": classes,
        "assessments": assessments,
        "marks": marks,
    }


if __name__ == "__main__":
    from config import get_settings
    from .connection import Database

    database = Database(get_settings().database_url)
    print("Initializing database...")
    database.init_db()
    print("Seeding database...")
    with database.session() as db:
        created = seed_database(db)
        print("Database seeded successfully!")
        print(f"  - 1 admin, {len(created['teachers'])} teachers, {len(created['student_users'])} student accounts")
        print(f"  - {len(created['students'])} students, {len(created['classes'])} classes")
        print(f"  - {len(created['assessments'])} assessments, {len(created['marks'])} marks")
        print(f"All demo accounts use the password '{DEMO_PASSWORD}'.")
