"""
Shared fixtures: an in-memory SQLite store per test and a small school.
"""
from contextlib import contextmanager
from types import SimpleNamespace

import pytest
from sqlalchemy import event
from werkzeug.security import generate_password_hash

from database import Database, User, Student, Class, Enrollment, Assessment, Mark
from services import AdminCaller, TeacherCaller, StudentCaller

PASSWORD = "correct-horse"


def full_marks(received: float, out_of: float = 10.0) -> dict:
    """Component dict with the same value in every pair."""
    values = {}
    for component in (
        "knowledge_and_understanding",
        "thinking_and_inquiry",
        "application",
        "communication",
    ):
        values[f"{component}_received"] = received
        values[f"{component}_out_of"] = out_of
    return values


@pytest.fixture
def database():
    """Fresh in-memory database."""
    database = Database("sqlite://")
    database.init_db()
    yield database
    database.drop_all()
    database.dispose()


@pytest.fixture
def db(database):
    """Session on the test database."""
    with database.session() as session:
        yield session


def build_school(db) -> SimpleNamespace:
    """
    Two teachers, one class each, and a marked quiz in t1's class.

    - Bio101 (owner t1): students ana and pedro enrolled, Quiz1 marked for both
    - Chem201 (owner t2): nobody enrolled, Lab1 not marked
    - sam is on the roster but in no class
    """
    password_hash = generate_password_hash(PASSWORD)

    ana = Student(first_name="Ana", last_name="Costa", pronoun=2)
    pedro = Student(first_name="Pedro", last_name="Almeida", pronoun=1)
    sam = Student(first_name="Sam", last_name="Rivera", pronoun=3)
    db.add_all([ana, pedro, sam])
    db.flush()

    admin = User(email="admin@school.test", password_hash=password_hash, role="admin")
    t1 = User(email="t1@school.test", password_hash=password_hash, role="teacher")
    t2 = User(email="t2@school.test", password_hash=password_hash, role="teacher")
    ana_user = User(email="ana@school.test", password_hash=password_hash, role="student", student_id=ana.id)
    pedro_user = User(email="pedro@school.test", password_hash=password_hash, role="student", student_id=pedro.id)
    db.add_all([admin, t1, t2, ana_user, pedro_user])
    db.flush()

    bio = Class(name="Bio101", description="Biology", teacher_id=t1.id)
    chem = Class(name="Chem201", description="Chemistry", teacher_id=t2.id)
    db.add_all([bio, chem])
    db.flush()

    db.add_all([
        Enrollment(student_id=ana.id, class_id=bio.id),
        Enrollment(student_id=pedro.id, class_id=bio.id),
    ])

    quiz = Assessment(class_id=bio.id, name="Quiz1", weight=10)
    lab = Assessment(class_id=chem.id, name="Lab1", weight=25)
    db.add_all([quiz, lab])
    db.flush()

    db.add_all([
        Mark(assessment_id=quiz.id, student_id=ana.id, **full_marks(8)),
        Mark(assessment_id=quiz.id, student_id=pedro.id, **full_marks(6)),
    ])
    db.commit()

    return SimpleNamespace(
        admin=AdminCaller(user_id=admin.id),
        t1=TeacherCaller(user_id=t1.id),
        t2=TeacherCaller(user_id=t2.id),
        ana=StudentCaller(user_id=ana_user.id, student_id=ana.id),
        pedro=StudentCaller(user_id=pedro_user.id, student_id=pedro.id),
        ana_id=ana.id,
        pedro_id=pedro.id,
        sam_id=sam.id,
        admin_user_id=admin.id,
        t1_user_id=t1.id,
        t2_user_id=t2.id,
        bio_id=bio.id,
        chem_id=chem.id,
        quiz_id=quiz.id,
        lab_id=lab.id,
    )


@pytest.fixture
def school(db):
    return build_school(db)


@contextmanager
def competing_write(engine, table: str, sql: str, params: tuple):
    """
    Run `sql` on the raw connection right before the next INSERT into
    `table`, as another writer landing between our checks and our write.

    Yields the list of intercepted statements (empty if none fired).
    """
    fired = []

    def before_insert(conn, cursor, statement, parameters, context, executemany):
        if not fired and statement.lstrip().upper().startswith(f"INSERT INTO {table.upper()}"):
            fired.append(statement)
            cursor.connection.execute(sql, params)

    event.listen(engine, "before_cursor_execute", before_insert)
    try:
        yield fired
    finally:
        event.remove(engine, "before_cursor_execute", before_insert)
