import itertools
from decimal import Decimal

import pytest

from academics.models import Course, Department, Program, Semester, Session
from results.models import Exam, ExamSchedule, Grade
from results.services.grade_scale import seed_default_scale
from students.models import CourseRegistration, Student


@pytest.fixture
def grade_scale(db):
    seed_default_scale()


@pytest.fixture
def department(db):
    return Department.objects.create(name="Computer Science")


@pytest.fixture
def program(department):
    return Program.objects.create(department=department, name="BS Computer Science", total_semesters=8)


@pytest.fixture
def session(db):
    return Session.objects.create(start_year=2023)


@pytest.fixture
def semester(program, session):
    return Semester.objects.create(program=program, session=session, number=1)


@pytest.fixture
def next_semester(program, session):
    return Semester.objects.create(program=program, session=session, number=2)


@pytest.fixture
def course_a(db):
    return Course.objects.create(code="CS101", title="Programming Fundamentals", credit_hours=3)


@pytest.fixture
def course_b(db):
    return Course.objects.create(code="MTH101", title="Calculus I", credit_hours=4)


@pytest.fixture
def make_student(program):
    counter = itertools.count(1)

    def _make(**kwargs):
        n = next(counter)
        fields = {
            "program": program,
            "name": f"Student {n}",
            "registration_no": f"REG-2023-{n:03d}",
            "roll_no": f"CS23-{n:03d}",
        }
        fields.update(kwargs)
        return Student.objects.create(**fields)

    return _make


@pytest.fixture
def student(make_student):
    return make_student(name="Ali Khan")


@pytest.fixture
def register():
    def _register(student, course, semester, status="approved"):
        return CourseRegistration.objects.create(student=student, course=course, semester=semester, status=status)

    return _register


@pytest.fixture
def midterm(semester):
    return Exam.objects.create(semester=semester, name="Midterm Fall 2023", exam_type="midterm")


@pytest.fixture
def final_exam(semester):
    return Exam.objects.create(semester=semester, name="Final Fall 2023", exam_type="final")


@pytest.fixture
def make_schedule():
    def _make(exam, course, weightage=100, total_marks=100):
        return ExamSchedule.objects.create(
            exam=exam,
            course=course,
            weightage=Decimal(str(weightage)),
            total_marks=Decimal(str(total_marks)),
        )

    return _make


@pytest.fixture
def schedule(midterm, course_a, make_schedule):
    return make_schedule(midterm, course_a)


@pytest.fixture
def make_grade():
    """Write a Grade row directly, for GPA and processing tests."""

    def _make(student, course, semester, letter, point, credits=None):
        return Grade.objects.create(
            student=student,
            course=course,
            semester=semester,
            marks=Decimal("0"),
            letter_grade=letter,
            grade_point=Decimal(str(point)),
            credit_hours=Decimal(str(credits if credits is not None else course.credit_hours)),
        )

    return _make
