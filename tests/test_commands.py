from decimal import Decimal
from io import StringIO

import openpyxl
import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from academics.models import Course
from results.models import Grade, GradeScale, Marks, SemesterResult
from results.services.marks import enter_marks
from students.models import CourseRegistration, Student


def _workbook(path, rows):
    wb = openpyxl.Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    wb.save(path)
    return str(path)


def test_seed_grade_scale(db):
    out = StringIO()
    call_command("seed_grade_scale", stdout=out)
    call_command("seed_grade_scale", stdout=out)

    assert GradeScale.objects.count() == 9
    assert "Installed default grade scale" in out.getvalue()
    assert "already present" in out.getvalue()


def test_import_grade_scale(db, tmp_path):
    path = _workbook(tmp_path / "scale.xlsx", [
        ["Min Percent", "Max Percent", "Letter Grade", "Grade Point", "Remarks"],
        [80, 100, "A", 4, "Excellent"],
        [50, 79.99, "P", 2, "Pass"],
        [0, 49.99, "F", 0, "Fail"],
    ])

    call_command("import_grade_scale", path, stdout=StringIO())

    assert list(GradeScale.objects.values_list("letter_grade", flat=True)) == ["A", "P", "F"]


def test_import_grade_scale_rejects_gaps(grade_scale, tmp_path):
    path = _workbook(tmp_path / "scale.xlsx", [
        ["min", "max", "grade", "gp"],
        [60, 100, "P", 4],
        [0, 49.99, "F", 0],
    ])

    with pytest.raises(CommandError, match="Gap"):
        call_command("import_grade_scale", path, stdout=StringIO())
    assert GradeScale.objects.count() == 9


def test_import_grade_scale_missing_columns(db, tmp_path):
    path = _workbook(tmp_path / "scale.xlsx", [["min", "max"], [0, 100]])

    with pytest.raises(CommandError, match="Missing columns"):
        call_command("import_grade_scale", path, stdout=StringIO())


def test_import_marks(admin_user, make_student, schedule, tmp_path):
    students = [make_student() for _ in range(3)]
    path = _workbook(tmp_path / "marks.xlsx", [
        ["Roll No", "Obtained Marks"],
        [students[0].roll_no, 77],
        [students[1].roll_no, 120],
        [None, None],
        [students[2].roll_no, 45.5],
    ])
    out = StringIO()

    call_command(
        "import_marks", path, schedule=schedule.id, entered_by=admin_user.username, stdout=out
    )

    assert Marks.objects.filter(exam_schedule=schedule).count() == 2
    assert Marks.objects.get(student=students[2]).obtained_marks == Decimal("45.5")
    assert Marks.objects.get(student=students[0]).entered_by == admin_user
    assert "Saved=2, Errors=1" in out.getvalue()
    assert students[1].roll_no in out.getvalue()


def test_import_marks_unknown_grader(db, schedule, tmp_path):
    path = _workbook(tmp_path / "marks.xlsx", [["roll_no", "marks"], ["X", 1]])

    with pytest.raises(CommandError, match="User not found"):
        call_command("import_marks", path, schedule=schedule.id, entered_by="nobody")


def test_process_results_command(grade_scale, student, course_a, semester, register, schedule):
    register(student, course_a, semester)
    enter_marks(None, student.id, schedule.id, 72)
    out = StringIO()

    call_command("process_results", semester.id, "--calculate-grades", stdout=out)

    assert Grade.objects.get(student=student).letter_grade == "B"
    assert SemesterResult.objects.get(student=student).status == "pass"
    assert "CS101: 1 graded, 0 failed" in out.getvalue()
    assert "pass=1" in out.getvalue()


def test_process_results_command_reports_errors(semester):
    with pytest.raises(CommandError, match="No students with grades"):
        call_command("process_results", semester.id, stdout=StringIO())


def test_import_courses(db, tmp_path):

    Course.objects.create(code="CS101", title="Intro to Computing", credit_hours=3)
    path = _workbook(tmp_path / "courses.xlsx", [
        ["Course Code", "Course Title", "Credit Hours"],
        ["cs101", "Programming Fundamentals", 4],
        ["MTH101", "Calculus I", 3],
        ["PHY101", "Physics", "three"],
        ["", "Untitled", 3],
    ])
    out = StringIO()

    call_command("import_courses", path, stdout=out)

    assert Course.objects.get(code="CS101").title == "Programming Fundamentals"
    assert Course.objects.get(code="CS101").credit_hours == Decimal("4")
    assert Course.objects.filter(code="MTH101").exists()
    assert not Course.objects.filter(code="PHY101").exists()
    assert "Created=1, Updated=1, Skipped=1, Errors=1" in out.getvalue()


def test_import_students_with_registrations(program, session, course_a, course_b, tmp_path):

    path = _workbook(tmp_path / "students.xlsx", [
        ["Roll No", "Registration No", "Name", "Father Name"],
        ["CS23-101", "REG-2023-101", "Sana Iqbal", "Iqbal Hussain"],
        ["CS23-102", "REG-2023-102", "Usman Ali", None],
        ["CS23-103", None, "No Registration", "X"],
    ])
    out = StringIO()

    call_command(
        "import_students", path,
        program="Computer Science", session=2023, semester=1, courses="CS101, MTH101",
        stdout=out,
    )

    assert Student.objects.count() == 2
    sana = Student.objects.get(roll_no="CS23-101")
    assert sana.department == program.department
    assert sana.father_name == "Iqbal Hussain"
    assert CourseRegistration.objects.filter(status="approved").count() == 4
    assert "created=2" in out.getvalue()
    assert "errors=1" in out.getvalue()

    # re-import is an update, not a duplicate
    call_command(
        "import_students", path,
        program="Computer Science", session=2023, semester=1, courses="CS101,MTH101",
        stdout=StringIO(),
    )
    assert Student.objects.count() == 2
    assert CourseRegistration.objects.count() == 4


def test_import_students_unknown_course(program, session, course_a, tmp_path):
    path = _workbook(tmp_path / "students.xlsx", [["roll_no", "registration_no", "name"]])

    with pytest.raises(CommandError, match="XYZ999"):
        call_command(
            "import_students", path,
            program="BS Computer Science", session=2023, semester=1, courses="CS101,XYZ999",
        )
