from decimal import Decimal

import pytest

from academics.models import Course, Semester, Session
from results.exceptions import NotFound
from results.models import SemesterResult
from results.services.gpa import calculate_gpa_for_semester, compute_cgpa, compute_sgpa


def test_sgpa_is_credit_weighted(student, course_a, course_b, semester, make_grade):
    make_grade(student, course_a, semester, "A", "4.00")
    make_grade(student, course_b, semester, "C", "2.00")

    data = compute_sgpa(student.id, semester.id)

    # (3 * 4.0 + 4 * 2.0) / 7 = 2.857...
    assert data["sgpa"] == Decimal("2.86")
    assert data["total_credits"] == Decimal("7")
    assert data["total_grade_points"] == Decimal("20")
    assert [c["course_code"] for c in data["courses"]] == ["CS101", "MTH101"]
    assert data["courses"][1]["quality_points"] == Decimal("8")


def test_sgpa_without_grades_is_zero(student, semester):
    data = compute_sgpa(student.id, semester.id)
    assert data["sgpa"] == Decimal("0.00")
    assert data["courses"] == []


def test_cgpa_is_not_the_mean_of_sgpas(student, semester, next_semester, make_grade):
    seminar = Course.objects.create(code="CS100", title="Orientation Seminar", credit_hours=2)
    lab = Course.objects.create(code="CS201", title="Data Structures", credit_hours=3)
    theory = Course.objects.create(code="CS202", title="Discrete Structures", credit_hours=3)

    make_grade(student, seminar, semester, "A", "4.00")
    make_grade(student, lab, next_semester, "C", "2.00")
    make_grade(student, theory, next_semester, "C", "2.00")

    data = compute_cgpa(student.id)

    # (2*4 + 6*2) / 8 = 2.50, while (4.00 + 2.00) / 2 would be 3.00
    assert data["cgpa"] == Decimal("2.50")
    assert data["total_credits"] == Decimal("8")
    assert data["total_semesters"] == 2
    assert [s["semester_number"] for s in data["semesters"]] == [1, 2]
    assert [s["sgpa"] for s in data["semesters"]] == [Decimal("4.00"), Decimal("2.00")]


def test_calculate_gpa_for_semester_upserts_results(make_student, course_a, course_b, semester, make_grade):
    strong, weak = make_student(), make_student()
    for course in (course_a, course_b):
        make_grade(strong, course, semester, "A", "4.00")
        make_grade(weak, course, semester, "D", "1.00")

    result = calculate_gpa_for_semester(semester.id)

    assert result["statistics"] == {
        "highest_sgpa": Decimal("4.00"),
        "lowest_sgpa": Decimal("1.00"),
        "average_sgpa": Decimal("2.50"),
        "total_students": 2,
    }
    sr = SemesterResult.objects.get(student=strong, semester=semester)
    assert sr.status == "pending"
    assert sr.sgpa == Decimal("4.00")
    assert sr.cgpa == Decimal("4.00")
    assert sr.total_credits == Decimal("7")


def test_recalculating_gpa_keeps_status(student, course_a, semester, make_grade):
    grade = make_grade(student, course_a, semester, "B", "3.00")
    calculate_gpa_for_semester(semester.id)
    SemesterResult.objects.filter(student=student).update(status="pass")

    grade.grade_point = Decimal("3.50")
    grade.save()
    calculate_gpa_for_semester(semester.id)

    sr = SemesterResult.objects.get(student=student)
    assert sr.status == "pass"
    assert sr.sgpa == Decimal("3.50")
    assert SemesterResult.objects.count() == 1


def test_calculate_gpa_needs_grades(semester):
    with pytest.raises(NotFound):
        calculate_gpa_for_semester(semester.id)
    with pytest.raises(NotFound):
        calculate_gpa_for_semester(semester.id + 100)


def test_semester_cgpa_ignores_later_semesters(student, course_a, course_b, semester, next_semester, make_grade):
    make_grade(student, course_a, semester, "A", "4.00")
    make_grade(student, course_b, next_semester, "F", "0.00")

    calculate_gpa_for_semester(semester.id)
    calculate_gpa_for_semester(next_semester.id)

    first = SemesterResult.objects.get(student=student, semester=semester)
    second = SemesterResult.objects.get(student=student, semester=next_semester)
    assert first.cgpa == Decimal("4.00")
    # (3 * 4.0 + 4 * 0.0) / 7
    assert second.cgpa == Decimal("1.71")


def test_cgpa_up_to_spans_sessions(student, program, semester, course_a, course_b, make_grade):
    later = Semester.objects.create(program=program, session=Session.objects.create(start_year=2024), number=1)
    make_grade(student, course_a, semester, "B", "3.00")
    make_grade(student, course_b, later, "A", "4.00")

    assert compute_cgpa(student.id, up_to=semester)["total_semesters"] == 1
    assert compute_cgpa(student.id, up_to=later)["total_semesters"] == 2
