from decimal import Decimal

import pytest

from results.exceptions import ConfigurationError, InvalidInput, NotFound
from results.models import Exam, Grade, GradeScale, Marks
from results.services.grades import calculate_course_grades, calculate_semester_grades, weighted_percentage
from results.services.marks import enter_marks


@pytest.fixture
def components(midterm, final_exam, course_a, make_schedule):
    """Midterm 30%, final 70%."""
    return make_schedule(midterm, course_a, weightage=30), make_schedule(final_exam, course_a, weightage=70)


def test_weighted_percentage_of_no_marks_is_zero():
    assert weighted_percentage([], {}) == Decimal("0")


def test_weighted_percentage_rejects_bad_weights(student, components):
    mid, _ = components
    marks = [enter_marks(None, student.id, mid.id, 50)]
    with pytest.raises(InvalidInput):
        weighted_percentage(marks, {mid.id: Decimal("0")})
    with pytest.raises(InvalidInput):
        weighted_percentage(marks, {mid.id: Decimal("-5")})


def test_weighted_percentage_scales_by_total_marks(student, midterm, course_a, make_schedule):
    quiz = make_schedule(midterm, course_a, total_marks=50)
    marks = [enter_marks(None, student.id, quiz.id, 40)]
    assert weighted_percentage(marks, {quiz.id: quiz.weightage}) == Decimal("80")


def test_weighted_course_grade(grade_scale, student, course_a, semester, register, components):
    mid, final = components
    register(student, course_a, semester)
    enter_marks(None, student.id, mid.id, 80)
    enter_marks(None, student.id, final.id, 90)

    result = calculate_course_grades(course_a.id, semester.id)

    assert result["total_success"] == 1
    assert result["course"]["code"] == "CS101"
    grade = Grade.objects.get(student=student, course=course_a, semester=semester)
    assert grade.marks == Decimal("87.00")
    assert grade.letter_grade == "A+"
    assert grade.grade_point == Decimal("4.00")
    assert grade.credit_hours == Decimal("3.0")


def test_missing_component_only_counts_what_was_sat(grade_scale, student, course_a, semester, register, components):
    mid, _ = components
    register(student, course_a, semester)
    enter_marks(None, student.id, mid.id, 80)

    calculate_course_grades(course_a.id, semester.id)

    grade = Grade.objects.get(student=student)
    assert grade.marks == Decimal("80.00")
    assert grade.letter_grade == "A"


def test_student_without_marks_gets_an_f(grade_scale, student, course_a, semester, register, components):
    register(student, course_a, semester)

    calculate_course_grades(course_a.id, semester.id)

    grade = Grade.objects.get(student=student)
    assert grade.marks == Decimal("0.00")
    assert grade.letter_grade == "F"


def test_percentage_is_truncated_before_lookup(grade_scale, student, course_a, semester, register, make_schedule):
    register(student, course_a, semester)
    for n, score in enumerate((85, 85, 84), start=1):
        quiz = Exam.objects.create(semester=semester, name=f"Quiz {n}", exam_type="quiz")
        enter_marks(None, student.id, make_schedule(quiz, course_a).id, score)

    calculate_course_grades(course_a.id, semester.id)

    grade = Grade.objects.get(student=student)
    assert grade.marks == Decimal("84.66")
    assert grade.letter_grade == "A"


def test_recalculation_is_idempotent(grade_scale, make_student, course_a, semester, register, components):
    mid, final = components
    for score in (45, 72):
        s = make_student()
        register(s, course_a, semester)
        enter_marks(None, s.id, mid.id, score)
        enter_marks(None, s.id, final.id, score)

    first = calculate_course_grades(course_a.id, semester.id)
    before = list(Grade.objects.order_by("id").values_list("id", "marks", "letter_grade"))
    second = calculate_course_grades(course_a.id, semester.id)
    after = list(Grade.objects.order_by("id").values_list("id", "marks", "letter_grade"))

    assert before == after
    assert first["grades"] == second["grades"]
    assert Grade.objects.count() == 2


def test_only_approved_registrations_are_graded(grade_scale, make_student, course_a, semester, register, components):
    approved, pending = make_student(), make_student()
    register(approved, course_a, semester)
    register(pending, course_a, semester, status="pending")

    calculate_course_grades(course_a.id, semester.id)

    assert list(Grade.objects.values_list("student_id", flat=True)) == [approved.id]


def test_exam_filter_limits_components(grade_scale, student, course_a, semester, register, components, midterm):
    mid, final = components
    register(student, course_a, semester)
    enter_marks(None, student.id, mid.id, 50)
    enter_marks(None, student.id, final.id, 100)

    calculate_course_grades(course_a.id, semester.id, exam_id=midterm.id)

    assert Grade.objects.get(student=student).marks == Decimal("50.00")


def test_malformed_student_is_reported_and_skipped(grade_scale, make_student, course_a, semester, register, components):
    mid, _ = components
    good, bad = make_student(), make_student()
    for s in (good, bad):
        register(s, course_a, semester)
        enter_marks(None, s.id, mid.id, 70)
    Marks.objects.filter(student=bad).update(total_marks=0)

    result = calculate_course_grades(course_a.id, semester.id)

    assert result["total_success"] == 1
    assert result["failed"][0]["student_id"] == bad.id
    assert "Total marks" in result["failed"][0]["error"]
    assert list(Grade.objects.values_list("student_id", flat=True)) == [good.id]


def test_scale_gap_aborts_the_course(db, student, course_a, semester, register, components):
    mid, _ = components
    GradeScale.objects.create(
        min_percentage=Decimal("0"), max_percentage=Decimal("49.99"), letter_grade="F", grade_point=Decimal("0")
    )
    GradeScale.objects.create(
        min_percentage=Decimal("80"), max_percentage=Decimal("100"), letter_grade="A", grade_point=Decimal("4")
    )
    register(student, course_a, semester)
    enter_marks(None, student.id, mid.id, 65)

    with pytest.raises(ConfigurationError):
        calculate_course_grades(course_a.id, semester.id)
    assert not Grade.objects.exists()


def test_empty_scale_aborts_the_course(db, student, course_a, semester, register, components):
    register(student, course_a, semester)
    with pytest.raises(ConfigurationError):
        calculate_course_grades(course_a.id, semester.id)


def test_course_grade_lookups(grade_scale, student, course_a, course_b, semester, register, components):
    with pytest.raises(NotFound):
        calculate_course_grades(course_a.id + 100, semester.id)
    with pytest.raises(NotFound):
        calculate_course_grades(course_a.id, semester.id + 100)
    with pytest.raises(NotFound, match="schedules"):
        calculate_course_grades(course_b.id, semester.id)
    with pytest.raises(NotFound, match="registered"):
        calculate_course_grades(course_a.id, semester.id)


def test_semester_grades_report_each_course(grade_scale, student, course_a, course_b, semester, register, components):
    mid, final = components
    register(student, course_a, semester)
    register(student, course_b, semester)
    enter_marks(None, student.id, mid.id, 60)
    enter_marks(None, student.id, final.id, 60)

    result = calculate_semester_grades(semester.id)

    by_code = {c["course_code"]: c for c in result["courses"]}
    assert by_code["CS101"]["status"] == "success"
    assert by_code["CS101"]["students_processed"] == 1
    assert by_code["MTH101"]["status"] == "failed"
    assert Grade.objects.filter(course=course_a).exists()
    assert not Grade.objects.filter(course=course_b).exists()


def test_semester_grades_report_scale_errors_per_course(db, student, course_a, semester, register, components):
    register(student, course_a, semester)

    result = calculate_semester_grades(semester.id)

    assert result["courses"][0]["status"] == "failed"
    assert "Grade scale is empty" in result["courses"][0]["error"]
