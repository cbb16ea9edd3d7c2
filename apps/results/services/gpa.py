import logging
from collections import OrderedDict
from decimal import Decimal

from django.db import transaction
from django.db.models import Q

from academics.models import Semester
from results.exceptions import InvalidInput, NotFound
from results.models import Grade, SemesterResult
from results.services import q2

logger = logging.getLogger(__name__)

DEFAULT_CREDIT_HOURS = Decimal("3")


def _accumulate(grades):
    """Return (total_points, total_credits, course rows) for Grade rows."""
    total_points = Decimal("0")
    total_credits = Decimal("0")
    courses = []

    for g in grades:
        credits = Decimal(g.credit_hours) if g.credit_hours else DEFAULT_CREDIT_HOURS
        points = Decimal(g.grade_point or 0)

        total_points += points * credits
        total_credits += credits

        courses.append({
            "course_id": g.course_id,
            "course_code": g.course.code,
            "course_title": g.course.title,
            "marks": g.marks,
            "grade": g.letter_grade,
            "grade_point": points,
            "credit_hours": credits,
            "quality_points": points * credits,
        })

    return total_points, total_credits, courses


def _mean(total_points, total_credits) -> Decimal:
    if total_credits > 0:
        return total_points / total_credits
    return Decimal("0")


def compute_sgpa(student_id, semester_id):
    """Credit-weighted grade point average of one semester. No grades -> 0."""
    grades = (
        Grade.objects.filter(student_id=student_id, semester_id=semester_id)
        .select_related("course")
        .order_by("course__code")
    )
    total_points, total_credits, courses = _accumulate(grades)

    return {
        "sgpa": q2(_mean(total_points, total_credits)),
        "total_credits": total_credits,
        "total_grade_points": total_points,
        "courses": courses,
    }


def _up_to(semester):
    """Q matching grades of semesters that come no later than semester."""
    year = semester.session.start_year
    return Q(semester__session__start_year__lt=year) | Q(
        semester__session__start_year=year, semester__number__lte=semester.number
    )


def compute_cgpa(student_id, up_to=None, published_only=False):
    """
    Credit-weighted mean over the courses the student has a grade for.

    Point and credit totals are summed across semesters and divided once,
    never averaged over SGPAs.

    up_to: a Semester; later semesters are left out, so a semester's CGPA
    does not move when a following semester is graded.
    published_only: only semesters whose results are published count.
    """
    grades = Grade.objects.filter(student_id=student_id)
    if up_to is not None:
        grades = grades.filter(_up_to(up_to))
    if published_only:
        grades = grades.filter(semester__results_published=True)
    grades = grades.select_related("course", "semester", "semester__session").order_by(
        "semester__session__start_year", "semester__number", "course__code"
    )

    by_semester = OrderedDict()
    for g in grades:
        by_semester.setdefault(g.semester_id, []).append(g)

    total_points = Decimal("0")
    total_credits = Decimal("0")
    semesters = []

    for semester_id, rows in by_semester.items():
        points, credits, courses = _accumulate(rows)
        total_points += points
        total_credits += credits

        semester = rows[0].semester
        semesters.append({
            "semester_id": semester_id,
            "semester_name": str(semester),
            "semester_number": semester.number,
            "sgpa": q2(_mean(points, credits)),
            "credits": credits,
            "total_grade_points": points,
            "courses": courses,
        })

    return {
        "cgpa": q2(_mean(total_points, total_credits)),
        "total_credits": total_credits,
        "total_grade_points": total_points,
        "total_semesters": len(semesters),
        "semesters": semesters,
    }


def calculate_gpa_for_semester(semester_id):
    """
    Upsert SGPA/CGPA of every student graded in the semester, all in one
    transaction. New rows start as pending; an existing status is kept.
    """
    if not semester_id:
        raise InvalidInput("semester_id is required")

    semester = Semester.objects.select_related("session").filter(id=semester_id).first()
    if not semester:
        raise NotFound("Semester not found")

    graded = (
        Grade.objects.filter(semester=semester)
        .select_related("student")
        .order_by("student__roll_no")
    )
    students = list(OrderedDict((g.student_id, g.student) for g in graded).values())
    if not students:
        raise NotFound("No students with grades found for this semester")

    results = []
    with transaction.atomic():
        for student in students:
            sgpa_data = compute_sgpa(student.id, semester.id)
            cgpa_data = compute_cgpa(student.id, up_to=semester)

            SemesterResult.objects.update_or_create(
                student=student,
                semester=semester,
                defaults={
                    "sgpa": sgpa_data["sgpa"],
                    "cgpa": cgpa_data["cgpa"],
                    "total_credits": sgpa_data["total_credits"],
                },
            )

            results.append({
                "student_id": student.id,
                "name": student.name,
                "roll_no": student.roll_no,
                "sgpa": sgpa_data["sgpa"],
                "cgpa": cgpa_data["cgpa"],
                "credits": sgpa_data["total_credits"],
            })

    sgpas = [r["sgpa"] for r in results]
    statistics = {
        "highest_sgpa": max(sgpas),
        "lowest_sgpa": min(sgpas),
        "average_sgpa": q2(sum(sgpas) / len(sgpas)),
        "total_students": len(results),
    }

    logger.info(
        "GPA calculated for semester %s: %d students, average SGPA %s",
        semester.id, len(results), statistics["average_sgpa"],
    )

    return {
        "message": f"GPA calculated for {len(results)} students",
        "semester_id": semester.id,
        "statistics": statistics,
        "results": results,
    }
