from decimal import Decimal

from django.db.models import Avg, Count, Max, Min, Q

from academics.models import Semester
from results.conf import get_setting
from results.exceptions import Forbidden, InvalidInput, NotFound
from results.models import Grade, SemesterResult
from results.services import q2
from results.services.gpa import compute_cgpa, compute_sgpa
from students.models import Student


def _get_student(student_id):
    student = (
        Student.objects.select_related("department", "program")
        .filter(id=student_id)
        .first()
    )
    if not student:
        raise NotFound("Student not found")
    return student


def _student_header(student):
    return {
        "id": student.id,
        "name": student.name,
        "roll_no": student.roll_no,
        "registration_no": student.registration_no,
        "department": student.department.name,
        "program": student.program.name,
        "current_semester": student.current_semester,
    }


def get_student_results(student_id, published_only=False):
    """
    Every semester of a student: CGPA breakdown plus stored results.

    published_only leaves unpublished semesters out of the totals as well
    as the lists.
    """
    student = _get_student(student_id)
    cgpa_data = compute_cgpa(student.id, published_only=published_only)

    semester_results = SemesterResult.objects.filter(student=student)
    if published_only:
        semester_results = semester_results.filter(semester__results_published=True)
    semester_results = (
        semester_results
        .select_related("semester", "semester__session")
        .order_by("semester__session__start_year", "semester__number")
    )

    return {
        "student": _student_header(student),
        "cgpa": cgpa_data["cgpa"],
        "total_credits": cgpa_data["total_credits"],
        "total_semesters": cgpa_data["total_semesters"],
        "semesters": cgpa_data["semesters"],
        "semester_results": list(semester_results),
    }


def get_student_semester_results(student_id, semester_id, published_only=False):
    """
    One semester of one student.

    published_only is set for student-facing callers: unpublished results
    are refused.
    """
    semester = Semester.objects.filter(id=semester_id).first()
    if not semester:
        raise NotFound("Semester not found")
    if published_only and not semester.results_published:
        raise Forbidden("Results for this semester have not been published yet")

    student = _get_student(student_id)

    sgpa_data = compute_sgpa(student.id, semester.id)
    if not sgpa_data["courses"]:
        raise NotFound("No grades found for this semester")

    result = SemesterResult.objects.filter(student=student, semester=semester).first()

    return {
        "student": _student_header(student),
        "semester": {
            "id": semester.id,
            "name": str(semester),
            "semester_number": semester.number,
            "results_published": semester.results_published,
        },
        "sgpa": sgpa_data["sgpa"],
        "total_credits": sgpa_data["total_credits"],
        "total_grade_points": sgpa_data["total_grade_points"],
        "courses": sgpa_data["courses"],
        "result": result,
    }


def get_class_result_summary(semester_id, department_id=None):
    semester = Semester.objects.filter(id=semester_id).first()
    if not semester:
        raise NotFound("Semester not found")

    qs = SemesterResult.objects.filter(semester=semester)
    grades = Grade.objects.filter(semester=semester)
    if department_id:
        qs = qs.filter(student__department_id=department_id)
        grades = grades.filter(student__department_id=department_id)

    departments = list(
        qs.values("student__department_id", "student__department__name")
        .annotate(
            total_students=Count("id"),
            passed=Count("id", filter=Q(status="pass")),
            failed=Count("id", filter=Q(status="fail")),
            promoted=Count("id", filter=Q(status="promoted")),
            on_probation=Count("id", filter=Q(on_probation=True)),
            avg_sgpa=Avg("sgpa"),
            avg_cgpa=Avg("cgpa"),
            highest_sgpa=Max("sgpa"),
            lowest_sgpa=Min("sgpa"),
        )
        .order_by("student__department__name")
    )
    for d in departments:
        d["department_id"] = d.pop("student__department_id")
        d["department_name"] = d.pop("student__department__name")
        d["avg_sgpa"] = q2(d["avg_sgpa"] or 0)
        d["avg_cgpa"] = q2(d["avg_cgpa"] or 0)

    grade_distribution = list(
        grades.values("letter_grade").annotate(count=Count("id")).order_by("letter_grade")
    )

    overall = None
    if departments:
        total = sum(d["total_students"] for d in departments)
        passed = sum(d["passed"] + d["promoted"] for d in departments)
        failed = sum(d["failed"] for d in departments)
        overall = {
            "total_students": total,
            "passed": passed,
            "failed": failed,
            "pass_percentage": q2(Decimal(passed) / total * 100) if total else Decimal("0.00"),
        }

    return {
        "semester_id": semester.id,
        "departments": departments,
        "grade_distribution": grade_distribution,
        "overall": overall,
    }


def get_toppers(semester_id, limit=None):
    if limit is None:
        limit = get_setting("TOPPERS_LIMIT")
    try:
        limit = int(limit)
    except (TypeError, ValueError):
        raise InvalidInput("limit must be an integer")
    if limit < 1:
        raise InvalidInput("limit must be at least 1")

    rows = (
        SemesterResult.objects.filter(semester_id=semester_id, status__in=["pass", "promoted"])
        .select_related("student", "student__department")
        .order_by("-sgpa", "-cgpa", "student__roll_no")[:limit]
    )

    return {
        "semester_id": int(semester_id),
        "toppers": [
            {
                "rank": rank,
                "student_id": sr.student_id,
                "name": sr.student.name,
                "roll_no": sr.student.roll_no,
                "department": sr.student.department.name,
                "sgpa": sr.sgpa,
                "cgpa": sr.cgpa,
            }
            for rank, sr in enumerate(rows, start=1)
        ],
    }
