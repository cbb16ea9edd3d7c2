import logging
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.db.models import Count, Q

from academics.models import Semester
from results.conf import get_setting
from results.exceptions import InvalidInput, NotFound
from results.models import SemesterResult
from results.services import to_decimal
from results.services.gpa import calculate_gpa_for_semester
from students.models import Student

logger = logging.getLogger(__name__)

FAIL_GRADE = "F"


def classify_result(cgpa, failed_count, passing_cgpa, probation_cgpa, max_failed_courses=2):
    """
    Return (status, on_probation) for one semester result.

    Rules are evaluated in order:
    1. cgpa >= passing and no F grades -> pass
    2. cgpa < probation or more than max_failed_courses F grades -> fail
    3. anything else -> pass, on probation
    """
    cgpa = to_decimal(cgpa)
    passing_cgpa = to_decimal(passing_cgpa)
    probation_cgpa = to_decimal(probation_cgpa)
    if cgpa >= passing_cgpa and failed_count == 0:
        return "pass", False
    if cgpa < probation_cgpa or failed_count > max_failed_courses:
        return "fail", False
    return "pass", True


def _threshold(value, name):
    if value is None:
        value = get_setting(name)
    try:
        value = to_decimal(value)
    except (InvalidOperation, ValueError):
        raise InvalidInput(f"{name.lower()} must be a number")
    if value < 0 or value > 4:
        raise InvalidInput(f"{name.lower()} must be between 0 and 4")
    return value


def _result_row(sr):
    return {
        "student_id": sr.student_id,
        "name": sr.student.name,
        "roll_no": sr.student.roll_no,
        "sgpa": sr.sgpa,
        "cgpa": sr.cgpa,
    }


def process_results(semester_id, passing_cgpa=None, probation_cgpa=None):
    """
    Recompute GPAs for the semester, then classify every student.

    Statuses are written one student at a time. Promoted results are final
    and left untouched.
    """
    if not semester_id:
        raise InvalidInput("semester_id is required")

    passing = _threshold(passing_cgpa, "PASSING_CGPA")
    probation = _threshold(probation_cgpa, "PROBATION_CGPA")
    if probation > passing:
        raise InvalidInput("probation_cgpa cannot be higher than passing_cgpa")
    max_failed = int(get_setting("MAX_FAILED_COURSES"))

    calculate_gpa_for_semester(semester_id)

    results = list(
        SemesterResult.objects.filter(semester_id=semester_id)
        .select_related("student")
        .annotate(
            failed_count=Count(
                "student__grades",
                filter=Q(student__grades__semester_id=semester_id, student__grades__letter_grade=FAIL_GRADE),
            )
        )
        .order_by("student__roll_no")
    )
    if not results:
        raise NotFound("No results found for this semester")

    passed, failed, probation_list, skipped = [], [], [], []

    for sr in results:
        if sr.status == "promoted":
            skipped.append(_result_row(sr))
            continue

        status, on_probation = classify_result(sr.cgpa, sr.failed_count, passing, probation, max_failed)

        sr.status = status
        sr.on_probation = on_probation
        sr.save(update_fields=["status", "on_probation", "updated_at"])

        if status == "fail":
            failed.append(_result_row(sr))
        elif on_probation:
            probation_list.append(_result_row(sr))
        else:
            passed.append(_result_row(sr))

    logger.info(
        "Results processed for semester %s: %d pass, %d fail, %d probation, %d already promoted",
        semester_id, len(passed), len(failed), len(probation_list), len(skipped),
    )

    return {
        "message": "Results processed successfully",
        "semester_id": int(semester_id),
        "criteria": {
            "passing_cgpa": passing,
            "probation_cgpa": probation,
            "max_failed_courses": max_failed,
        },
        "summary": {
            "total_students": len(results),
            "passed": len(passed),
            "failed": len(failed),
            "on_probation": len(probation_list),
            "already_promoted": len(skipped),
        },
        "details": {
            "passed": passed,
            "failed": failed,
            "probation": probation_list,
        },
    }


def promote_students(semester_id, next_semester_id):
    """
    Move every 'pass' result of the semester to 'promoted' and advance the
    student's current_semester. Promoted rows are not selected again, so
    re-running after a partial promotion is safe.
    """
    if not semester_id or not next_semester_id:
        raise InvalidInput("semester_id and next_semester_id are required")
    if str(semester_id) == str(next_semester_id):
        raise InvalidInput("next_semester_id must differ from semester_id")

    if not Semester.objects.filter(id=semester_id).exists():
        raise NotFound("Semester not found")
    next_semester = Semester.objects.filter(id=next_semester_id).first()
    if not next_semester:
        raise NotFound("Next semester not found")

    promoted = []
    with transaction.atomic():
        passed = (
            SemesterResult.objects.select_for_update()
            .filter(semester_id=semester_id, status="pass")
            .select_related("student")
            .order_by("student__roll_no")
        )
        for sr in passed:
            Student.objects.filter(id=sr.student_id).update(current_semester=next_semester.number)
            sr.status = "promoted"
            sr.save(update_fields=["status", "updated_at"])
            promoted.append({
                "student_id": sr.student_id,
                "name": sr.student.name,
                "roll_no": sr.student.roll_no,
            })

    logger.info(
        "Promoted %d students from semester %s to semester %s",
        len(promoted), semester_id, next_semester.id,
    )

    return {
        "message": f"{len(promoted)} students promoted to next semester",
        "from_semester": int(semester_id),
        "to_semester": next_semester.id,
        "promoted_students": promoted,
    }
