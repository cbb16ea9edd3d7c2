import logging
from decimal import InvalidOperation

from django.db import transaction
from django.dispatch import receiver

from results.exceptions import Forbidden, InvalidInput, NotFound, ResultError
from results.models import ExamSchedule, Marks
from results.services import to_decimal
from results.signals import semester_frozen
from students.models import Student

logger = logging.getLogger(__name__)


def _parse_marks(value):
    if value is None or str(value).strip() == "":
        raise InvalidInput("obtained_marks is required")
    try:
        marks = to_decimal(value)
    except (InvalidOperation, ValueError):
        raise InvalidInput(f"Marks must be a number, got {value!r}")
    if not marks.is_finite() or marks < 0 or marks > 100:
        raise InvalidInput("Marks must be between 0 and 100")
    return marks


def _parse_id(value, label):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{label} must be an integer, got {value!r}")


def _locked_schedule(schedule_id):
    """Fetch the schedule row locked for update; raises if missing or marks are locked."""
    schedule = (
        ExamSchedule.objects.select_for_update()
        .select_related("course")
        .filter(id=schedule_id)
        .first()
    )
    if not schedule:
        raise NotFound("Exam schedule not found")
    if schedule.marks_locked:
        raise Forbidden("Marks are locked for this exam. Cannot modify.")
    return schedule


def enter_marks(graded_by, student_id, schedule_id, obtained_marks) -> Marks:
    """Create or overwrite the marks of one student for one exam schedule."""
    if student_id in (None, "") or schedule_id in (None, ""):
        raise InvalidInput("student_id and exam_schedule_id are required")
    marks = _parse_marks(obtained_marks)
    student_id = _parse_id(student_id, "student_id")
    schedule_id = _parse_id(schedule_id, "exam_schedule_id")

    with transaction.atomic():
        schedule = _locked_schedule(schedule_id)

        if not 0 < schedule.total_marks <= 100:
            raise InvalidInput(
                f"Exam schedule total marks must be between 0 and 100, got {schedule.total_marks}"
            )
        if marks > schedule.total_marks:
            raise InvalidInput(f"Marks cannot exceed total marks ({schedule.total_marks})")

        if not Student.objects.filter(id=student_id).exists():
            raise NotFound("Student not found")

        mark, created = Marks.objects.update_or_create(
            student_id=student_id,
            exam_schedule=schedule,
            defaults={
                "obtained_marks": marks,
                "total_marks": schedule.total_marks,
                "entered_by": graded_by,
            },
        )

    logger.debug(
        "Marks %s: student=%s schedule=%s marks=%s",
        "entered" if created else "updated", student_id, schedule_id, marks,
    )
    return mark


def edit_marks(graded_by, mark_id, obtained_marks) -> Marks:
    marks = _parse_marks(obtained_marks)

    with transaction.atomic():
        mark = Marks.objects.select_related("exam_schedule").filter(id=_parse_id(mark_id, "mark_id")).first()
        if not mark:
            raise NotFound("Mark record not found")

        _locked_schedule(mark.exam_schedule_id)

        if marks > mark.total_marks:
            raise InvalidInput(f"Marks cannot exceed total marks ({mark.total_marks})")

        mark.obtained_marks = marks
        mark.entered_by = graded_by
        mark.save(update_fields=["obtained_marks", "entered_by", "entry_date"])

    return mark


def _resolve_student_id(item):
    student_id = item.get("student_id")
    roll_no = item.get("roll_no")

    if student_id not in (None, ""):
        return _parse_id(student_id, "student_id")

    if roll_no not in (None, ""):
        roll_no = str(roll_no).strip()
        found = Student.objects.filter(roll_no=roll_no).values_list("id", flat=True).first()
        if found is None:
            raise NotFound(f"Student with roll_no {roll_no} not found")
        return found

    raise InvalidInput("student_id or roll_no is required")


def bulk_upload(graded_by, schedule_id, rows):
    """
    Enter marks for many students of one schedule.

    Each row is independent: a bad row lands in 'failed' and the rest are
    still saved.
    """
    if schedule_id in (None, ""):
        raise InvalidInput("exam_schedule_id is required")
    if not isinstance(rows, (list, tuple)) or not rows:
        raise InvalidInput("marks_list array is required")

    schedule = ExamSchedule.objects.filter(id=_parse_id(schedule_id, "exam_schedule_id")).first()
    if not schedule:
        raise NotFound("Exam schedule not found")
    if schedule.marks_locked:
        raise Forbidden("Marks are locked for this exam")

    success = []
    failed = []

    for row_no, item in enumerate(rows, start=1):
        item = item or {}
        try:
            student_id = _resolve_student_id(item)
            marks = _parse_marks(item.get("obtained_marks"))
            enter_marks(graded_by, student_id, schedule.id, marks)
            success.append({
                "row": row_no,
                "student_id": student_id,
                "roll_no": item.get("roll_no"),
                "obtained_marks": marks,
            })
        except ResultError as exc:
            failed.append({
                "row": row_no,
                "student_id": item.get("student_id"),
                "roll_no": item.get("roll_no"),
                "error": exc.message,
            })

    if failed:
        logger.warning(
            "Bulk marks upload for schedule %s: %d saved, %d failed",
            schedule.id, len(success), len(failed),
        )
    else:
        logger.info("Bulk marks upload for schedule %s: %d saved", schedule.id, len(success))

    return {
        "message": f"Processed {len(success) + len(failed)} records",
        "total_success": len(success),
        "total_failed": len(failed),
        "success": success,
        "failed": failed,
    }


def lock_marks(schedule_id, locked=True) -> ExamSchedule:
    """Lock (or, as an admin override, unlock) marks entry for a schedule."""
    if schedule_id in (None, ""):
        raise InvalidInput("exam_schedule_id is required")

    schedule = ExamSchedule.objects.filter(id=_parse_id(schedule_id, "exam_schedule_id")).first()
    if not schedule:
        raise NotFound("Exam schedule not found")

    schedule.marks_locked = bool(locked)
    schedule.save(update_fields=["marks_locked"])

    logger.info("Marks %s for schedule %s", "locked" if locked else "unlocked", schedule.id)
    return schedule


@receiver(semester_frozen, dispatch_uid="results.marks.lock_frozen_semester")
def lock_frozen_semester(sender, semester, **kwargs):
    """Lock every exam schedule of a frozen semester. Returns how many changed."""
    count = (
        ExamSchedule.objects.filter(exam__semester=semester, marks_locked=False)
        .update(marks_locked=True)
    )
    logger.info("Semester %s frozen: locked marks on %d exam schedules", semester.id, count)
    return count
