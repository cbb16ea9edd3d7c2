import logging
from collections import defaultdict
from decimal import Decimal

from django.db import transaction

from academics.models import Course, Semester
from results.exceptions import ConfigurationError, InvalidInput, NotFound, ResultError
from results.models import ExamSchedule, Grade, Marks
from results.services import t2
from results.services.grade_scale import get_scale, grade_for_percentage
from students.models import CourseRegistration

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


def weighted_percentage(marks, weights) -> Decimal:
    """
    Weighted course percentage from a student's component marks.

    marks: Marks rows of one student for one course.
    weights: {exam_schedule_id: weightage}.

    Only components the student actually has marks for count towards the
    divisor. Full precision is kept; callers truncate when storing.
    """
    total_weighted = Decimal("0")
    total_weight = Decimal("0")

    for m in marks:
        weight = weights.get(m.exam_schedule_id)
        if weight is None:
            weight = HUNDRED
        weight = Decimal(weight)
        if weight < 0:
            raise InvalidInput(f"Negative weightage ({weight}) on exam schedule {m.exam_schedule_id}")

        total = Decimal(m.total_marks)
        if total <= 0:
            raise InvalidInput(f"Total marks must be positive on exam schedule {m.exam_schedule_id}")

        pct = Decimal(m.obtained_marks) / total * HUNDRED
        total_weighted += pct * weight
        total_weight += weight

    if not marks:
        return Decimal("0")
    if total_weight == 0:
        raise InvalidInput("All components the student sat carry zero weightage")

    return total_weighted / total_weight


def calculate_course_grades(course_id, semester_id, exam_id=None):
    """
    Compute and upsert the Grade row of every approved registration of a
    course in a semester.

    One transaction for the course, one savepoint per student: a student
    whose data is malformed is reported in 'failed' and skipped. A grade
    scale gap aborts the whole course.
    """
    if not course_id or not semester_id:
        raise InvalidInput("course_id and semester_id are required")

    course = Course.objects.filter(id=course_id).first()
    if not course:
        raise NotFound("Course not found")

    semester = Semester.objects.filter(id=semester_id).first()
    if not semester:
        raise NotFound("Semester not found")

    schedules = ExamSchedule.objects.filter(course=course, exam__semester=semester)
    if exam_id:
        schedules = schedules.filter(exam_id=exam_id)
    weights = {s.id: s.weightage for s in schedules}
    if not weights:
        raise NotFound("No exam schedules found for this course")

    registrations = list(
        CourseRegistration.objects.filter(course=course, semester=semester, status="approved")
        .select_related("student")
        .order_by("student__roll_no")
    )
    if not registrations:
        raise NotFound("No students registered for this course")

    scale = get_scale()
    if not scale:
        raise ConfigurationError("Grade scale is empty. Run 'manage.py seed_grade_scale' first.")

    success = []
    failed = []

    with transaction.atomic():
        marks_by_student = defaultdict(list)
        marks_qs = Marks.objects.filter(
            exam_schedule_id__in=list(weights),
            student_id__in=[r.student_id for r in registrations],
        )
        for m in marks_qs:
            marks_by_student[m.student_id].append(m)

        for reg in registrations:
            student = reg.student
            try:
                with transaction.atomic():
                    pct = weighted_percentage(marks_by_student[student.id], weights)
                    stored = t2(pct)
                    band = grade_for_percentage(stored, scale)

                    Grade.objects.update_or_create(
                        student=student,
                        course=course,
                        semester=semester,
                        defaults={
                            "marks": stored,
                            "letter_grade": band.letter_grade,
                            "grade_point": band.grade_point,
                            "credit_hours": course.credit_hours,
                        },
                    )
            except ConfigurationError:
                raise
            except (ResultError, ArithmeticError) as exc:
                message = getattr(exc, "message", str(exc))
                logger.warning(
                    "Grade calculation failed: course=%s student=%s: %s",
                    course.code, student.roll_no, message,
                )
                failed.append({
                    "student_id": student.id,
                    "name": student.name,
                    "roll_no": student.roll_no,
                    "error": message,
                })
                continue

            success.append({
                "student_id": student.id,
                "name": student.name,
                "roll_no": student.roll_no,
                "marks": stored,
                "grade": band.letter_grade,
                "grade_point": band.grade_point,
            })

    logger.info(
        "Grades calculated for course %s, semester %s: %d ok, %d failed",
        course.code, semester.id, len(success), len(failed),
    )

    return {
        "message": f"Grades calculated for {len(success)} students",
        "course": {"id": course.id, "code": course.code, "title": course.title},
        "semester_id": semester.id,
        "total_success": len(success),
        "total_failed": len(failed),
        "grades": success,
        "failed": failed,
    }


def calculate_semester_grades(semester_id, exam_id=None):
    """
    Run calculate_course_grades for every course with approved registrations.

    Each course commits on its own; a failing course is reported and does
    not undo the others. Re-running only redoes the upserts.
    """
    if not semester_id:
        raise InvalidInput("semester_id is required")

    semester = Semester.objects.filter(id=semester_id).first()
    if not semester:
        raise NotFound("Semester not found")

    courses = list(
        Course.objects.filter(registrations__semester=semester, registrations__status="approved")
        .distinct()
        .order_by("code")
    )
    if not courses:
        raise NotFound("No courses found for this semester")

    results = []
    for course in courses:
        try:
            outcome = calculate_course_grades(course.id, semester.id, exam_id)
        except ResultError as exc:
            logger.warning("Course %s skipped: %s", course.code, exc.message)
            results.append({
                "course_id": course.id,
                "course_code": course.code,
                "status": "failed",
                "error": exc.message,
            })
            continue

        results.append({
            "course_id": course.id,
            "course_code": course.code,
            "status": "success",
            "students_processed": outcome["total_success"],
            "students_failed": outcome["total_failed"],
        })

    return {
        "message": f"Processed {len(results)} courses",
        "semester_id": semester.id,
        "courses": results,
    }
