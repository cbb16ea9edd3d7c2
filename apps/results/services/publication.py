import logging

from django.db import transaction
from django.db.models import Avg, Count, Q
from django.utils import timezone

from academics.models import Semester
from results.exceptions import InvalidInput, InvalidState, NotFound
from results.models import SemesterResult
from results.services import q2
from results.signals import results_published, semester_frozen

logger = logging.getLogger(__name__)


def _get_semester(semester_id):
    if not semester_id:
        raise InvalidInput("semester_id is required")
    semester = Semester.objects.filter(id=semester_id).first()
    if not semester:
        raise NotFound("Semester not found")
    return semester


def semester_summary(semester):
    agg = SemesterResult.objects.filter(semester=semester).aggregate(
        total=Count("id"),
        passed=Count("id", filter=Q(status="pass")),
        failed=Count("id", filter=Q(status="fail")),
        promoted=Count("id", filter=Q(status="promoted")),
        probation=Count("id", filter=Q(on_probation=True)),
        avg_sgpa=Avg("sgpa"),
        avg_cgpa=Avg("cgpa"),
    )
    return {
        "total_students": agg["total"],
        "passed": agg["passed"],
        "failed": agg["failed"],
        "promoted": agg["promoted"],
        "on_probation": agg["probation"],
        "average_sgpa": q2(agg["avg_sgpa"] or 0),
        "average_cgpa": q2(agg["avg_cgpa"] or 0),
    }


def publish_results(semester_id, notify_students=True):
    """
    Make a processed semester's results visible to students.

    Does not lock marks; see freeze_results.
    """
    semester = _get_semester(semester_id)

    processed = SemesterResult.objects.filter(semester=semester).exclude(status="pending").exists()
    if not processed:
        raise InvalidState("Results must be processed before publishing")

    semester.results_published = True
    semester.results_published_at = timezone.now()
    semester.save(update_fields=["results_published", "results_published_at"])

    logger.info("Results published for semester %s", semester.id)

    results_published.send(sender=Semester, semester=semester, notify_students=notify_students)

    return {
        "message": "Results published successfully",
        "semester": semester,
        "summary": semester_summary(semester),
    }


def freeze_results(semester_id):
    """
    Freeze a semester: every exam schedule under it gets its marks locked
    and the semester is flagged frozen, atomically.
    """
    semester = _get_semester(semester_id)

    with transaction.atomic():
        responses = semester_frozen.send(sender=Semester, semester=semester)
        locked = sum(r for _, r in responses if isinstance(r, int))

        semester.results_frozen = True
        semester.results_frozen_at = timezone.now()
        semester.save(update_fields=["results_frozen", "results_frozen_at"])

    logger.info("Results frozen for semester %s (%d schedules locked)", semester.id, locked)

    return {
        "message": "Results frozen successfully. No further changes allowed.",
        "semester": semester,
        "schedules_locked": locked,
    }
