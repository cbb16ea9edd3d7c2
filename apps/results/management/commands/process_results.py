from django.core.management.base import BaseCommand, CommandError

from results.exceptions import ResultError
from results.services.grades import calculate_semester_grades
from results.services.processing import process_results


class Command(BaseCommand):
    help = "Compute GPAs and pass/fail status for a semester (optionally recalculating course grades first)."

    def add_arguments(self, parser):
        parser.add_argument("semester", type=int, help="Semester id")
        parser.add_argument("--calculate-grades", action="store_true", help="Recalculate all course grades first")
        parser.add_argument("--exam", type=int, help="Limit grade calculation to one exam")
        parser.add_argument("--passing", type=str, help="Passing CGPA (default from settings)")
        parser.add_argument("--probation", type=str, help="Probation CGPA (default from settings)")

    def handle(self, *args, **options):
        semester_id = options["semester"]

        try:
            if options["calculate_grades"]:
                outcome = calculate_semester_grades(semester_id, options["exam"])
                for course in outcome["courses"]:
                    if course["status"] == "success":
                        self.stdout.write(
                            f"  {course['course_code']}: {course['students_processed']} graded, "
                            f"{course['students_failed']} failed"
                        )
                    else:
                        self.stdout.write(self.style.ERROR(f"  {course['course_code']}: {course['error']}"))

            result = process_results(semester_id, options["passing"], options["probation"])
        except ResultError as exc:
            raise CommandError(exc.message)

        summary = result["summary"]
        self.stdout.write(self.style.SUCCESS(
            f"Processed {summary['total_students']} students: "
            f"pass={summary['passed']}, fail={summary['failed']}, "
            f"probation={summary['on_probation']}, already promoted={summary['already_promoted']}"
        ))
