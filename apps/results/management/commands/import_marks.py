from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
import openpyxl

from results.exceptions import ResultError
from results.services.marks import bulk_upload


def _norm(s: str) -> str:
    return "".join(ch.lower() for ch in str(s).strip() if ch.isalnum())


class Command(BaseCommand):
    help = "Import marks of one exam schedule from Excel (roll_no or student_id, obtained_marks)."

    def add_arguments(self, parser):
        parser.add_argument("file", type=str, help="Path to Excel file")
        parser.add_argument("--schedule", type=int, required=True, help="Exam schedule id")
        parser.add_argument("--entered-by", dest="entered_by", help="Username recorded as the grader")

    def handle(self, *args, **options):
        graded_by = None
        if options["entered_by"]:
            graded_by = get_user_model().objects.filter(username=options["entered_by"]).first()
            if not graded_by:
                raise CommandError(f"User not found: {options['entered_by']}")

        wb = openpyxl.load_workbook(options["file"], read_only=True, data_only=True)
        ws = wb.active

        header_raw = [c.value for c in next(ws.iter_rows(min_row=1, max_row=1))]
        header = [_norm(h) for h in header_raw]

        def col(*names):
            for n in names:
                n2 = _norm(n)
                for i, h in enumerate(header):
                    if h == n2:
                        return i
            return None

        roll_i = col("roll_no", "rollno", "roll")
        sid_i = col("student_id", "studentid")
        marks_i = col("obtained_marks", "obtainedmarks", "marks", "obtained")

        if marks_i is None or (roll_i is None and sid_i is None):
            raise CommandError(
                f"Need an obtained_marks column and a roll_no or student_id column.\nHeaders found: {header_raw}"
            )

        rows = []
        for row in ws.iter_rows(min_row=2, values_only=True):
            if all(v is None for v in row):
                continue
            rows.append({
                "roll_no": row[roll_i] if roll_i is not None else None,
                "student_id": row[sid_i] if sid_i is not None else None,
                "obtained_marks": row[marks_i],
            })

        try:
            result = bulk_upload(graded_by, options["schedule"], rows)
        except ResultError as exc:
            raise CommandError(exc.message)

        for item in result["failed"]:
            ident = item["roll_no"] or item["student_id"]
            self.stdout.write(self.style.ERROR(f"Row {item['row'] + 1}: {ident}: {item['error']}"))

        self.stdout.write(self.style.SUCCESS(
            f"\nImported. Saved={result['total_success']}, Errors={result['total_failed']}"
        ))
