from django.core.management.base import BaseCommand, CommandError
import openpyxl

from results.exceptions import InvalidInput
from results.services.grade_scale import replace_scale


def _norm(s: str) -> str:
    return "".join(ch.lower() for ch in str(s).strip() if ch.isalnum())


class Command(BaseCommand):
    help = "Replace the grade scale from Excel (minpercent, maxpercent, lettergrade, gradepoint, remarks)."

    def add_arguments(self, parser):
        parser.add_argument("file", type=str, help="Path to Excel file")

    def handle(self, *args, **options):
        wb = openpyxl.load_workbook(options["file"], read_only=True, data_only=True)
        sheet = wb.active

        header_raw = [c.value for c in next(sheet.iter_rows(min_row=1, max_row=1))]
        header = [_norm(h) for h in header_raw]

        def find_col(cands):
            for c in cands:
                cn = _norm(c)
                for i, h in enumerate(header):
                    if h == cn:
                        return i
            return None

        min_i = find_col(["minpercent", "min_percentage", "min_marks", "min", "from"])
        max_i = find_col(["maxpercent", "max_percentage", "max_marks", "max", "to"])
        let_i = find_col(["lettergrade", "letter_grade", "grade", "letter"])
        gp_i = find_col(["gradepoint", "grade_point", "gp"])
        rem_i = find_col(["remarks", "remark"])

        missing = []
        if min_i is None: missing.append("minpercent")
        if max_i is None: missing.append("maxpercent")
        if let_i is None: missing.append("lettergrade")
        if gp_i is None: missing.append("gradepoint")

        if missing:
            raise CommandError(f"Missing columns: {missing}\nHeaders found: {header_raw}")

        entries = []
        for row in sheet.iter_rows(min_row=2, values_only=True):
            if all(v is None for v in row):
                continue
            entries.append({
                "min_percentage": row[min_i],
                "max_percentage": row[max_i],
                "letter_grade": row[let_i],
                "grade_point": row[gp_i],
                "remarks": row[rem_i] if rem_i is not None else None,
            })

        try:
            scale = replace_scale(entries)
        except InvalidInput as exc:
            raise CommandError(f"Grade scale rejected: {exc.message}")

        for band in scale:
            self.stdout.write(f"  {band}")
        self.stdout.write(self.style.SUCCESS(f"Done. Grade scale replaced with {len(scale)} bands."))
