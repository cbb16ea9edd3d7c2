from decimal import Decimal, InvalidOperation

from django.core.management.base import BaseCommand, CommandError
import openpyxl

from academics.models import Course


def _normalize(s: str) -> str:
    return "".join(ch.lower() for ch in str(s).strip() if ch.isalnum())


class Command(BaseCommand):
    help = "Import courses from Excel. Requires code, title and credit hours."

    def add_arguments(self, parser):
        parser.add_argument("file", type=str, help="Path to Excel file")

    def handle(self, *args, **options):
        wb = openpyxl.load_workbook(options["file"], read_only=True, data_only=True)
        sheet = wb.active

        # Detect columns by header name
        header = [c.value for c in next(sheet.iter_rows(min_row=1, max_row=1))]
        header_norm = [_normalize(h) for h in header]

        code_candidates = {"code", "coursecode", "subjectcode"}
        title_candidates = {"title", "coursetitle", "subject", "name"}
        ch_candidates = {"credithours", "credithour", "credithr", "ch"}

        def find(candidates, label):
            try:
                return next(i for i, h in enumerate(header_norm) if h in candidates)
            except StopIteration:
                raise CommandError(f"Could not find a {label} column in header: {header}")

        code_idx = find(code_candidates, "code")
        title_idx = find(title_candidates, "title")
        ch_idx = find(ch_candidates, "credit hours")

        created = 0
        updated = 0
        skipped = 0
        errors = 0

        for row_num, row in enumerate(sheet.iter_rows(min_row=2, values_only=True), start=2):
            code = row[code_idx] if code_idx < len(row) else None
            title = row[title_idx] if title_idx < len(row) else None
            credit_hours = row[ch_idx] if ch_idx < len(row) else None

            if not code or not str(code).strip():
                skipped += 1
                continue

            code = str(code).strip().upper()
            title = str(title).strip() if title else ""

            if not title:
                errors += 1
                self.stdout.write(self.style.ERROR(f"Row {row_num}: Missing title for '{code}' (skipped)"))
                continue

            try:
                credit_hours = Decimal(str(credit_hours).strip())
            except (InvalidOperation, ValueError):
                errors += 1
                self.stdout.write(self.style.ERROR(
                    f"Row {row_num}: Invalid credit hours '{credit_hours}' for '{code}' (skipped)"
                ))
                continue
            if credit_hours <= 0:
                errors += 1
                self.stdout.write(self.style.ERROR(
                    f"Row {row_num}: Credit hours must be positive for '{code}' (skipped)"
                ))
                continue

            obj, is_created = Course.objects.get_or_create(
                code=code,
                defaults={"title": title, "credit_hours": credit_hours},
            )

            if is_created:
                created += 1
                self.stdout.write(self.style.SUCCESS(f"Created: {code} {title} ({credit_hours} CH)"))
            elif obj.title != title or obj.credit_hours != credit_hours:
                obj.title = title
                obj.credit_hours = credit_hours
                obj.save(update_fields=["title", "credit_hours"])
                updated += 1
                self.stdout.write(self.style.WARNING(f"Updated: {code} -> {title} ({credit_hours} CH)"))
            else:
                skipped += 1

        self.stdout.write(self.style.SUCCESS(
            f"\nDone. Created={created}, Updated={updated}, Skipped={skipped}, Errors={errors}"
        ))
