from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
import openpyxl

from academics.models import Course, Program, Semester, Session
from students.models import CourseRegistration, Student


def _norm(s: str) -> str:
    return "".join(ch.lower() for ch in str(s).strip() if ch.isalnum())


class Command(BaseCommand):
    help = "Import students of a program from Excel, optionally registering them for semester courses."

    def add_arguments(self, parser):
        parser.add_argument("file", type=str, help="Path to Excel file")
        parser.add_argument("--program", required=True, help="Program name (match or partial match)")
        parser.add_argument("--session", type=int, help="Session start year e.g. 2022 (with --semester)")
        parser.add_argument("--semester", type=int, help="Semester number to register the students in")
        parser.add_argument("--courses", help="Comma separated course codes to register, e.g. CS101,MTH101")

    def handle(self, *args, **options):
        program_text = str(options["program"]).strip()

        # Program fuzzy match
        program = Program.objects.filter(name=program_text).first()
        if not program:
            program = Program.objects.filter(name__icontains=program_text).first()
        if not program:
            raise CommandError(f"Program not found: {program_text}")

        semester, courses = self._registration_target(program, options)

        wb = openpyxl.load_workbook(options["file"], read_only=True, data_only=True)
        sheet = wb.active

        header_raw = [c.value for c in next(sheet.iter_rows(min_row=1, max_row=1))]
        header = [_norm(h) for h in header_raw]

        def find_col(candidates):
            for cand in candidates:
                cand_n = _norm(cand)
                for i, h in enumerate(header):
                    if h == cand_n:
                        return i
            return None

        roll_idx = find_col(["roll_no", "rollno", "roll", "rollnumber"])
        reg_idx = find_col(["registration_no", "registrationno", "regno", "reg_no", "registration"])
        name_idx = find_col(["name", "studentname", "student_name"])
        father_idx = find_col(["father_name", "fathername", "fname", "father"])

        missing = []
        if roll_idx is None: missing.append("roll_no")
        if reg_idx is None: missing.append("registration_no")
        if name_idx is None: missing.append("name")

        if missing:
            raise CommandError(
                f"Missing columns in Excel: {missing}\n"
                f"Your headers are: {header_raw}"
            )

        def cell(row, idx):
            if idx is None or idx >= len(row) or row[idx] is None:
                return ""
            return str(row[idx]).strip()

        created_students = 0
        updated_students = 0
        registrations = 0
        errors = 0

        for row_num, row in enumerate(sheet.iter_rows(min_row=2, values_only=True), start=2):
            roll_no = cell(row, roll_idx)
            reg_no = cell(row, reg_idx)
            name = cell(row, name_idx)
            father = cell(row, father_idx)

            if not roll_no or not reg_no or not name:
                if any(v is not None for v in row):
                    errors += 1
                    self.stdout.write(self.style.ERROR(f"Row {row_num}: Missing required fields (skipped)"))
                continue

            clash = Student.objects.filter(roll_no=roll_no).exclude(registration_no=reg_no).first()
            if clash:
                errors += 1
                self.stdout.write(self.style.ERROR(
                    f"Row {row_num}: roll_no {roll_no} already belongs to {clash.registration_no} (skipped)"
                ))
                continue

            with transaction.atomic():
                student = Student.objects.filter(registration_no=reg_no).first()
                if not student:
                    student = Student.objects.create(
                        program=program,
                        registration_no=reg_no,
                        roll_no=roll_no,
                        name=name,
                        father_name=father,
                    )
                    created_students += 1
                else:
                    changed = False
                    for field, value in (("name", name), ("father_name", father), ("roll_no", roll_no)):
                        if value and getattr(student, field) != value:
                            setattr(student, field, value)
                            changed = True
                    if student.program_id != program.id:
                        student.program = program
                        student.department_id = program.department_id
                        changed = True
                    if changed:
                        student.save()
                        updated_students += 1

                for course in courses:
                    _, created = CourseRegistration.objects.get_or_create(
                        student=student,
                        course=course,
                        semester=semester,
                        defaults={"status": "approved"},
                    )
                    registrations += int(created)

        self.stdout.write(self.style.SUCCESS(
            f"\nDone. Students: created={created_students}, updated={updated_students} | "
            f"Registrations: created={registrations} | errors={errors}"
        ))

    def _registration_target(self, program, options):
        if not options["courses"]:
            return None, []

        if not options["session"] or not options["semester"]:
            raise CommandError("--courses needs --session and --semester")

        session = Session.objects.filter(start_year=options["session"]).first()
        if not session:
            raise CommandError(f"Session not found: {options['session']}")

        semester, _ = Semester.objects.get_or_create(
            program=program,
            session=session,
            number=options["semester"],
        )

        codes = [c.strip().upper() for c in options["courses"].split(",") if c.strip()]
        courses = list(Course.objects.filter(code__in=codes))
        unknown = sorted(set(codes) - {c.code for c in courses})
        if unknown:
            raise CommandError(f"Course codes not found: {unknown}")

        return semester, courses
