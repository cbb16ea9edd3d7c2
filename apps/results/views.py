from io import BytesIO

from django.contrib.auth.decorators import login_required
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from django.template.loader import render_to_string
from django.views.decorators.http import require_GET, require_http_methods, require_POST

import openpyxl
from openpyxl.styles import Font

from academics.models import Semester

from .decorators import (
    MARKS_GROUPS,
    STAFF_GROUPS,
    api_view,
    group_required,
    is_staff_member,
    json_response,
    read_json,
)
from .exceptions import Forbidden, InvalidInput
from .models import Grade, SemesterResult
from .services import grade_scale, grades, gpa, marks, processing, publication, reports


# -------------------------------------------------
# Serializers (model rows -> plain dicts)
# -------------------------------------------------
def _scale_dict(band):
    return {
        "id": band.id,
        "min_percentage": band.min_percentage,
        "max_percentage": band.max_percentage,
        "letter_grade": band.letter_grade,
        "grade_point": band.grade_point,
        "remarks": band.remarks,
    }


def _marks_dict(mark):
    return {
        "id": mark.id,
        "student_id": mark.student_id,
        "exam_schedule_id": mark.exam_schedule_id,
        "obtained_marks": mark.obtained_marks,
        "total_marks": mark.total_marks,
        "entered_by": mark.entered_by_id,
        "entry_date": mark.entry_date,
    }


def _schedule_dict(schedule):
    return {
        "id": schedule.id,
        "exam_id": schedule.exam_id,
        "course_id": schedule.course_id,
        "total_marks": schedule.total_marks,
        "weightage": schedule.weightage,
        "marks_locked": schedule.marks_locked,
    }


def _semester_dict(semester):
    return {
        "id": semester.id,
        "name": str(semester),
        "number": semester.number,
        "results_published": semester.results_published,
        "results_published_at": semester.results_published_at,
        "results_frozen": semester.results_frozen,
        "results_frozen_at": semester.results_frozen_at,
    }


def _result_dict(sr):
    if sr is None:
        return None
    return {
        "id": sr.id,
        "student_id": sr.student_id,
        "semester_id": sr.semester_id,
        "sgpa": sr.sgpa,
        "cgpa": sr.cgpa,
        "total_credits": sr.total_credits,
        "status": sr.status,
        "on_probation": sr.on_probation,
    }


def _with_semester(data):
    data = dict(data)
    data["semester"] = _semester_dict(data["semester"])
    return data


def _check_student_access(request, student_id):
    """Staff read anything; a student reads only their own, published results."""
    if is_staff_member(request.user):
        return False
    profile = getattr(request.user, "student_profile", None)
    if profile is None or profile.id != int(student_id):
        raise Forbidden("You can only view your own results")
    return True


# -------------------------------------------------
# Grade scale
# -------------------------------------------------
@login_required
@require_http_methods(["GET", "POST"])
@api_view
def grade_scale_view(request):
    if request.method == "POST":
        if not request.user.is_superuser and not request.user.groups.filter(name="System Admin").exists():
            raise Forbidden("Only a System Admin can replace the grade scale")
        scale = grade_scale.replace_scale(read_json(request).get("scale"))
        return json_response({
            "message": "Grade scale updated successfully",
            "scale": [_scale_dict(b) for b in scale],
        })

    return json_response({"scale": [_scale_dict(b) for b in grade_scale.get_scale()]})


# -------------------------------------------------
# Marks
# -------------------------------------------------
@require_POST
@group_required(*MARKS_GROUPS)
@api_view
def marks_enter(request):
    data = read_json(request)
    mark = marks.enter_marks(
        request.user,
        data.get("student_id"),
        data.get("exam_schedule_id"),
        data.get("obtained_marks"),
    )
    return json_response({"message": "Marks entered successfully", "marks": _marks_dict(mark)}, status=201)


@require_POST
@group_required(*MARKS_GROUPS)
@api_view
def marks_edit(request, mark_id):
    mark = marks.edit_marks(request.user, mark_id, read_json(request).get("obtained_marks"))
    return json_response({"message": "Marks updated successfully", "marks": _marks_dict(mark)})


@require_POST
@group_required(*MARKS_GROUPS)
@api_view
def marks_bulk_upload(request, schedule_id):
    result = marks.bulk_upload(request.user, schedule_id, read_json(request).get("marks_list"))
    return json_response(result)


@require_POST
@group_required(*STAFF_GROUPS)
@api_view
def marks_lock(request, schedule_id):
    locked = read_json(request).get("lock", True)
    if not isinstance(locked, bool):
        raise InvalidInput("lock must be true or false")
    schedule = marks.lock_marks(schedule_id, locked)
    return json_response({
        "message": "Marks locked successfully" if locked else "Marks unlocked successfully",
        "exam_schedule": _schedule_dict(schedule),
    })


# -------------------------------------------------
# Grades, GPA, processing
# -------------------------------------------------
@require_POST
@group_required(*STAFF_GROUPS)
@api_view
def course_grades_calculate(request, semester_id, course_id):
    exam_id = read_json(request).get("exam_id")
    return json_response(grades.calculate_course_grades(course_id, semester_id, exam_id))


@require_POST
@group_required(*STAFF_GROUPS)
@api_view
def semester_grades_calculate(request, semester_id):
    exam_id = read_json(request).get("exam_id")
    return json_response(grades.calculate_semester_grades(semester_id, exam_id))


@require_POST
@group_required(*STAFF_GROUPS)
@api_view
def semester_gpa_calculate(request, semester_id):
    return json_response(gpa.calculate_gpa_for_semester(semester_id))


@require_POST
@group_required(*STAFF_GROUPS)
@api_view
def semester_process(request, semester_id):
    data = read_json(request)
    return json_response(
        processing.process_results(
            semester_id,
            passing_cgpa=data.get("passing_cgpa"),
            probation_cgpa=data.get("probation_cgpa"),
        )
    )


@require_POST
@group_required(*STAFF_GROUPS)
@api_view
def semester_promote(request, semester_id):
    next_semester_id = read_json(request).get("next_semester_id")
    return json_response(processing.promote_students(semester_id, next_semester_id))


@require_POST
@group_required(*STAFF_GROUPS)
@api_view
def semester_publish(request, semester_id):
    notify = bool(read_json(request).get("notify_students", True))
    return json_response(_with_semester(publication.publish_results(semester_id, notify)))


@require_POST
@group_required("System Admin")
@api_view
def semester_freeze(request, semester_id):
    return json_response(_with_semester(publication.freeze_results(semester_id)))


# -------------------------------------------------
# Reports
# -------------------------------------------------
@require_GET
@group_required(*STAFF_GROUPS)
@api_view
def semester_summary(request, semester_id):
    department_id = request.GET.get("department") or None
    return json_response(reports.get_class_result_summary(semester_id, department_id))


@require_GET
@group_required(*STAFF_GROUPS)
@api_view
def semester_toppers(request, semester_id):
    return json_response(reports.get_toppers(semester_id, request.GET.get("limit")))


@login_required
@require_GET
@api_view
def student_results(request, student_id):
    published_only = _check_student_access(request, student_id)
    data = reports.get_student_results(student_id, published_only=published_only)
    data["semester_results"] = [_result_dict(r) for r in data["semester_results"]]
    return json_response(data)


@login_required
@require_GET
@api_view
def student_semester_results(request, student_id, semester_id):
    published_only = _check_student_access(request, student_id)
    data = reports.get_student_semester_results(student_id, semester_id, published_only=published_only)
    data["result"] = _result_dict(data["result"])
    return json_response(data)


# -------------------------------------------------
# Documents
# -------------------------------------------------
def _pdf_response(request, template, context, filename):
    # weasyprint needs pango at import time; keep it off the import path of the API
    from weasyprint import HTML

    html = render_to_string(template, context, request=request)
    pdf = HTML(string=html, base_url=request.build_absolute_uri("/")).write_pdf()
    response = HttpResponse(pdf, content_type="application/pdf")
    response["Content-Disposition"] = f'inline; filename="{filename}"'
    return response


@login_required
@require_GET
@api_view
def marksheet_pdf(request, student_id, semester_id):
    """Single-student marksheet for one semester."""
    published_only = _check_student_access(request, student_id)
    data = reports.get_student_semester_results(student_id, semester_id, published_only=published_only)
    semester = get_object_or_404(Semester.objects.select_related("program", "session"), id=semester_id)

    return _pdf_response(
        request,
        "results/marksheet.html",
        {
            "data": data,
            "semester": semester,
            "session_display": semester.session.display_for_program(semester.program),
            "show_cgpa": semester.number != 1,
        },
        f"Marksheet_{data['student']['roll_no']}_Sem{semester.number}.pdf",
    )


@login_required
@require_GET
@api_view
def transcript_pdf(request, student_id):
    """All graded semesters of a student with the running CGPA."""
    published_only = _check_student_access(request, student_id)
    data = reports.get_student_results(student_id, published_only=published_only)

    return _pdf_response(
        request,
        "results/transcript.html",
        {"data": data},
        f"Transcript_{data['student']['roll_no']}.pdf",
    )


@require_GET
@group_required(*STAFF_GROUPS)
def semester_results_xlsx(request, semester_id):
    """Excel sheet: one row per student, one column per course grade."""
    semester = get_object_or_404(Semester, id=semester_id)

    results = (
        SemesterResult.objects.filter(semester=semester)
        .select_related("student")
        .order_by("student__roll_no")
    )
    grade_rows = Grade.objects.filter(semester=semester).select_related("course")

    course_codes = sorted({g.course.code for g in grade_rows})
    grades_map = {}
    for g in grade_rows:
        grades_map.setdefault(g.student_id, {})[g.course.code] = g.letter_grade

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = f"Semester {semester.number}"

    header = ["Roll No", "Name", *course_codes, "Credits", "SGPA", "CGPA", "Status", "Probation"]
    ws.append(header)
    for cell in ws[1]:
        cell.font = Font(bold=True)

    for sr in results:
        student_grades = grades_map.get(sr.student_id, {})
        ws.append([
            sr.student.roll_no,
            sr.student.name,
            *[student_grades.get(code, "") for code in course_codes],
            float(sr.total_credits),
            float(sr.sgpa),
            float(sr.cgpa),
            sr.get_status_display(),
            "Yes" if sr.on_probation else "",
        ])

    buf = BytesIO()
    wb.save(buf)

    response = HttpResponse(
        buf.getvalue(),
        content_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )
    response["Content-Disposition"] = f'attachment; filename="Results_Semester_{semester.id}.xlsx"'
    return response
