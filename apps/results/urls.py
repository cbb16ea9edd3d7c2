from django.urls import path
from . import views

urlpatterns = [
    path("grade-scale/", views.grade_scale_view, name="grade_scale"),

    # Marks entry
    path("marks/", views.marks_enter, name="marks_enter"),
    path("marks/<int:mark_id>/", views.marks_edit, name="marks_edit"),
    path("schedules/<int:schedule_id>/marks/bulk/", views.marks_bulk_upload, name="marks_bulk_upload"),
    path("schedules/<int:schedule_id>/lock/", views.marks_lock, name="marks_lock"),

    # Pipeline
    path(
        "semesters/<int:semester_id>/courses/<int:course_id>/grades/",
        views.course_grades_calculate,
        name="course_grades_calculate",
    ),
    path("semesters/<int:semester_id>/grades/", views.semester_grades_calculate, name="semester_grades_calculate"),
    path("semesters/<int:semester_id>/gpa/", views.semester_gpa_calculate, name="semester_gpa_calculate"),
    path("semesters/<int:semester_id>/process/", views.semester_process, name="semester_process"),
    path("semesters/<int:semester_id>/promote/", views.semester_promote, name="semester_promote"),
    path("semesters/<int:semester_id>/publish/", views.semester_publish, name="semester_publish"),
    path("semesters/<int:semester_id>/freeze/", views.semester_freeze, name="semester_freeze"),

    # Reports
    path("semesters/<int:semester_id>/summary/", views.semester_summary, name="semester_summary"),
    path("semesters/<int:semester_id>/toppers/", views.semester_toppers, name="semester_toppers"),
    path("semesters/<int:semester_id>/results.xlsx", views.semester_results_xlsx, name="semester_results_xlsx"),
    path("students/<int:student_id>/", views.student_results, name="student_results"),
    path(
        "students/<int:student_id>/semesters/<int:semester_id>/",
        views.student_semester_results,
        name="student_semester_results",
    ),

    # Documents
    path(
        "students/<int:student_id>/semesters/<int:semester_id>/marksheet.pdf",
        views.marksheet_pdf,
        name="marksheet_pdf",
    ),
    path("students/<int:student_id>/transcript.pdf", views.transcript_pdf, name="transcript_pdf"),
]
