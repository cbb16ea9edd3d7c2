from django.contrib import admin, messages

from .exceptions import ResultError
from .models import Exam, ExamSchedule, Grade, GradeScale, Marks, SemesterResult
from .services.marks import lock_marks


# -------------------------------------------------
# Exams and marks
# -------------------------------------------------
class ExamScheduleInline(admin.TabularInline):
    model = ExamSchedule
    extra = 0
    fields = ("course", "exam_date", "total_marks", "weightage", "marks_locked")


@admin.register(Exam)
class ExamAdmin(admin.ModelAdmin):
    list_display = ("name", "exam_type", "semester", "created_at")
    list_filter = ("exam_type", "semester")
    search_fields = ("name",)
    inlines = [ExamScheduleInline]


@admin.register(ExamSchedule)
class ExamScheduleAdmin(admin.ModelAdmin):
    list_display = ("exam", "course", "exam_date", "total_marks", "weightage", "marks_locked")
    list_filter = ("marks_locked", "exam__semester", "exam__exam_type")
    search_fields = ("course__code", "course__title", "exam__name")
    actions = ["lock_selected", "unlock_selected"]

    def _set_lock(self, request, queryset, locked):
        for schedule in queryset:
            try:
                lock_marks(schedule.id, locked)
            except ResultError as exc:
                self.message_user(request, f"{schedule}: {exc.message}", level=messages.ERROR)
        self.message_user(request, "Marks locked." if locked else "Marks unlocked.", level=messages.SUCCESS)

    @admin.action(description="Lock marks")
    def lock_selected(self, request, queryset):
        self._set_lock(request, queryset, True)

    @admin.action(description="Unlock marks (admin override)")
    def unlock_selected(self, request, queryset):
        self._set_lock(request, queryset, False)


@admin.register(Marks)
class MarksAdmin(admin.ModelAdmin):
    list_display = ("student", "exam_schedule", "obtained_marks", "total_marks", "entered_by", "entry_date")
    list_filter = ("exam_schedule__exam__semester", "exam_schedule__course")
    search_fields = ("student__roll_no", "student__registration_no", "exam_schedule__course__code")

    def has_change_permission(self, request, obj=None):
        if obj is not None and obj.exam_schedule.marks_locked:
            return False
        return super().has_change_permission(request, obj)

    def has_delete_permission(self, request, obj=None):
        if obj is not None and obj.exam_schedule.marks_locked:
            return False
        return super().has_delete_permission(request, obj)


# -------------------------------------------------
# Derived results (read-only: recomputed by the pipeline)
# -------------------------------------------------
class ReadOnlyAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(Grade)
class GradeAdmin(ReadOnlyAdmin):
    list_display = ("student", "course", "semester", "marks", "letter_grade", "grade_point", "credit_hours")
    list_filter = ("semester", "course", "letter_grade")
    search_fields = ("student__roll_no", "student__registration_no", "course__code", "course__title")


@admin.register(SemesterResult)
class SemesterResultAdmin(ReadOnlyAdmin):
    list_display = ("student", "semester", "sgpa", "cgpa", "total_credits", "status", "on_probation")
    list_filter = ("semester", "status", "on_probation")
    search_fields = ("student__roll_no", "student__registration_no")


# -------------------------------------------------
# Grade Scale
# -------------------------------------------------
@admin.register(GradeScale)
class GradeScaleAdmin(admin.ModelAdmin):
    list_display = (
        "min_percentage",
        "max_percentage",
        "letter_grade",
        "grade_point",
        "remarks",
    )
    ordering = ("-min_percentage",)
