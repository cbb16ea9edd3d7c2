from django.contrib import admin, messages

from results.exceptions import ResultError
from results.services.processing import process_results
from results.services.publication import freeze_results, publish_results

from .models import Department, Program, Session, Semester, Course


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ("name",)
    search_fields = ("name",)


@admin.register(Program)
class ProgramAdmin(admin.ModelAdmin):
    list_display = ("name", "department", "total_semesters", "is_active")
    list_filter = ("department", "is_active")
    search_fields = ("name",)


@admin.register(Session)
class SessionAdmin(admin.ModelAdmin):
    list_display = ("start_year", "is_active")
    list_filter = ("is_active",)
    search_fields = ("start_year",)


@admin.register(Semester)
class SemesterAdmin(admin.ModelAdmin):
    list_display = (
        "program",
        "session",
        "number",
        "results_published",
        "results_published_at",
        "results_frozen",
        "results_frozen_at",
    )
    list_filter = ("program", "session", "results_published", "results_frozen")
    readonly_fields = ("results_published_at", "results_frozen_at")
    actions = ["process_selected", "publish_selected", "freeze_selected"]

    def _run(self, request, queryset, func, label):
        for semester in queryset:
            try:
                func(semester.id)
            except ResultError as exc:
                self.message_user(request, f"{semester}: {exc.message}", level=messages.ERROR)
            else:
                self.message_user(request, f"{semester}: {label}", level=messages.SUCCESS)

    @admin.action(description="Process results (default thresholds)")
    def process_selected(self, request, queryset):
        self._run(request, queryset, process_results, "results processed")

    @admin.action(description="Publish results")
    def publish_selected(self, request, queryset):
        self._run(request, queryset, publish_results, "results published")

    @admin.action(description="Freeze results (locks all marks)")
    def freeze_selected(self, request, queryset):
        self._run(request, queryset, freeze_results, "results frozen")


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ("code", "title", "credit_hours")
    search_fields = ("code", "title")
    ordering = ("code",)
