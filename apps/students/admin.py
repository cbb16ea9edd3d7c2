from django.contrib import admin

from .models import Student, CourseRegistration


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ("name", "roll_no", "registration_no", "program", "current_semester", "department", "is_active")
    search_fields = ("name", "roll_no", "registration_no")
    list_filter = ("department", "program", "current_semester", "is_active")


@admin.register(CourseRegistration)
class CourseRegistrationAdmin(admin.ModelAdmin):
    list_display = ("student", "course", "semester", "status", "registered_at")
    list_filter = ("status", "semester", "course")
    search_fields = ("student__roll_no", "student__name", "course__code")
