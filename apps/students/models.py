from django.conf import settings
from django.db import models

from academics.models import Course, Department, Program, Semester


class Student(models.Model):
    department = models.ForeignKey(Department, on_delete=models.PROTECT, related_name="students")
    program = models.ForeignKey(Program, on_delete=models.PROTECT, related_name="students")
    # login account, used to let students read their own published results
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="student_profile",
    )

    name = models.CharField(max_length=200)
    father_name = models.CharField(max_length=200, blank=True)
    registration_no = models.CharField(max_length=50, unique=True)
    roll_no = models.CharField(max_length=50, unique=True)

    # semester number the student is currently studying in
    current_semester = models.PositiveSmallIntegerField(default=1)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["roll_no"]

    def save(self, *args, **kwargs):
        if not self.department_id and self.program_id:
            # Keep in sync with the program's department
            self.department_id = self.program.department_id
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.name} ({self.roll_no})"


class CourseRegistration(models.Model):
    """
    A student taking a course in a semester.
    Only approved registrations are graded.
    """

    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("approved", "Approved"),
        ("rejected", "Rejected"),
    ]

    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name="registrations")
    course = models.ForeignKey(Course, on_delete=models.PROTECT, related_name="registrations")
    semester = models.ForeignKey(Semester, on_delete=models.CASCADE, related_name="registrations")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="approved")
    registered_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ("student", "course", "semester")

    def __str__(self):
        return f"{self.student.roll_no} | {self.course.code} | {self.semester}"
