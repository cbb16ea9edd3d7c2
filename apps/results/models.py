from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from academics.models import Course, Semester
from students.models import Student


class GradeScale(models.Model):
    min_percentage = models.DecimalField(max_digits=5, decimal_places=2)
    max_percentage = models.DecimalField(max_digits=5, decimal_places=2)
    letter_grade = models.CharField(max_length=5)
    grade_point = models.DecimalField(max_digits=4, decimal_places=2)
    remarks = models.CharField(max_length=50, default="Pass")

    class Meta:
        ordering = ["-min_percentage"]

    def __str__(self):
        return f"{self.min_percentage}-{self.max_percentage}: {self.letter_grade} ({self.grade_point})"


class Exam(models.Model):
    """
    An examination event of a semester (e.g. Midterm Fall 2024).
    """

    EXAM_TYPES = [
        ("midterm", "Midterm"),
        ("final", "Final"),
        ("quiz", "Quiz"),
        ("assignment", "Assignment"),
        ("sessional", "Sessional"),
    ]

    semester = models.ForeignKey(Semester, on_delete=models.CASCADE, related_name="exams")
    name = models.CharField(max_length=100)
    exam_type = models.CharField(max_length=20, choices=EXAM_TYPES, default="final")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["semester", "created_at"]

    def __str__(self):
        return f"{self.name} ({self.get_exam_type_display()})"


class ExamSchedule(models.Model):
    """
    One graded, weighted component of a course within an exam.
    """

    exam = models.ForeignKey(Exam, on_delete=models.CASCADE, related_name="schedules")
    course = models.ForeignKey(Course, on_delete=models.PROTECT, related_name="exam_schedules")
    exam_date = models.DateField(null=True, blank=True)

    # marks are entered on a 0-100 scale, so a component is out of at most 100
    total_marks = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=100,
        validators=[MinValueValidator(Decimal("0.01")), MaxValueValidator(Decimal("100"))],
    )
    # percent of the course grade carried by this component
    weightage = models.DecimalField(max_digits=5, decimal_places=2, default=100)

    marks_locked = models.BooleanField(default=False)

    class Meta:
        unique_together = ("exam", "course")

    def __str__(self):
        return f"{self.exam.name} | {self.course.code} ({self.weightage}%)"


class Marks(models.Model):
    student = models.ForeignKey(Student, on_delete=models.PROTECT, related_name="marks")
    exam_schedule = models.ForeignKey(ExamSchedule, on_delete=models.CASCADE, related_name="marks")

    obtained_marks = models.DecimalField(max_digits=5, decimal_places=2)
    total_marks = models.DecimalField(max_digits=5, decimal_places=2, default=100)

    entered_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="entered_marks",
    )
    entry_date = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ("student", "exam_schedule")
        verbose_name_plural = "marks"

    def __str__(self):
        return f"{self.student.roll_no} | {self.exam_schedule} | {self.obtained_marks}/{self.total_marks}"


class Grade(models.Model):
    """
    Final course grade per student per semester.
    Derived by the grade calculator, never edited by hand.
    """

    student = models.ForeignKey(Student, on_delete=models.PROTECT, related_name="grades")
    course = models.ForeignKey(Course, on_delete=models.PROTECT, related_name="grades")
    semester = models.ForeignKey(Semester, on_delete=models.CASCADE, related_name="grades")

    marks = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    letter_grade = models.CharField(max_length=5)
    grade_point = models.DecimalField(max_digits=4, decimal_places=2, default=0)
    credit_hours = models.DecimalField(max_digits=4, decimal_places=1, default=3)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ("student", "course", "semester")

    def __str__(self):
        return f"{self.student.roll_no} | {self.course.code} | {self.letter_grade}"


class SemesterResult(models.Model):
    """
    One row per student per semester.

    Status flow: pending -> pass | fail, pass -> promoted.
    Probation students are stored as pass with on_probation set.
    """

    STATUS_CHOICES = [
        ("pending", "Pending"),
        ("pass", "Pass"),
        ("fail", "Fail"),
        ("promoted", "Promoted"),
    ]

    student = models.ForeignKey(Student, on_delete=models.PROTECT, related_name="semester_results")
    semester = models.ForeignKey(Semester, on_delete=models.CASCADE, related_name="semester_results")

    sgpa = models.DecimalField(max_digits=4, decimal_places=2, default=0)
    # over this semester and the ones before it
    cgpa = models.DecimalField(max_digits=4, decimal_places=2, default=0)
    total_credits = models.DecimalField(max_digits=6, decimal_places=1, default=0)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="pending")
    on_probation = models.BooleanField(default=False)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ("student", "semester")

    def __str__(self):
        return f"{self.student.roll_no} | Sem {self.semester.number} | {self.status}"
