from django.db import models


class Department(models.Model):
    name = models.CharField(max_length=255, unique=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Program(models.Model):
    """
    Example:
    - BS Computer Science (8 semesters)
    - AD (4 semesters)
    """

    department = models.ForeignKey(Department, on_delete=models.PROTECT, related_name="programs")
    name = models.CharField(max_length=200)
    total_semesters = models.PositiveSmallIntegerField(default=8)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.total_semesters} semesters)"


class Session(models.Model):
    """
    Intake year, e.g. 2023.
    Printed session range depends on Program duration.
    """

    start_year = models.PositiveSmallIntegerField(unique=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["-start_year"]

    def __str__(self):
        return str(self.start_year)

    def display_for_program(self, program) -> str:
        """
        Returns something like '2023-2027' depending on program duration.
        We assume 2 semesters per year.
        """
        total_semesters = int(program.total_semesters)
        years = (total_semesters + 1) // 2
        return f"{self.start_year}-{self.start_year + years}"


class Semester(models.Model):
    """
    One semester of a program intake. Also carries the publication gate:
    results become visible to students once published, and marks become
    immutable once frozen.
    """

    program = models.ForeignKey(Program, on_delete=models.CASCADE, related_name="semesters")
    session = models.ForeignKey(Session, on_delete=models.CASCADE, related_name="semesters")
    number = models.PositiveSmallIntegerField()
    name = models.CharField(max_length=100, blank=True)

    results_published = models.BooleanField(default=False)
    results_published_at = models.DateTimeField(null=True, blank=True)
    results_frozen = models.BooleanField(default=False)
    results_frozen_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        unique_together = ("program", "session", "number")
        ordering = ["number"]

    def __str__(self):
        return self.name or f"{self.program.name} | {self.session.start_year} | Semester {self.number}"


class Course(models.Model):
    code = models.CharField(max_length=30, unique=True)
    title = models.CharField(max_length=255)
    credit_hours = models.DecimalField(max_digits=4, decimal_places=1, default=3)

    class Meta:
        ordering = ["code"]

    def __str__(self):
        return f"{self.code} - {self.title} ({self.credit_hours} CH)"
