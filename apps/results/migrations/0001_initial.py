from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("academics", "0001_initial"),
        ("students", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="GradeScale",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("min_percentage", models.DecimalField(decimal_places=2, max_digits=5)),
                ("max_percentage", models.DecimalField(decimal_places=2, max_digits=5)),
                ("letter_grade", models.CharField(max_length=5)),
                ("grade_point", models.DecimalField(decimal_places=2, max_digits=4)),
                ("remarks", models.CharField(default="Pass", max_length=50)),
            ],
            options={
                "ordering": ["-min_percentage"],
            },
        ),
        migrations.CreateModel(
            name="Exam",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("exam_type", models.CharField(choices=[("midterm", "Midterm"), ("final", "Final"), ("quiz", "Quiz"), ("assignment", "Assignment"), ("sessional", "Sessional")], default="final", max_length=20)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("semester", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="exams", to="academics.semester")),
            ],
            options={
                "ordering": ["semester", "created_at"],
            },
        ),
        migrations.CreateModel(
            name="ExamSchedule",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("exam_date", models.DateField(blank=True, null=True)),
                ("total_marks", models.DecimalField(decimal_places=2, default=100, max_digits=5)),
                ("weightage", models.DecimalField(decimal_places=2, default=100, max_digits=5)),
                ("marks_locked", models.BooleanField(default=False)),
                ("course", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="exam_schedules", to="academics.course")),
                ("exam", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="schedules", to="results.exam")),
            ],
            options={
                "unique_together": {("exam", "course")},
            },
        ),
        migrations.CreateModel(
            name="Marks",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("obtained_marks", models.DecimalField(decimal_places=2, max_digits=5)),
                ("total_marks", models.DecimalField(decimal_places=2, default=100, max_digits=5)),
                ("entry_date", models.DateTimeField(auto_now=True)),
                ("entered_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="entered_marks", to=settings.AUTH_USER_MODEL)),
                ("exam_schedule", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="marks", to="results.examschedule")),
                ("student", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="marks", to="students.student")),
            ],
            options={
                "verbose_name_plural": "marks",
                "unique_together": {("student", "exam_schedule")},
            },
        ),
        migrations.CreateModel(
            name="Grade",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("marks", models.DecimalField(decimal_places=2, default=0, max_digits=5)),
                ("letter_grade", models.CharField(max_length=5)),
                ("grade_point", models.DecimalField(decimal_places=2, default=0, max_digits=4)),
                ("credit_hours", models.DecimalField(decimal_places=1, default=3, max_digits=4)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("course", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="grades", to="academics.course")),
                ("semester", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="grades", to="academics.semester")),
                ("student", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="grades", to="students.student")),
            ],
            options={
                "unique_together": {("student", "course", "semester")},
            },
        ),
        migrations.CreateModel(
            name="SemesterResult",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("sgpa", models.DecimalField(decimal_places=2, default=0, max_digits=4)),
                ("cgpa", models.DecimalField(decimal_places=2, default=0, max_digits=4)),
                ("total_credits", models.DecimalField(decimal_places=1, default=0, max_digits=6)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("pass", "Pass"), ("fail", "Fail"), ("promoted", "Promoted")], default="pending", max_length=20)),
                ("on_probation", models.BooleanField(default=False)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("semester", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="semester_results", to="academics.semester")),
                ("student", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="semester_results", to="students.student")),
            ],
            options={
                "unique_together": {("student", "semester")},
            },
        ),
    ]
