from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("academics", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Student",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("father_name", models.CharField(blank=True, max_length=200)),
                ("registration_no", models.CharField(max_length=50, unique=True)),
                ("roll_no", models.CharField(max_length=50, unique=True)),
                ("current_semester", models.PositiveSmallIntegerField(default=1)),
                ("is_active", models.BooleanField(default=True)),
                ("department", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="students", to="academics.department")),
                ("program", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="students", to="academics.program")),
                ("user", models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="student_profile", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["roll_no"],
            },
        ),
        migrations.CreateModel(
            name="CourseRegistration",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("status", models.CharField(choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected")], default="approved", max_length=20)),
                ("registered_at", models.DateTimeField(auto_now_add=True)),
                ("course", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="registrations", to="academics.course")),
                ("semester", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="registrations", to="academics.semester")),
                ("student", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="registrations", to="students.student")),
            ],
            options={
                "unique_together": {("student", "course", "semester")},
            },
        ),
    ]
