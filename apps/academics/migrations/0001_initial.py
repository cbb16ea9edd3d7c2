from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Department",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255, unique=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Session",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("start_year", models.PositiveSmallIntegerField(unique=True)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={
                "ordering": ["-start_year"],
            },
        ),
        migrations.CreateModel(
            name="Course",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=30, unique=True)),
                ("title", models.CharField(max_length=255)),
                ("credit_hours", models.DecimalField(decimal_places=1, default=3, max_digits=4)),
            ],
            options={
                "ordering": ["code"],
            },
        ),
        migrations.CreateModel(
            name="Program",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("total_semesters", models.PositiveSmallIntegerField(default=8)),
                ("is_active", models.BooleanField(default=True)),
                ("department", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="programs", to="academics.department")),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Semester",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("number", models.PositiveSmallIntegerField()),
                ("name", models.CharField(blank=True, max_length=100)),
                ("results_published", models.BooleanField(default=False)),
                ("results_published_at", models.DateTimeField(blank=True, null=True)),
                ("results_frozen", models.BooleanField(default=False)),
                ("results_frozen_at", models.DateTimeField(blank=True, null=True)),
                ("program", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="semesters", to="academics.program")),
                ("session", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="semesters", to="academics.session")),
            ],
            options={
                "ordering": ["number"],
                "unique_together": {("program", "session", "number")},
            },
        ),
    ]
