from django.apps import AppConfig


class ResultsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "results"

    def ready(self):
        # connects the semester_frozen receiver that locks marks
        from results.services import marks  # noqa: F401
