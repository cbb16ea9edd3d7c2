from django.core.management.base import BaseCommand

from results.services.grade_scale import DEFAULT_GRADE_SCALE, seed_default_scale


class Command(BaseCommand):
    help = "Install the default HEC grade scale (run once per deployment)."

    def add_arguments(self, parser):
        parser.add_argument("--force", action="store_true", help="Replace an existing grade scale")

    def handle(self, *args, **options):
        if seed_default_scale(force=options["force"]):
            self.stdout.write(self.style.SUCCESS(f"Installed default grade scale ({len(DEFAULT_GRADE_SCALE)} bands)."))
        else:
            self.stdout.write(self.style.WARNING("Grade scale already present. Use --force to replace it."))
