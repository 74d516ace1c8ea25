from django.core.management.base import BaseCommand

from billing_core.services.customers import purge_expired_companies


class Command(BaseCommand):
    help = "Permanently delete junk companies past the retention window."

    def handle(self, *args, **options):
        purged = purge_expired_companies()
        self.stdout.write(self.style.SUCCESS(f"Purged {purged} companies."))
