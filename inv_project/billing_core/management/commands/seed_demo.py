from django.core.management import call_command
from django.core.management.base import BaseCommand


class Command(BaseCommand):
    help = "Seeds the database with demo billing data (wraps create_demo_tenant)."

    # Define command-line argument
    def add_arguments(self, parser):
        parser.add_argument(
            "--business",
            type=str,
            default="Demo Traders",
            help="Seller name for the demo profile (default: Demo Traders)",
        )

    def handle(self, *args, **options):
        business = options["business"]

        self.stdout.write(self.style.NOTICE(f"Seeding demo data for {business}..."))
        call_command("create_demo_tenant", business_name=business)
        self.stdout.write(self.style.SUCCESS("Demo data seeded successfully!"))
