"""
Run the daily business checks (overdue invoices, due-date reminders,
low stock, notification cleanup).

Crontab entry:
    0 9 * * * cd /srv/evotech && python manage.py run_daily_jobs
"""
from django.core.management.base import BaseCommand, CommandError
from backend.core.jobs import DAILY_JOBS, run_daily_jobs


class Command(BaseCommand):
    help = 'Run the daily notification and cleanup jobs'

    def add_arguments(self, parser):
        parser.add_argument(
            '--only',
            action='append',
            choices=sorted(DAILY_JOBS),
            help='Run only this job (repeatable)',
        )

    def handle(self, *args, **options):
        only = options.get('only')
        results = run_daily_jobs(only=only)
        failed = [name for name, result in results.items() if result is None]

        for name, result in results.items():
            if result is None:
                self.stdout.write(self.style.ERROR(f"  {name}: failed (see logs)"))
            else:
                self.stdout.write(f"  {name}: {result}")

        if failed:
            raise CommandError(f"{len(failed)} job(s) failed: {', '.join(failed)}")
        self.stdout.write(self.style.SUCCESS(f"Daily jobs completed ({len(results)} run)"))
