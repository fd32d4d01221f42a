"""
Management command to set up Django-Q2 schedules.

Creates/updates the scheduled jobs:
- Daily recurring task generation (01:00 local time)

Usage:
    python manage.py setup_schedules

The command is idempotent - safe to run multiple times.
"""
from django.core.management.base import BaseCommand
from django_q.models import Schedule

SCHEDULES = [
    {
        'name': 'Generate Recurring Tasks',
        'func': 'apps.tasks.jobs.generate_recurring_tasks',
        'cron': '0 1 * * *',
        'label': 'daily at 1:00 AM',
    },
]


class Command(BaseCommand):
    help = 'Set up Django-Q2 schedules for background jobs'

    def handle(self, *args, **options):
        self.stdout.write('\nSetting up Django-Q2 schedules...\n')

        created_count = 0
        for entry in SCHEDULES:
            _, created = Schedule.objects.update_or_create(
                name=entry['name'],
                defaults={
                    'func': entry['func'],
                    'schedule_type': Schedule.CRON,
                    'cron': entry['cron'],
                    'repeats': -1,  # Run forever
                },
            )
            if created:
                created_count += 1
                self.stdout.write(
                    self.style.SUCCESS(f"✓ Created schedule: {entry['name']} ({entry['label']})")
                )
            else:
                self.stdout.write(
                    self.style.WARNING(f"↻ Updated schedule: {entry['name']} ({entry['label']})")
                )

        self.stdout.write('')
        self.stdout.write(
            self.style.SUCCESS(
                f'Done! {created_count} schedule(s) created, '
                f'{len(SCHEDULES) - created_count} updated.'
            )
        )
        self.stdout.write(
            self.style.NOTICE(
                'Note: Ensure Django-Q cluster is running: python manage.py qcluster'
            )
        )
        self.stdout.write('')
