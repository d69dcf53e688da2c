"""
Management command to convert expired active coupons to used.

Usage:
    python manage.py expire_coupons

Intended to run from cron; reads already apply expiry, so this only
keeps stored state and admin statistics current between reads.
"""

from django.core.management.base import BaseCommand

from apps.coupons.services import sweep_expired


class Command(BaseCommand):
    help = 'Mark active coupons whose validity window has elapsed as used'

    def handle(self, *args, **options):
        count = sweep_expired()
        self.stdout.write(self.style.SUCCESS(f'Expired {count} coupons'))
