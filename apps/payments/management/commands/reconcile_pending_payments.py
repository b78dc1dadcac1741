"""
management command: reconcile_pending_payments

Runs a VNPay querydr for every Pending payment older than the cutoff, so
payments whose return redirect never reached us still settle.

Run via OS cron every 5 minutes:
  */5 * * * *  /path/to/venv/bin/python manage.py reconcile_pending_payments
"""
from datetime import timedelta
from django.conf import settings
from django.core.management.base import BaseCommand
from django.utils import timezone
from apps.payments.models import Payment, PaymentStatus
from apps.payments.services import check_vnpay_transaction, CODE_SYSTEM_ERROR
from apps.payments.vnpay import VNPayClient


class Command(BaseCommand):
    help = 'Query VNPay for stale Pending payments and reconcile their status'

    def add_arguments(self, parser):
        parser.add_argument(
            '--older-than', type=int, default=settings.PENDING_PAYMENT_RECONCILE_MINUTES,
            help='Only check payments created more than this many minutes ago',
        )

    def handle(self, *args, **options):
        cutoff = timezone.now() - timedelta(minutes=options['older_than'])
        pending = Payment.objects.filter(
            status=PaymentStatus.PENDING,
            created_at__lt=cutoff,
        ).values_list('transaction_code', flat=True)

        client = VNPayClient.from_settings()
        counts = {'completed': 0, 'failed': 0, 'errors': 0}
        for code in list(pending):
            result = check_vnpay_transaction(code, client=client)
            if result.is_success:
                counts['completed'] += 1
            elif result.code == CODE_SYSTEM_ERROR:
                counts['errors'] += 1
            else:
                counts['failed'] += 1

        self.stdout.write(
            self.style.SUCCESS(
                f"reconcile_pending_payments: completed {counts['completed']}, "
                f"failed {counts['failed']}, errors {counts['errors']}"
            )
        )
