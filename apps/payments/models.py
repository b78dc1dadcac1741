"""
Payment model: one attempt to pay a Bill through a gateway.

Status machine:
    PENDING ──► COMPLETED   (terminal, never left)
        └─────► FAILED      (a later successful gateway query may still complete it)

Transitions go through mark_completed() / mark_failed(), which write the
status, the payment date and a PaymentStatusLog row in one transaction.
"""
import uuid
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models, transaction
from django.utils import timezone
from apps.core.models import UUIDModel, TimestampedModel
from apps.bills.models import Bill
from apps.rooms.models import Contract

TRANSACTION_CODE_PREFIX = 'VNP'


def generate_transaction_code(now=None) -> str:
    """
    'VNP' + local YYYYMMDDHHmmss + 8 random hex chars.
    The random tail keeps codes unique for checkouts started in the same second.
    """
    now = timezone.localtime(now or timezone.now())
    return f"{TRANSACTION_CODE_PREFIX}{now:%Y%m%d%H%M%S}{uuid.uuid4().hex[:8]}"


class PaymentMethod(models.TextChoices):
    ONLINE        = 'Online Payment', 'Online Payment'
    CASH          = 'Cash',           'Cash'
    BANK_TRANSFER = 'Bank Transfer',  'Bank Transfer'


class PaymentStatus(models.TextChoices):
    PENDING   = 'Pending',   'Pending'
    COMPLETED = 'Completed', 'Completed'
    FAILED    = 'Failed',    'Failed'


class Payment(UUIDModel, TimestampedModel):
    bill = models.ForeignKey(Bill, on_delete=models.PROTECT, related_name='payments')
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='payments',
    )
    contract = models.ForeignKey(
        Contract, on_delete=models.SET_NULL, null=True, blank=True, related_name='payments',
    )
    payment_method = models.CharField(
        max_length=20, choices=PaymentMethod.choices, default=PaymentMethod.ONLINE,
    )
    total_amount = models.PositiveBigIntegerField(
        validators=[MinValueValidator(1)], help_text='Amount in VND',
    )
    status = models.CharField(
        max_length=10, choices=PaymentStatus.choices, default=PaymentStatus.PENDING, db_index=True,
    )
    transaction_code = models.CharField(
        max_length=32, unique=True, editable=False, default=generate_transaction_code,
    )
    payment_date = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = 'Payment'
        verbose_name_plural = 'Payments'
        ordering = ['-created_at']

    def __str__(self):
        return f"Payment {self.transaction_code} [{self.status}] {self.total_amount:,} VND"

    @property
    def is_completed(self):
        return self.status == PaymentStatus.COMPLETED

    # ── State transition helpers ──────────────────────────────────────────────

    def mark_completed(self, source, response_code='00'):
        """Pending/Failed → Completed, stamping payment_date. No-op when already Completed."""
        if self.is_completed:
            return False
        with transaction.atomic():
            self._transition(PaymentStatus.COMPLETED, source, response_code)
            self.payment_date = timezone.now()
            self.save(update_fields=['status', 'payment_date', 'updated_at'])
        return True

    def mark_failed(self, source, response_code=''):
        """Pending → Failed. Completed payments are never downgraded."""
        if self.is_completed or self.status == PaymentStatus.FAILED:
            return False
        with transaction.atomic():
            self._transition(PaymentStatus.FAILED, source, response_code)
            self.save(update_fields=['status', 'updated_at'])
        return True

    def _transition(self, new_status, source, response_code):
        old_status = self.status
        self.status = new_status
        PaymentStatusLog.objects.create(
            payment=self,
            from_status=old_status,
            to_status=new_status,
            source=source,
            response_code=response_code or '',
        )


class PaymentStatusLog(UUIDModel):
    """Immutable audit trail of every payment status transition."""
    payment = models.ForeignKey(Payment, on_delete=models.CASCADE, related_name='status_logs')
    from_status = models.CharField(max_length=10, choices=PaymentStatus.choices)
    to_status = models.CharField(max_length=10, choices=PaymentStatus.choices)
    source = models.CharField(max_length=20, help_text='return / querydr / admin')
    response_code = models.CharField(max_length=4, blank=True)
    changed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = 'Payment Status Log'
        verbose_name_plural = 'Payment Status Logs'
        ordering = ['changed_at']

    def __str__(self):
        return f"Payment {self.payment_id}: {self.from_status} → {self.to_status} ({self.source})"
