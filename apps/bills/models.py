"""
Bill model: what a tenant owes for one room and one month.

The payment flow only reads bills. Whether a bill is settled is derived
from its Completed payments, never stored.
"""
from django.conf import settings
from django.db import models
from apps.core.models import UUIDModel, TimestampedModel
from apps.rooms.models import Room, Contract


class Bill(UUIDModel, TimestampedModel):
    room = models.ForeignKey(Room, on_delete=models.PROTECT, related_name='bills')
    tenant = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='bills',
    )
    contract = models.ForeignKey(
        Contract, on_delete=models.SET_NULL, null=True, blank=True, related_name='bills',
    )
    billing_month = models.DateField(help_text='First day of the billed month')

    # All amounts in VND
    room_charge = models.PositiveIntegerField(default=0)
    electricity_charge = models.PositiveIntegerField(default=0)
    water_charge = models.PositiveIntegerField(default=0)
    service_charge = models.PositiveIntegerField(default=0)
    total_amount = models.PositiveIntegerField(default=0, editable=False)

    due_date = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        verbose_name = 'Bill'
        verbose_name_plural = 'Bills'
        ordering = ['-billing_month', 'room__room_number']
        constraints = [
            models.UniqueConstraint(fields=['room', 'billing_month'], name='uq_bill_room_month'),
        ]

    def __str__(self):
        return f"Hóa đơn {self.room} {self.billing_month:%m/%Y}"

    def save(self, *args, **kwargs):
        self.billing_month = self.billing_month.replace(day=1)
        self.total_amount = (
            self.room_charge + self.electricity_charge + self.water_charge + self.service_charge
        )
        update_fields = kwargs.get('update_fields')
        if update_fields is not None:
            kwargs['update_fields'] = set(update_fields) | {'total_amount', 'billing_month'}
        super().save(*args, **kwargs)

    @property
    def is_paid(self):
        from apps.payments.models import PaymentStatus
        return self.payments.filter(status=PaymentStatus.COMPLETED).exists()
