"""
Rooms app models:
  - BoardingHouse : a landlord's property
  - Room          : rentable unit, Available or Occupied by one tenant
  - Contract      : rental agreement between a tenant and a room
"""
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from apps.core.models import BaseModel, UUIDModel, TimestampedModel


class BoardingHouse(BaseModel):
    landlord = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='boarding_houses',
    )
    name = models.CharField(max_length=150)
    address = models.TextField()

    class Meta:
        verbose_name = 'Boarding House'
        verbose_name_plural = 'Boarding Houses'
        ordering = ['name']

    def __str__(self):
        return self.name


class RoomStatus(models.TextChoices):
    AVAILABLE = 'Available', 'Available'
    OCCUPIED  = 'Occupied',  'Occupied'


class Room(BaseModel):
    boarding_house = models.ForeignKey(
        BoardingHouse, on_delete=models.PROTECT, related_name='rooms', null=True, blank=True,
    )
    landlord = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='owned_rooms',
    )
    tenant = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
        related_name='rented_rooms',
    )
    room_number = models.CharField(max_length=20)
    price = models.PositiveIntegerField(help_text='Monthly rent in VND')
    area = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True,
                               help_text='Square metres')
    status = models.CharField(
        max_length=10, choices=RoomStatus.choices, default=RoomStatus.AVAILABLE, db_index=True,
    )

    class Meta:
        verbose_name = 'Room'
        verbose_name_plural = 'Rooms'
        ordering = ['room_number']
        constraints = [
            models.UniqueConstraint(
                fields=['boarding_house', 'room_number'],
                condition=models.Q(deleted_at__isnull=True),
                name='uq_live_room_number',
            )
        ]

    def __str__(self):
        return f"Phòng {self.room_number}"

    # ── Occupancy transitions ─────────────────────────────────────────────────

    def assign_tenant(self, tenant):
        self.tenant = tenant
        self.status = RoomStatus.OCCUPIED
        self.save(update_fields=['tenant', 'status', 'updated_at'])

    def release_tenant(self):
        self.tenant = None
        self.status = RoomStatus.AVAILABLE
        self.save(update_fields=['tenant', 'status', 'updated_at'])


class ContractStatus(models.TextChoices):
    ACTIVE     = 'Active',     'Active'
    TERMINATED = 'Terminated', 'Terminated'


class Contract(UUIDModel, TimestampedModel):
    room = models.ForeignKey(Room, on_delete=models.PROTECT, related_name='contracts')
    tenant = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='contracts',
    )
    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True)
    monthly_rent = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    deposit = models.PositiveIntegerField(default=0)
    status = models.CharField(
        max_length=12, choices=ContractStatus.choices, default=ContractStatus.ACTIVE, db_index=True,
    )

    class Meta:
        verbose_name = 'Contract'
        verbose_name_plural = 'Contracts'
        ordering = ['-start_date']

    def __str__(self):
        return f"{self.room} - {self.tenant} ({self.start_date})"
