"""
Account profile: role and contact data layered on Django's auth user.
"""
from django.conf import settings
from django.db import models
from apps.core.models import UUIDModel, TimestampedModel


class Role(models.TextChoices):
    OWNER  = 'Owner',  'Owner'
    TENANT = 'Tenant', 'Tenant'


class Profile(UUIDModel, TimestampedModel):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='profile',
    )
    role = models.CharField(max_length=10, choices=Role.choices, default=Role.TENANT, db_index=True)
    phone = models.CharField(max_length=20, blank=True)

    class Meta:
        verbose_name = 'Profile'
        verbose_name_plural = 'Profiles'

    def __str__(self):
        return f"{self.user.get_username()} ({self.role})"

    @property
    def is_owner(self):
        return self.role == Role.OWNER


def is_owner(user) -> bool:
    """True for authenticated users whose profile carries the Owner role."""
    if not user.is_authenticated:
        return False
    profile = getattr(user, 'profile', None)
    return profile is not None and profile.is_owner
