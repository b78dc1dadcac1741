"""
Core base model mixins.
Every persistent entity in the project builds on these.
"""
import uuid
from django.db import models
from django.utils import timezone


class UUIDModel(models.Model):
    """Primary key is a UUID, so ids are safe to expose in URLs and the API."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    class Meta:
        abstract = True


class TimestampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class SoftDeleteQuerySet(models.QuerySet):
    def alive(self):
        return self.filter(deleted_at__isnull=True)

    def deleted(self):
        return self.filter(deleted_at__isnull=False)

    def delete(self):
        """Bulk soft delete: stamps deleted_at instead of issuing DELETE."""
        return self.update(deleted_at=timezone.now())

    def hard_delete(self):
        return super().delete()


class AliveManager(models.Manager.from_queryset(SoftDeleteQuerySet)):
    """Default manager: hides soft-deleted rows."""
    def get_queryset(self):
        return super().get_queryset().alive()


class SoftDeleteModel(models.Model):
    """
    Rooms and boarding houses are referenced by historic bills and payments,
    so they are never physically removed. `.delete()` stamps `deleted_at`;
    `all_objects` sees every row, `objects` only the live ones.
    """
    deleted_at = models.DateTimeField(null=True, blank=True, db_index=True)

    objects = AliveManager()
    all_objects = models.Manager.from_queryset(SoftDeleteQuerySet)()

    class Meta:
        abstract = True

    def delete(self, *args, **kwargs):
        self.deleted_at = timezone.now()
        self.save(update_fields=['deleted_at'])

    def hard_delete(self, *args, **kwargs):
        super().delete(*args, **kwargs)

    def restore(self):
        self.deleted_at = None
        self.save(update_fields=['deleted_at'])

    @property
    def is_deleted(self):
        return self.deleted_at is not None


class BaseModel(UUIDModel, TimestampedModel, SoftDeleteModel):
    """UUID pk + timestamps + soft delete, for long-lived business records."""
    class Meta:
        abstract = True
