# utils/models.py

"""
Base model for the college information system.

Every concrete model extends BaseModel and gets:
- A UUID primary key
- created_at / updated_at timestamps maintained on save
- Sparse-patch support via ``apply_patch``
"""

from django.db import models
from django.utils import timezone
import uuid
import logging

logger = logging.getLogger(__name__)


# =============================================================================
# BASE MODEL
# =============================================================================

class BaseModel(models.Model):
    """
    Abstract base model with UUID identity and audit timestamps.

    Timestamps are set in ``save``; explicit values on new records are kept.
    """

    # Core identification
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    created_at = models.DateTimeField(
        "Created At",
        blank=True,
        db_index=True,
        help_text="When this record was created"
    )
    updated_at = models.DateTimeField(
        "Updated At",
        blank=True,
        db_index=True,
        help_text="When this record was last updated"
    )

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        """Set timestamps, then save."""
        now = timezone.now()

        if self._state.adding:
            if not self.created_at:
                self.created_at = now
            if not self.updated_at:
                self.updated_at = now
        else:
            self.updated_at = now
            update_fields = kwargs.get('update_fields')
            if update_fields is not None and 'updated_at' not in update_fields:
                kwargs['update_fields'] = list(update_fields) + ['updated_at']

        return super().save(*args, **kwargs)

    def apply_patch(self, patch):
        """
        Apply a sparse patch and save only the changed fields.

        The changed fields are validated (choices, validators, blank)
        before anything is written; uniqueness is left to the database.

        Args:
            patch: object exposing ``changes()`` -> dict of supplied fields

        Returns:
            list: Names of fields that were updated

        Raises:
            ValidationError: A changed field holds an invalid value
        """
        changed = []
        for field_name, value in patch.changes().items():
            setattr(self, field_name, value)
            changed.append(field_name)

        if changed:
            self.full_clean(
                exclude=[
                    field.name for field in self._meta.fields
                    if field.name not in changed and field.attname not in changed
                ],
                validate_unique=False,
            )
            self.save(update_fields=changed)
            logger.debug(f"Patched {self.__class__.__name__} {self.pk}: {changed}")

        return changed
