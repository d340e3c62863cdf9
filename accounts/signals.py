# accounts/signals.py
from __future__ import annotations

import logging

from django.conf import settings
from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import Profile

logger = logging.getLogger(__name__)


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def create_or_update_profile(sender, instance, created, **kwargs):
    """Ensure every user has a Profile.

    - On create: create Profile seeded from the User name.
    - On update: guarantee Profile exists (never overwrite profile edits).
    """
    if created:
        full_name = f"{getattr(instance, 'first_name', '')} {getattr(instance, 'last_name', '')}".strip()
        Profile.objects.create(user=instance, full_name=full_name)
        logger.info("Profile created for user %s", instance.pk)
        return

    Profile.objects.get_or_create(user=instance)
