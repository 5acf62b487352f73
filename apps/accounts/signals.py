import logging

from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
from django.contrib.auth import get_user_model
from .models import UserProfile, UserRole
from .services import invalidate_users


User = get_user_model()
logger = logging.getLogger(__name__)


# SIGNAL 1: AUTO-CREATE USER PROFILE
@receiver(post_save, sender=User)
def create_user_profile(sender, instance, created, **kwargs):
    # No role row is written here: a fresh identity reads as the 'user' role
    # until an administrator assigns one.
    if created:
        profile, created_profile = UserProfile.objects.get_or_create(
            user=instance,
            defaults={'email': instance.email},
        )
        if created_profile:
            logger.info("Profile created for user: %s", instance.email)


# SIGNAL 2: KEEP THE CACHED USER LIST FRESH
@receiver(post_save, sender=UserProfile)
@receiver(post_save, sender=UserRole)
@receiver(post_delete, sender=UserRole)
def invalidate_user_list(sender, instance, **kwargs):
    invalidate_users()

    if sender is UserRole:
        from apps.leads.performance import invalidate_team_performance
        invalidate_team_performance()
