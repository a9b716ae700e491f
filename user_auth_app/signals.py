from django.conf import settings
from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import UserProfile


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def create_user_profile(sender, instance, created, **kwargs):
    """
    Creates the `UserProfile` of a freshly saved user.

    Every account starts with the plain 'user' role. `get_or_create` keeps the
    handler harmless when a profile was already created explicitly.
    """
    if created:
        UserProfile.objects.get_or_create(user=instance)
