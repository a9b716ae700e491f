"""
Role and ownership resolution.

This module is the only place that writes `UserProfile.role`. Every function
takes the acting user's id explicitly; nothing here reads the current request
or session.
"""
import logging

from django.db import transaction
from django.utils import timezone

from core.exceptions import NotFoundError, ValidationError, store_errors
from .models import UserProfile

logger = logging.getLogger(__name__)

Role = UserProfile.Role


def get_role(user_id):
    """
    Returns the current role of a user.

    A user without a profile is treated as a plain 'user'.
    """
    with store_errors('get role'):
        role = UserProfile.objects.filter(user_id=user_id).values_list('role', flat=True).first()
    return Role(role) if role else Role.USER


def is_admin(user_id):
    """True if the user currently holds the 'admin' role."""
    return user_id is not None and get_role(user_id) == Role.ADMIN


def is_owner(user_id, entity_id, family):
    """
    Checks whether `user_id` is the registered owner of a catalog entity.

    Ownership is entity specific: admins are not treated as owners here,
    callers that want an admin override have to apply it themselves.

    Args:
        user_id: The id of the user to check. `None` is never an owner.
        entity_id: The primary key of the business or tourism place.
        family (CatalogFamily): Describes which model and owner field to use.

    Returns:
        bool: True iff the entity's owner reference equals `user_id`.
    """
    if user_id is None:
        return False
    with store_errors('ownership check'):
        return family.model.objects.filter(
            pk=entity_id, **{f'{family.owner_field}_id': user_id}
        ).exists()


def promote_if_first_listing(user_id):
    """
    Promotes a plain 'user' to 'business_owner' after they create a listing.

    The call is idempotent: it never demotes anybody and leaves admins and
    existing business owners untouched.

    Returns:
        bool: True if the role was changed by this call.
    """
    with store_errors('promote user'), transaction.atomic():
        profile, _ = UserProfile.objects.select_for_update().get_or_create(user_id=user_id)
        if profile.role != Role.USER:
            return False
        profile.role = Role.BUSINESS_OWNER
        profile.save(update_fields=['role', 'updated_at'])

    logger.info("Promoted user %s to business_owner after first listing", user_id)
    return True


def set_role(user_id, role):
    """
    Sets a user's role. Used by the admin-only role endpoint.

    Raises:
        ValidationError: If `role` is not one of the known roles.
        NotFoundError: If the user has no profile.
    """
    if role not in Role.values:
        raise ValidationError(f"Unknown role '{role}'.", code='invalid_role')

    with store_errors('set role'):
        updated = UserProfile.objects.filter(user_id=user_id).update(role=role, updated_at=timezone.now())
    if not updated:
        raise NotFoundError("User not found.")

    logger.info("Role of user %s set to %s", user_id, role)
    return Role(role)
