from django.db import models
from django.contrib.auth.models import User


class UserProfile(models.Model):
    """
    Extends the built-in Django User model with the user's role in the directory.

    This model uses a one-to-one relationship to the `User` model, a common
    pattern in Django for adding application-specific fields without creating a
    fully custom user model. A profile is created automatically for every new
    user (see `signals.py`), starting with the plain 'user' role.

    Attributes:
        user (OneToOneField): A required link to an instance of the `auth.User`
            model. Deleting the User will also delete the associated UserProfile.
        full_name (CharField): The name shown next to reviews and listings.
        role (CharField): One of 'user', 'business_owner' or 'admin'. Only the
            functions in `user_auth_app.roles` change this value.
        created_at (DateTimeField): Timestamp set when the profile is created.
        updated_at (DateTimeField): Timestamp of the last change.
    """
    class Role(models.TextChoices):
        """The roles a user can hold. Roles are never self-service."""
        USER = 'user', 'User'
        BUSINESS_OWNER = 'business_owner', 'Business Owner'
        ADMIN = 'admin', 'Admin'

    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name='userprofile',
        help_text="The user this profile belongs to."
    )
    full_name = models.CharField(
        max_length=150,
        blank=True,
        default='',
        help_text="Display name of the user."
    )
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.USER,
        help_text="The role of the user (user, business_owner, admin)."
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "User Profile"
        verbose_name_plural = "User Profiles"

    def __str__(self):
        """
        Returns the username of the associated User together with the role.

        This provides a human-readable representation of the UserProfile instance,
        which is particularly useful in the Django admin interface and for debugging.
        """
        return f"{self.user.username} ({self.role})"

    @property
    def display_name(self):
        """The full name when one is set, otherwise the username."""
        return self.full_name or self.user.username

    @staticmethod
    def display_names(user_ids):
        """
        Maps each user id to its display name with a single query.

        Users without a profile fall back to their username; unknown ids are
        simply missing from the result.
        """
        if not user_ids:
            return {}
        rows = User.objects.filter(pk__in=user_ids).values_list('pk', 'username', 'userprofile__full_name')
        return {pk: full_name or username for pk, username, full_name in rows}
