from django.apps import AppConfig


class UserAuthAppConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'user_auth_app'

    def ready(self):
        # Connects the post_save handler that creates a profile for every new user.
        from . import signals  # noqa: F401
