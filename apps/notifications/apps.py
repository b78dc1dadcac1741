from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.notifications'

    notifier = None

    def ready(self):
        from .emails import EmailNotifier
        self.notifier = EmailNotifier.from_settings()


def get_notifier():
    """The notifier built at startup. Views pass it on to whatever sends mail."""
    from django.apps import apps
    return apps.get_app_config('notifications').notifier
