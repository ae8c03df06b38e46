from django.apps import AppConfig
import os


class NotificationsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "notifications"
    verbose_name = "Invitation notifications"

    def ready(self):
        # --------------------------------------------------
        # Retry scheduler (opt-in, see ENABLE_SCHEDULER)
        # --------------------------------------------------
        # Only the autoreloader's child process runs jobs
        if os.environ.get("RUN_MAIN") != "true":
            return

        from .scheduler import start_scheduler
        start_scheduler()
