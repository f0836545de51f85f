from django.apps import AppConfig


class RateManagerConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'rate_manager'
    verbose_name = 'Rate Manager'
    
    def ready(self):
        """Import signals when app is ready."""
        import rate_manager.signals  # noqa
