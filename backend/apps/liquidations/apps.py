from django.apps import AppConfig


class LiquidationsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.liquidations"
    label = "liquidations"
    verbose_name = "Liquidations"

    def ready(self):
        from apps.liquidations.audit_profiles import register_profiles

        register_profiles()
