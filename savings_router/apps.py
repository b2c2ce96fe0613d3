from django.apps import AppConfig


class SavingsRouterConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'savings_router'
    verbose_name = 'Savings Route Construction Service'
