from django.apps import AppConfig


class TaxidsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'taxids'
    verbose_name = 'TaxID Area'
