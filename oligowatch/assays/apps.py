from django.apps import AppConfig


class AssaysConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'assays'
    verbose_name = 'Assay Repository'
