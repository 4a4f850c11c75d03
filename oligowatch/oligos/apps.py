from django.apps import AppConfig


class OligosConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'oligos'
    verbose_name = 'Oligo Repository'
