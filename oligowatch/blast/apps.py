from django.apps import AppConfig


class BlastConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'blast'
    verbose_name = 'BLAST Planner and Results'
