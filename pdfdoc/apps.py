from django.apps import AppConfig


class PdfDocConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'pdfdoc'
    verbose_name = 'PDF documents'
