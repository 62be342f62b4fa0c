from django.apps import AppConfig


class KanjiSrsConfig(AppConfig):
    name = "kanji_srs"
    verbose_name = "Kanji spaced repetition"
    default_auto_field = "django.db.models.BigAutoField"
