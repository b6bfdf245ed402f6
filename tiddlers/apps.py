from django.apps import AppConfig


class TiddlersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "tiddlers"
