from django.apps import AppConfig
from django.core.checks import register


class GitMirrorConfig(AppConfig):
    name = "gitmirror"
    verbose_name = "Git mirror"

    def ready(self):
        from .checks import check_mirror_settings

        # Only on `check --deploy`; the wiki itself runs without a mirror.
        register(check_mirror_settings, "gitmirror", deploy=True)
