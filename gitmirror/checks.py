from __future__ import annotations

from django.conf import settings
from django.core.checks import Error

REQUIRED_SETTINGS = {
    "GITMIRROR_URL": "GITHTTP_URL",
    "GITMIRROR_USERNAME": "GITHTTP_USERNAME",
    "GITMIRROR_PASSWORD": "GITHTTP_PASSWORD",
}


def check_mirror_settings(app_configs=None, **kwargs) -> list[Error]:
    """Errors for every git mirror setting that is unset or empty."""
    errors = []
    for name, env_var in REQUIRED_SETTINGS.items():
        if not getattr(settings, name, ""):
            errors.append(
                Error(
                    f"{name} is not set.",
                    hint=f"Export {env_var} before starting the git mirror.",
                    id="gitmirror.E001",
                )
            )
    return errors
