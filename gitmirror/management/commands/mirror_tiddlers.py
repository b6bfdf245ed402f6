from django.core.management.base import BaseCommand, CommandError

from gitmirror.checks import check_mirror_settings
from gitmirror.engine import get_engine
from gitmirror.exceptions import MirrorError


class Command(BaseCommand):
    help = "Write the current tiddlers into the git mirror and push if anything changed"

    def handle(self, *args, **kwargs):
        errors = check_mirror_settings()
        if errors:
            raise CommandError("git mirror is not configured:\n" + "\n".join(f"  {e.msg} {e.hint}" for e in errors))

        try:
            result = get_engine().run()
        except MirrorError as e:
            raise CommandError(f"mirror failed: {e}") from e

        if result.committed:
            self.stdout.write(self.style.SUCCESS(f"Committed and pushed {len(result.changes)} change(s)."))
        else:
            self.stdout.write(f"No changes ({result.written} tiddlers).")
