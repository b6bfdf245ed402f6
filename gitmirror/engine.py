"""Mirror the tiddler store into a git working copy.

One run: lock, clone or pull, rewrite ``<subdir>/`` from the current store,
stage it, and commit + push only if the staged tree differs from HEAD.
Runs are serialized within the process (threading lock) and across
processes (flock on ``<workdir>.lock``).
"""

from __future__ import annotations

import fcntl
import logging
import shutil
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Iterator

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from tiddlers.listing import iter_current

from .exceptions import GitCommandError, MirrorError, PushFailed
from .git import basic_auth_header, run_git
from .render import render_tiddler, tid_filename

logger = logging.getLogger(__name__)


@dataclass
class MirrorResult:
    committed: bool = False
    written: int = 0
    changes: list[str] = field(default_factory=list)


class MirrorEngine:
    def __init__(
        self,
        url: str,
        username: str,
        password: str,
        workdir: Path,
        *,
        subdir: str = "tiddlers",
        timeout: float = 120,
        author_name: str = "TiddlyWiki Git Backup",
        author_email: str = "none@example.com",
        message: str = "updates",
    ) -> None:
        missing = [name for name, value in (("url", url), ("username", username), ("password", password)) if not value]
        if missing:
            raise ImproperlyConfigured(f"git mirror is missing {', '.join(missing)}")

        self.url = url
        self.workdir = Path(workdir)
        self.subdir = subdir
        self.timeout = timeout
        self.message = message
        self._auth_header = basic_auth_header(username, password)
        self._identity = {
            "GIT_AUTHOR_NAME": author_name,
            "GIT_AUTHOR_EMAIL": author_email,
            "GIT_COMMITTER_NAME": author_name,
            "GIT_COMMITTER_EMAIL": author_email,
        }
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls) -> "MirrorEngine":
        return cls(
            settings.GITMIRROR_URL,
            settings.GITMIRROR_USERNAME,
            settings.GITMIRROR_PASSWORD,
            settings.GITMIRROR_DIR,
            subdir=settings.GITMIRROR_SUBDIR,
            timeout=settings.GITMIRROR_TIMEOUT,
            author_name=settings.GITMIRROR_AUTHOR_NAME,
            author_email=settings.GITMIRROR_AUTHOR_EMAIL,
            message=settings.GITMIRROR_COMMIT_MESSAGE,
        )

    @property
    def lock_path(self) -> Path:
        return self.workdir.with_name(self.workdir.name + ".lock")

    def run(self) -> MirrorResult:
        with self._exclusive():
            self._prepare()
            written = self._rebuild()
            changes = self._stage()
            if not changes:
                logger.info("mirror of %d tiddlers unchanged, nothing to commit", written)
                return MirrorResult(written=written)

            self._commit()
            logger.info("committed %d changed tiddler files", len(changes))
            self._push()
            return MirrorResult(committed=True, written=written, changes=changes)

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        with self._lock:
            self.lock_path.parent.mkdir(parents=True, exist_ok=True)
            with self.lock_path.open("a") as f:
                fcntl.flock(f, fcntl.LOCK_EX)
                try:
                    yield
                finally:
                    fcntl.flock(f, fcntl.LOCK_UN)

    def _git(self, *args: str, cwd: Path | None = None, identity: bool = False) -> str:
        return run_git(
            args,
            cwd or self.workdir,
            timeout=self.timeout,
            auth_header=self._auth_header,
            env=self._identity if identity else None,
        )

    def _has_commits(self) -> bool:
        try:
            self._git("rev-parse", "--verify", "--quiet", "HEAD")
        except GitCommandError:
            return False
        return True

    def _has_upstream(self) -> bool:
        try:
            self._git("rev-parse", "--verify", "--quiet", "@{upstream}")
        except GitCommandError:
            return False
        return True

    def _prepare(self) -> None:
        if not (self.workdir / ".git").exists():
            logger.info("cloning %s into %s", self.url, self.workdir)
            self.workdir.parent.mkdir(parents=True, exist_ok=True)
            existed = self.workdir.exists()
            try:
                self._git("clone", "--quiet", "--recurse-submodules", self.url, str(self.workdir), cwd=self.workdir.parent)
            except MirrorError:
                # A killed clone can leave a partial checkout; start clean next time.
                if not existed:
                    shutil.rmtree(self.workdir, ignore_errors=True)
                raise
            return

        # Drop whatever an interrupted run left behind, keep local commits.
        if self._has_commits():
            self._git("reset", "--quiet", "--hard", "HEAD")
        self._git("clean", "--quiet", "-d", "--force", "--", self.subdir)
        self._git("fetch", "--quiet", "origin")
        if not self._has_upstream():
            # Empty remote, or the first push never landed: nothing to merge.
            logger.info("no upstream branch on %s yet, skipping merge", self.url)
            return
        self._git("merge", "--quiet", "--ff-only", "@{upstream}")

    def _rebuild(self) -> int:
        target = self.workdir / self.subdir
        if target.exists():
            shutil.rmtree(target)
        target.mkdir(parents=True)

        written = 0
        for title, meta, text in iter_current():
            path = target / tid_filename(title)
            try:
                path.write_bytes(render_tiddler(meta, text).encode("utf-8"))
            except OSError as exc:
                logger.warning("skipping tiddler %r, cannot write %s: %s", title, path.name, exc)
                continue
            written += 1
        return written

    def _stage(self) -> list[str]:
        """Stage the subtree and return the porcelain status lines for it."""
        has_files = any((self.workdir / self.subdir).iterdir())
        if not has_files and not self._git("ls-files", "--", self.subdir).strip():
            # Nothing rendered and nothing tracked: the pathspec would match no files.
            return []
        self._git("add", "--all", "--", self.subdir)
        status = self._git("status", "--porcelain", "--", self.subdir)
        return [line for line in status.splitlines() if line.strip()]

    def _commit(self) -> None:
        self._git("-c", "commit.gpgSign=false", "commit", "--quiet", "--no-verify", "-m", self.message, identity=True)

    def _push(self) -> None:
        try:
            self._git("push", "--quiet", "--set-upstream", "origin", "HEAD")
        except GitCommandError as exc:
            logger.error("push to %s failed, commit kept locally: %s", self.url, exc.stderr.strip())
            raise PushFailed(str(exc)) from exc


@lru_cache(maxsize=1)
def get_engine() -> MirrorEngine:
    """The process-wide engine, built from settings on first use."""
    return MirrorEngine.from_settings()
