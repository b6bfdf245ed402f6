from __future__ import annotations

from typing import Sequence


class MirrorError(RuntimeError):
    """A mirror run failed. The next run starts over from the store."""


class GitCommandError(MirrorError):
    def __init__(self, args: Sequence[str], returncode: int, stdout: str, stderr: str) -> None:
        self.command = list(args)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(
            f"git {' '.join(self.command)} failed with exit code {returncode}\n"
            f"STDOUT:\n{stdout}\n"
            f"STDERR:\n{stderr}\n"
        )


class MirrorTimeout(MirrorError):
    """A git command ran past the configured timeout. Safe to retry."""


class PushFailed(MirrorError):
    """The commit was made locally but the remote rejected or missed the push."""
