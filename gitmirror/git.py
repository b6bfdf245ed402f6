from __future__ import annotations

import base64
import logging
import os
import subprocess
from pathlib import Path
from typing import Mapping, Optional, Sequence

from .exceptions import GitCommandError, MirrorError, MirrorTimeout

logger = logging.getLogger(__name__)


def basic_auth_header(username: str, password: str) -> str:
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"Authorization: Basic {token}"


def run_git(
    args: Sequence[str],
    cwd: Path,
    *,
    timeout: float,
    auth_header: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
) -> str:
    """Run one git command and return its stdout.

    Credentials travel as an http.extraHeader passed through the environment,
    so they never land on the command line or in .git/config.
    """
    cmd = ["git", *args]
    full_env = dict(os.environ)
    full_env["GIT_TERMINAL_PROMPT"] = "0"
    if auth_header:
        full_env["GIT_CONFIG_COUNT"] = "1"
        full_env["GIT_CONFIG_KEY_0"] = "http.extraHeader"
        full_env["GIT_CONFIG_VALUE_0"] = auth_header
    if env:
        full_env.update(env)

    logger.debug("git %s (in %s)", " ".join(args), cwd)
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=full_env,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as exc:
        raise MirrorTimeout(f"git {' '.join(args)} timed out after {timeout}s") from exc
    except OSError as exc:
        raise MirrorError(f"cannot run git: {exc}") from exc

    if proc.returncode != 0:
        raise GitCommandError(args, proc.returncode, proc.stdout, proc.stderr)
    return proc.stdout
