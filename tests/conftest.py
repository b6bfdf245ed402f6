from __future__ import annotations

from pathlib import Path

import pytest
from rest_framework.test import APIClient

from gitmirror.engine import MirrorEngine, get_engine

from .gitutil import git


@pytest.fixture
def api(admin_user):
    client = APIClient()
    client.force_authenticate(admin_user)
    return client


@pytest.fixture
def remote(tmp_path) -> Path:
    """A bare repository with one commit, standing in for the hosted remote."""
    bare = tmp_path / "remote.git"
    git("init", "--quiet", "--bare", str(bare), cwd=tmp_path)

    seed = tmp_path / "seed"
    git("clone", "--quiet", str(bare), str(seed), cwd=tmp_path)
    (seed / "README.md").write_text("wiki backup\n", encoding="utf-8")
    git("add", "README.md", cwd=seed)
    git("-c", "commit.gpgSign=false", "commit", "--quiet", "-m", "initial", cwd=seed)
    git("push", "--quiet", "origin", "HEAD", cwd=seed)
    return bare


@pytest.fixture
def engine(remote, tmp_path) -> MirrorEngine:
    return MirrorEngine(str(remote), "wiki", "secret", tmp_path / "work", timeout=60)


@pytest.fixture
def mirror_settings(settings, remote, tmp_path):
    settings.GITMIRROR_URL = str(remote)
    settings.GITMIRROR_USERNAME = "wiki"
    settings.GITMIRROR_PASSWORD = "secret"
    settings.GITMIRROR_DIR = tmp_path / "work"
    settings.GITMIRROR_TIMEOUT = 60
    get_engine.cache_clear()
    yield settings
    get_engine.cache_clear()
