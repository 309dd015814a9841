"""
Shared test fixtures and configuration.
"""

import io
import logging
import tarfile
import urllib.error
from pathlib import Path

import pytest

from agentconfig.core.services.selection import BUNDLES


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """setup_logging() replaces root handlers; put them back after each test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    for var in ("CONFIG_REPO", "CONFIG_BRANCH", "AGENTCONFIG_RAW_BASE_URL",
                "AGENTCONFIG_LOG_LEVEL", "AGENTCONFIG_LOG_FILE"):
        monkeypatch.delenv(var, raising=False)


def write_files(root: Path, files: dict[str, str]) -> Path:
    """Create files (and parent dirs) under root. A trailing '/' makes a dir."""
    for rel, content in files.items():
        target = root / rel
        if rel.endswith("/"):
            target.mkdir(parents=True, exist_ok=True)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)
    return root


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """An empty client project directory."""
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def config_repo(tmp_path: Path) -> Path:
    """A local copy of the central configuration repository."""
    root = tmp_path / "ai-agent-config-main"
    for bundle, names in BUNDLES.items():
        for name in names:
            write_files(root, {f"agents/{bundle}/{name}.json": f'{{"name": "{name}"}}'})
    write_files(root, {
        "workflows/ai-agent.yml": "name: AI Agent\n",
        "workflows/security-audit.yml": "name: Security Audit\n",
        "scripts/update.sh": "#!/bin/bash\n",
    })
    return root


def make_tarball(source: Path) -> bytes:
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tf:
        tf.add(source, arcname=source.name)
    return buf.getvalue()


class FakeRemote:
    """Stand-in for urllib.request.urlopen serving fixed URLs."""

    def __init__(self):
        self.routes: dict[str, bytes] = {}
        self.requests: list[str] = []

    def __call__(self, req, timeout=None):
        url = req.full_url if hasattr(req, "full_url") else req
        self.requests.append(url)
        if url not in self.routes:
            raise urllib.error.HTTPError(url, 404, "Not Found", None, None)
        return io.BytesIO(self.routes[url])


@pytest.fixture
def remote(monkeypatch) -> FakeRemote:
    fake = FakeRemote()
    monkeypatch.setattr("urllib.request.urlopen", fake)
    return fake


@pytest.fixture
def served_archive(remote: FakeRemote, config_repo: Path) -> FakeRemote:
    """Serve the default repo's main-branch tarball."""
    url = "https://github.com/company/ai-agent-config/archive/main.tar.gz"
    remote.routes[url] = make_tarball(config_repo)
    return remote
