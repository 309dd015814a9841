"""
Agent fetch — download the configuration repository and materialise
agent definitions into a client project.

Two sources are supported:

- the GitHub tarball of ``<repo>@<branch>``, extracted to a temp dir,
  from which resources are copied;
- a raw base URL, from which each resource is fetched on its own as
  ``<base>/agents/<bundle>/<name>.json``.

Resources land in ``<agents_dir>/<bundle>/<name>.json``. A resource
missing from the source is reported, not raised.
"""

from __future__ import annotations

import logging
import shutil
import tarfile
import urllib.error
import urllib.request
from pathlib import Path, PurePosixPath

from agentconfig.core.models.agent import AgentManifest, AgentResource
from agentconfig.core.observability.logging_config import success

logger = logging.getLogger(__name__)

_USER_AGENT = "agentconfig/1.0"
_CHUNK = 8192


class FetchError(Exception):
    """Raised when the configuration source can't be downloaded or unpacked."""


# ═══════════════════════════════════════════════════════════════════
#  URLs
# ═══════════════════════════════════════════════════════════════════


def archive_url(repo: str, branch: str) -> str:
    """GitHub tarball URL for a repository branch."""
    return f"https://github.com/{repo}/archive/{branch}.tar.gz"


def resource_url(base_url: str, resource: AgentResource) -> str:
    """Raw URL of a single agent definition."""
    return f"{base_url.rstrip('/')}/{resource.relative_path}"


# ═══════════════════════════════════════════════════════════════════
#  Archive download
# ═══════════════════════════════════════════════════════════════════


def _download(url: str, target: Path, timeout: float) -> None:
    req = urllib.request.Request(url, headers={"User-Agent": _USER_AGENT})
    with urllib.request.urlopen(req, timeout=timeout) as resp:
        with open(target, "wb") as f:
            while True:
                chunk = resp.read(_CHUNK)
                if not chunk:
                    break
                f.write(chunk)


def _safe_members(tf: tarfile.TarFile) -> list[tarfile.TarInfo]:
    """Reject absolute paths, parent references and links."""
    members = []
    for member in tf.getmembers():
        parts = PurePosixPath(member.name).parts
        if member.name.startswith("/") or ".." in parts:
            raise FetchError(f"Unsafe path in archive: {member.name}")
        if member.issym() or member.islnk():
            logger.debug("Skipping link in archive: %s", member.name)
            continue
        members.append(member)
    return members


def _extracted_root(dest: Path, repo_name: str, branch: str) -> Path:
    """Locate ``<repo-name>-<branch>`` (GitHub's top-level archive dir)."""
    expected = dest / f"{repo_name}-{branch.replace('/', '-')}"
    if expected.is_dir():
        return expected

    top_dirs = [p for p in dest.iterdir() if p.is_dir()]
    if len(top_dirs) == 1:
        return top_dirs[0]

    raise FetchError("Failed to download configuration repository")


def download_archive(
    repo: str,
    branch: str,
    dest: Path,
    *,
    timeout: float = 30.0,
) -> Path:
    """Download and extract the configuration repository.

    Args:
        repo: GitHub repository in ``owner/name`` format.
        branch: Branch (or tag) to fetch.
        dest: Empty directory to extract into.
        timeout: HTTP timeout in seconds.

    Returns:
        The extracted repository root.

    Raises:
        FetchError: On network, archive or layout errors.
    """
    url = archive_url(repo, branch)
    logger.info("Fetching from: %s", url)

    tarball = dest / "archive.tar.gz"
    try:
        _download(url, tarball, timeout)
    except (urllib.error.URLError, OSError) as e:
        raise FetchError(f"Download failed: {e}") from e

    try:
        with tarfile.open(tarball, "r:gz") as tf:
            tf.extractall(dest, members=_safe_members(tf), filter="data")
    except (tarfile.TarError, OSError) as e:
        raise FetchError(f"Extract failed: {e}") from e
    finally:
        tarball.unlink(missing_ok=True)

    root = _extracted_root(dest, repo.rsplit("/", 1)[-1], branch)
    logger.debug("Extracted configuration repository to %s", root)
    return root


# ═══════════════════════════════════════════════════════════════════
#  Per-resource materialisation
# ═══════════════════════════════════════════════════════════════════


def _target_path(agents_dir: Path, resource: AgentResource) -> Path:
    return agents_dir / resource.bundle / f"{resource.name}.json"


def copy_resource(source_root: Path, resource: AgentResource, agents_dir: Path) -> bool:
    """Copy one agent definition out of an extracted repository.

    Returns:
        False if the source has no such resource.
    """
    source = source_root / resource.relative_path
    if not source.is_file():
        return False

    target = _target_path(agents_dir, resource)
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, target)
    return True


def fetch_resource(
    base_url: str,
    resource: AgentResource,
    agents_dir: Path,
    *,
    timeout: float = 30.0,
) -> bool:
    """Fetch one agent definition from a raw base URL.

    Returns:
        False if the server reports the resource as missing (HTTP 404).

    Raises:
        FetchError: On any other network error.
    """
    url = resource_url(base_url, resource)
    req = urllib.request.Request(url, headers={"User-Agent": _USER_AGENT})
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            body = resp.read()
    except urllib.error.HTTPError as e:
        if e.code == 404:
            return False
        raise FetchError(f"Failed to fetch {url}: {e}") from e
    except (urllib.error.URLError, OSError) as e:
        raise FetchError(f"Failed to fetch {url}: {e}") from e

    if not body:
        return False

    target = _target_path(agents_dir, resource)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(body)
    return True


def materialize(
    manifest: AgentManifest,
    agents_dir: Path,
    *,
    source_root: Path | None = None,
    base_url: str = "",
    timeout: float = 30.0,
) -> dict[str, list[str]]:
    """Write every manifest resource under ``agents_dir``.

    Exactly one of ``source_root`` (extracted archive) or ``base_url``
    must be given.

    Returns:
        ``{"installed": [identifiers], "missing": [identifiers]}``
    """
    if (source_root is None) == (not base_url):
        raise ValueError("Provide exactly one of source_root or base_url")

    installed: list[str] = []
    missing: list[str] = []

    for resource in manifest.resources:
        if source_root is not None:
            ok = copy_resource(source_root, resource, agents_dir)
        else:
            ok = fetch_resource(base_url, resource, agents_dir, timeout=timeout)

        if ok:
            installed.append(resource.identifier)
        else:
            logger.warning("Agent not found in source: %s", resource.identifier)
            missing.append(resource.identifier)

    for bundle in manifest.bundles:
        if any(i.startswith(f"{bundle}/") for i in installed):
            success(logger, "Copied %s agents", bundle)

    return {"installed": installed, "missing": missing}


def list_agents(agents_root: Path) -> list[str]:
    """Sorted, unique names of the agent definitions under a directory."""
    if not agents_root.is_dir():
        return []
    return sorted({p.stem for p in agents_root.rglob("*.json") if p.is_file()})
