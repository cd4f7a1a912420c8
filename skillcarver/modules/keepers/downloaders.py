import re
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import requests

from skillcarver import config
from skillcarver.modules.auth import GitHubAuth
from skillcarver.modules.errors import FetchError
from skillcarver.modules.keepers.extractor import ExtractOptions, extract


DEFAULT_REF = "main"
DEFAULT_CHUNK_SIZE = 65536  # 64KB chunks

_GITHUB_URL = re.compile(r"github\.com/([^/]+)/([^/]+)(?:/tree/([^/]+))?(?:/(.+))?")


# =============================================================================
# Source Parsing
# =============================================================================

@dataclass
class GitHubSource:
    """A repository (and optional sub-path) to pull skills from."""
    owner: str
    repo: str
    ref: str = DEFAULT_REF
    path: Optional[str] = None

    @property
    def tarball_url(self) -> str:
        return f"{config.GITHUB_API_URL}/repos/{self.owner}/{self.repo}/tarball/{self.ref}"

    def __str__(self) -> str:
        base = f"{self.owner}/{self.repo}"
        return f"{base}/{self.path}" if self.path else base


def parse_github_url(url: str) -> GitHubSource:
    """
    Parse the supported GitHub URL forms.

    - gh:owner/repo/path/to/skill
    - github:owner/repo/path/to/skill
    - https://github.com/owner/repo(.git)
    - https://github.com/owner/repo/tree/branch/path/to/skill
    """
    for scheme in ("gh:", "github:"):
        if url.startswith(scheme):
            parts = url[len(scheme):].split("/")
            if len(parts) < 2:
                raise FetchError(
                    "Invalid GitHub URL format",
                    "Use: gh:owner/repo or gh:owner/repo/path/to/skill",
                )
            return GitHubSource(
                owner=parts[0],
                repo=parts[1],
                path="/".join(parts[2:]) or None,
            )

    match = _GITHUB_URL.search(url)
    if match:
        owner, repo, branch, path = match.groups()
        if repo.endswith(".git"):
            repo = repo[:-len(".git")]
        return GitHubSource(
            owner=owner,
            repo=repo,
            ref=branch or DEFAULT_REF,
            path=path or None,
        )

    raise FetchError(
        "Invalid GitHub URL format",
        "Use: gh:owner/repo/path or https://github.com/owner/repo/tree/branch/path",
    )


# =============================================================================
# Tarball Download
# =============================================================================

def download_tarball(auth: GitHubAuth, source: GitHubSource) -> bytes:
    """
    Download the repository tarball for ``source`` into memory.

    Raises FetchError for missing repositories, forbidden or rate-limited
    requests, and transport failures.
    """
    try:
        resp = auth.request("GET", source.tarball_url, stream=True)
    except requests.RequestException as e:
        raise FetchError(f"Failed to download: {e}") from e

    with resp:
        if resp.status_code == 404:
            raise FetchError("Repository not found", "Check the repository owner and name")
        if resp.status_code == 403:
            raise FetchError(
                "Access forbidden",
                "The repository may be private or rate limited. Try again later.",
            )
        if not resp.ok:
            raise FetchError(f"Failed to download: {resp.status_code} {resp.reason}")

        buffer = bytearray()
        try:
            for chunk in resp.iter_content(chunk_size=DEFAULT_CHUNK_SIZE):
                if chunk:
                    buffer.extend(chunk)
        except requests.RequestException as e:
            raise FetchError(f"Failed to download: {e}") from e

    return bytes(buffer)


# =============================================================================
# Fetch Workflow
# =============================================================================

@dataclass
class FetchResult:
    """Result of fetching skills from a GitHub repository."""
    source: str
    output_dir: str
    skill_dir: str
    files: List[str] = field(default_factory=list)
    bytes_downloaded: int = 0
    elapsed_time: float = 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "source": self.source,
            "output_dir": self.output_dir,
            "skill_dir": self.skill_dir,
            "files": self.files,
            "bytes_downloaded": self.bytes_downloaded,
            "elapsed_time": self.elapsed_time,
        }


def path_filter(path: Optional[str]):
    if not path:
        return None
    path = path.strip("/")
    return lambda entry: entry.name == path or entry.name.startswith(f"{path}/")


def fetch_skill(
    url: str,
    output_dir: str = config.DEFAULT_OUTPUT_DIR,
    auth: Optional[GitHubAuth] = None,
    verbose: bool = True,
) -> FetchResult:
    """
    Download a GitHub tarball and extract it (or one sub-path of it).

    GitHub tarballs wrap everything in an "owner-repo-sha/" directory, which
    is stripped, so files land at their repository-relative paths under
    ``output_dir``.

    Args:
        url: Any form accepted by parse_github_url()
        output_dir: Destination root
        auth: Session to reuse; a fresh one is created (and closed) if omitted
        verbose: Whether to print progress

    Returns:
        FetchResult listing the extracted paths
    """
    start_time = time.time()
    source = parse_github_url(url)
    own_auth = auth is None
    auth = auth or GitHubAuth()

    try:
        if verbose:
            print(f"[*] Fetching from {source}@{source.ref}...")

        compressed = download_tarball(auth, source)
        if verbose:
            print(f"    Downloaded {len(compressed):,} bytes")

        options = ExtractOptions(strip=1, filter=path_filter(source.path))
        files = extract(compressed, output_dir, options)

        if source.path and not files:
            raise FetchError(
                "Skill path not found in repository",
                f'The path "{source.path}" does not exist in the repository',
            )

        skill_dir = Path(output_dir) / source.path if source.path else Path(output_dir)
        elapsed = time.time() - start_time
        if verbose:
            print(f"[+] Extracted {len(files)} path(s) to {skill_dir} in {elapsed:.2f}s")

        return FetchResult(
            source=str(source),
            output_dir=str(output_dir),
            skill_dir=str(skill_dir),
            files=files,
            bytes_downloaded=len(compressed),
            elapsed_time=elapsed,
        )
    finally:
        if own_auth:
            auth.invalidate()
