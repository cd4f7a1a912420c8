from unittest.mock import MagicMock

import pytest
import requests

from skillcarver.modules.auth import GitHubAuth
from skillcarver.modules.errors import FetchError
from skillcarver.modules.keepers import downloaders
from skillcarver.modules.keepers.downloaders import (
    GitHubSource,
    download_tarball,
    fetch_skill,
    parse_github_url,
)


# =============================================================================
# parse_github_url
# =============================================================================

@pytest.mark.parametrize(
    "url,expected",
    [
        ("gh:anthropics/skills", GitHubSource("anthropics", "skills", "main", None)),
        ("gh:anthropics/skills/skills/pdf", GitHubSource("anthropics", "skills", "main", "skills/pdf")),
        ("github:owner/repo/path/to/skill", GitHubSource("owner", "repo", "main", "path/to/skill")),
        ("https://github.com/anthropics/skills", GitHubSource("anthropics", "skills", "main", None)),
        ("https://github.com/anthropics/skills.git", GitHubSource("anthropics", "skills", "main", None)),
        ("https://github.com/owner/repo/tree/develop", GitHubSource("owner", "repo", "develop", None)),
        (
            "https://github.com/anthropics/skills/tree/main/skills/pdf",
            GitHubSource("anthropics", "skills", "main", "skills/pdf"),
        ),
        (
            "https://github.com/owner/repo/tree/develop/path/to/skill",
            GitHubSource("owner", "repo", "develop", "path/to/skill"),
        ),
        ("gh:owner/repo/a/b/c/d/e", GitHubSource("owner", "repo", "main", "a/b/c/d/e")),
    ],
)
def test_parse_github_url(url, expected):
    assert parse_github_url(url) == expected


@pytest.mark.parametrize("url", ["gh:owner", "https://gitlab.com/owner/repo", "not-a-url"])
def test_parse_github_url_invalid(url):
    with pytest.raises(FetchError, match="Invalid GitHub URL format") as excinfo:
        parse_github_url(url)
    assert excinfo.value.hint


def test_tarball_url(monkeypatch):
    monkeypatch.setattr(downloaders.config, "GITHUB_API_URL", "https://api.example.test")
    source = GitHubSource("owner", "repo", "v1")
    assert source.tarball_url == "https://api.example.test/repos/owner/repo/tarball/v1"


# =============================================================================
# download_tarball
# =============================================================================

def _response(status_code=200, chunks=(), reason="OK"):
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = status_code < 400
    resp.reason = reason
    resp.iter_content.return_value = iter(chunks)
    resp.__enter__.return_value = resp
    resp.__exit__.return_value = False
    return resp


def _auth(resp):
    auth = MagicMock(spec=GitHubAuth)
    auth.request.return_value = resp
    return auth


def test_download_tarball_collects_chunks():
    auth = _auth(_response(chunks=[b"abc", b"", b"def"]))

    assert download_tarball(auth, GitHubSource("o", "r")) == b"abcdef"
    auth.request.assert_called_once()
    assert auth.request.call_args.kwargs["stream"] is True


@pytest.mark.parametrize(
    "status,message",
    [
        (404, "Repository not found"),
        (403, "Access forbidden"),
        (500, "Failed to download: 500"),
    ],
)
def test_download_tarball_http_errors(status, message):
    auth = _auth(_response(status_code=status, reason="Server Error"))

    with pytest.raises(FetchError, match=message):
        download_tarball(auth, GitHubSource("o", "r"))


def test_download_tarball_transport_error():
    auth = MagicMock(spec=GitHubAuth)
    auth.request.side_effect = requests.ConnectionError("boom")

    with pytest.raises(FetchError, match="boom"):
        download_tarball(auth, GitHubSource("o", "r"))


# =============================================================================
# fetch_skill
# =============================================================================

def test_fetch_skill_extracts_sub_path(tmp_path, tar_gz):
    archive = tar_gz([
        {"name": "anthropics-skills-abc123/", "type": "dir"},
        {"name": "anthropics-skills-abc123/README.md", "content": "readme"},
        {"name": "anthropics-skills-abc123/skills/pdf/", "type": "dir"},
        {"name": "anthropics-skills-abc123/skills/pdf/SKILL.md", "content": "pdf skill"},
        {"name": "anthropics-skills-abc123/skills/pdfx/SKILL.md", "content": "not me"},
    ])
    auth = _auth(_response(chunks=[archive]))

    result = fetch_skill("gh:anthropics/skills/skills/pdf", output_dir=str(tmp_path), auth=auth, verbose=False)

    assert result.files == ["skills/pdf/", "skills/pdf/SKILL.md"]
    assert result.skill_dir == str(tmp_path / "skills" / "pdf")
    assert result.bytes_downloaded == len(archive)
    assert (tmp_path / "skills" / "pdf" / "SKILL.md").read_text() == "pdf skill"
    assert not (tmp_path / "README.md").exists()
    assert not (tmp_path / "skills" / "pdfx").exists()
    auth.invalidate.assert_not_called()


def test_fetch_skill_whole_repo(tmp_path, tar_gz):
    archive = tar_gz([{"name": "o-r-1/a.txt", "content": "a"}])
    auth = _auth(_response(chunks=[archive]))

    result = fetch_skill("https://github.com/o/r", output_dir=str(tmp_path), auth=auth, verbose=False)

    assert result.files == ["a.txt"]
    assert result.to_dict()["source"] == "o/r"


def test_fetch_skill_missing_path(tmp_path, tar_gz):
    archive = tar_gz([{"name": "o-r-1/other/a.txt", "content": "a"}])
    auth = _auth(_response(chunks=[archive]))

    with pytest.raises(FetchError, match="Skill path not found"):
        fetch_skill("gh:o/r/skills/missing", output_dir=str(tmp_path), auth=auth, verbose=False)


def test_fetch_skill_closes_its_own_session(tmp_path, tar_gz, monkeypatch):
    auth = _auth(_response(chunks=[tar_gz([{"name": "o-r-1/a.txt", "content": "a"}])]))
    monkeypatch.setattr(downloaders, "GitHubAuth", lambda: auth)

    fetch_skill("gh:o/r", output_dir=str(tmp_path), verbose=False)

    auth.invalidate.assert_called_once()


def test_fetch_skill_prints_progress(tmp_path, tar_gz, capsys):
    auth = _auth(_response(chunks=[tar_gz([{"name": "o-r-1/a.txt", "content": "a"}])]))

    fetch_skill("gh:o/r", output_dir=str(tmp_path), auth=auth)

    out = capsys.readouterr().out
    assert "[*] Fetching from o/r@main" in out
    assert "[+] Extracted 1 path(s)" in out


# =============================================================================
# GitHubAuth
# =============================================================================

def test_auth_sets_bearer_token():
    auth = GitHubAuth(token="secret")
    session = auth.get_session()

    assert session.headers["Authorization"] == "Bearer secret"
    assert auth.get_session() is session
    auth.invalidate()


def test_auth_without_token(monkeypatch):
    monkeypatch.setattr("skillcarver.config.GITHUB_TOKEN", None)
    auth = GitHubAuth()

    assert "Authorization" not in auth.get_session().headers
    auth.invalidate()


def test_auth_request_applies_default_timeout(monkeypatch):
    auth = GitHubAuth(token="")
    session = auth.get_session()
    monkeypatch.setattr(session, "request", MagicMock(return_value="resp"))

    assert auth.request("GET", "https://example.test") == "resp"
    assert session.request.call_args.kwargs["timeout"] == downloaders.config.REQUEST_TIMEOUT
