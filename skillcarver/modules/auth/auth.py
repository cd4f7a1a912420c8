"""
Centralized GitHub API session handling.

Provides GitHubAuth class for tarball downloads with:
- Optional bearer token from GITHUB_TOKEN
- Session management
- Proper cleanup via invalidate()
"""

import requests
from typing import Optional

from skillcarver import config


class GitHubAuth:
    """
    Centralized GitHub API session.

    Usage:
        auth = GitHubAuth()
        resp = auth.request("GET", url, stream=True)
        # ... do work ...
        auth.invalidate()  # cleanup when done
    """

    ACCEPT = "application/vnd.github+json"

    def __init__(self, token: Optional[str] = None):
        """
        Args:
            token: Personal access token; falls back to GITHUB_TOKEN when omitted.
        """
        self._token = token if token is not None else config.GITHUB_TOKEN
        self._session: Optional[requests.Session] = None

    def get_session(self) -> requests.Session:
        """
        Get API session.

        Creates session on first call, reuses thereafter.
        Token (if any) is injected into the Authorization header.
        """
        if not self._session:
            self._session = requests.Session()
            self._session.headers.update({
                "Accept": self.ACCEPT,
                "User-Agent": "skillcarver",
            })
            if self._token:
                self._session.headers["Authorization"] = f"Bearer {self._token}"
        return self._session

    def request(self, method: str, url: str, **kwargs) -> requests.Response:
        """
        Make an HTTP request on the shared session.

        Args:
            method: HTTP method ("GET", "HEAD", etc.)
            url: Full URL to request
            **kwargs: Passed to requests (e.g., stream=True, timeout=30)
        """
        kwargs.setdefault("timeout", config.REQUEST_TIMEOUT)
        return self.get_session().request(method, url, **kwargs)

    def invalidate(self):
        """Close the session at the end of a fetch."""
        if self._session:
            self._session.close()
        self._session = None
