# config.py
# Environment-driven settings for skillcarver

import os


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name, "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


# Optional bearer token for the GitHub API (raises the anonymous rate limit)
GITHUB_TOKEN = os.environ.get("GITHUB_TOKEN") or None

GITHUB_API_URL = os.environ.get("SKILLCARVER_API_URL", "https://api.github.com").rstrip("/")

DEFAULT_OUTPUT_DIR = os.environ.get("SKILLCARVER_OUTPUT_DIR", "./skills")

REQUEST_TIMEOUT = _env_int("SKILLCARVER_TIMEOUT", 30)
