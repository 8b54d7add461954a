"""Data models and constants for the GitHub DevOps client."""

from dataclasses import dataclass

DEFAULT_API_URL = "https://api.github.com"

# Header contract sent with every request
GITHUB_MEDIA_TYPE = "application/vnd.github+json"
GITHUB_API_VERSION = "2022-11-28"
USER_AGENT = "gh-devops-mcp/1.0.0"


@dataclass(frozen=True)
class Credentials:
    """Resolved auth/target context the client is bound to."""

    token: str
    owner: str = ""
    repo: str = ""
    api_url: str = DEFAULT_API_URL
