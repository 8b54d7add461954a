"""Structured GitHub API errors and their caller-facing rendering."""

from enum import Enum

import httpx


class GitHubAPIError(Exception):
    """Terminal failure of a GitHub API request.

    Carries the HTTP status (408 for a timed-out attempt), the URL path the
    request was issued against, and the raw response body ("" when absent).
    """

    def __init__(self, message: str, status: int, path: str, body: str | None = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.path = path
        self.body = body or ""

    def __repr__(self) -> str:
        return f"GitHubAPIError(status={self.status}, path={self.path!r}, message={self.message!r})"


class ErrorCategory(Enum):
    AUTHENTICATION = "authentication"
    ACCESS_DENIED = "access_denied"
    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"
    VALIDATION = "validation"
    RATE_LIMITED = "rate_limited"
    API = "api"
    NETWORK = "network"
    UNKNOWN = "unknown"


_STATUS_CATEGORIES = {
    401: ErrorCategory.AUTHENTICATION,
    403: ErrorCategory.ACCESS_DENIED,
    404: ErrorCategory.NOT_FOUND,
    408: ErrorCategory.TIMEOUT,
    422: ErrorCategory.VALIDATION,
    429: ErrorCategory.RATE_LIMITED,
}


def categorize(error: BaseException) -> ErrorCategory:
    """Map an error raised by the client onto the caller-facing taxonomy."""
    if isinstance(error, GitHubAPIError):
        return _STATUS_CATEGORIES.get(error.status, ErrorCategory.API)
    if isinstance(error, httpx.TransportError):
        return ErrorCategory.NETWORK
    return ErrorCategory.UNKNOWN


def format_error_for_ai(error: BaseException, tool_name: str) -> str:
    """Render an error as one line of text for the assistant."""
    category = categorize(error)

    if category is ErrorCategory.AUTHENTICATION:
        return f"❌ Authentication failed for {tool_name}. Check your GITHUB_TOKEN is valid and not expired."
    if category is ErrorCategory.ACCESS_DENIED:
        return (
            f"❌ Access denied for {tool_name}. "
            "Your token may lack required permissions, or you've hit the rate limit."
        )
    if category is ErrorCategory.NOT_FOUND:
        return f"❌ Not found for {tool_name}. Check that the owner, repo, and resource ID are correct."
    if category is ErrorCategory.VALIDATION:
        return f"❌ Validation error for {tool_name}: {error.body}"
    if category is ErrorCategory.TIMEOUT:
        return f"❌ Request timed out for {tool_name}. GitHub did not respond in time, try again."
    if isinstance(error, GitHubAPIError):
        return f"❌ GitHub API error ({error.status}) for {tool_name}: {error.message}"
    if category is ErrorCategory.NETWORK:
        return f"❌ Network error in {tool_name}: {error}"
    if str(error):
        return f"❌ Error in {tool_name}: {error}"
    return f"❌ Unknown error in {tool_name}"


def describe_error(error: BaseException, tool_name: str) -> str:
    """Detailed diagnostic text, including the endpoint and response body."""
    if isinstance(error, GitHubAPIError):
        details = f"\nDetails: {error.body}" if error.body else ""
        return f"[{tool_name}] GitHub API Error ({error.status}) at {error.path}: {error.message}{details}"
    if str(error):
        return f"[{tool_name}] Error: {error}"
    return f"[{tool_name}] Unknown error occurred"
