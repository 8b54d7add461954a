"""GitHub REST API client for DevOps tools.

Resolves credentials once, then issues requests with bounded retries,
rate-limit backoff, per-attempt timeouts and structured errors.
"""

from .cli import main
from .client import GitHubClient, create_client
from .errors import ErrorCategory, GitHubAPIError, categorize, describe_error, format_error_for_ai
from .models import Credentials
from .settings import get_credentials, get_settings, validate_credentials

__all__ = [
    "main",
    "GitHubClient",
    "create_client",
    "Credentials",
    "GitHubAPIError",
    "ErrorCategory",
    "categorize",
    "describe_error",
    "format_error_for_ai",
    "get_credentials",
    "get_settings",
    "validate_credentials",
]

if __name__ == "__main__":
    main()
