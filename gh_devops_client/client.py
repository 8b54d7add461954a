"""GitHub REST API client with bounded retries, rate-limit backoff and timeouts."""

import json
import logging
import math
import time
from dataclasses import dataclass
from typing import Any

import httpx

from .errors import GitHubAPIError
from .models import GITHUB_API_VERSION, GITHUB_MEDIA_TYPE, USER_AGENT, Credentials
from .settings import get_credentials, validate_credentials

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
TIMEOUT = 30.0  # seconds, per attempt

# Rate limit backoff settings
RATE_LIMIT_MAX_WAIT = 60.0
RATE_LIMIT_MARGIN = 1.0
DEFAULT_RETRY_AFTER = 5.0
BACKOFF_FACTOR = 2


@dataclass
class _Success:
    value: Any


@dataclass
class _Retry:
    reason: str
    wait: float
    # Raised as-is once the retries run out
    error: BaseException


@dataclass
class _Failure:
    error: BaseException


_Outcome = _Success | _Retry | _Failure


class GitHubClient:
    """Client bound to one GitHub connection profile.

    Every call runs its own retry loop and shares nothing mutable with other
    calls, so one instance can be used from many threads at once.

    The timeout is applied by httpx to each phase of an attempt (connect,
    write, every read, pool wait), not as one deadline for the whole
    attempt: a server trickling bytes can keep an attempt open past it.
    Whichever phase expires raises GitHubAPIError with status 408.
    """

    max_retries = MAX_RETRIES
    timeout = TIMEOUT

    def __init__(
        self,
        credentials: Credentials,
        *,
        media_type: str = GITHUB_MEDIA_TYPE,
        api_version: str = GITHUB_API_VERSION,
        user_agent: str = USER_AGENT,
        transport: httpx.BaseTransport | None = None,
    ):
        self._credentials = credentials
        self._base_url = credentials.api_url.rstrip("/")
        self._default_headers = {
            "Authorization": f"Bearer {credentials.token}",
            "Accept": media_type,
            "X-GitHub-Api-Version": api_version,
            "User-Agent": user_agent,
        }
        self._client = httpx.Client(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=False,
            transport=transport,
        )

    @property
    def owner(self) -> str:
        return self._credentials.owner

    @property
    def repo(self) -> str:
        return self._credentials.repo

    @property
    def base_url(self) -> str:
        return self._base_url

    def repo_path(self, suffix: str = "", owner: str | None = None, repo: str | None = None) -> str:
        """Build a /repos/{owner}/{repo} path, defaulting to the bound owner and repo."""
        owner = owner or self.owner
        repo = repo or self.repo
        if not owner or not repo:
            raise ValueError("owner and repo are required (set GITHUB_OWNER and GITHUB_REPO or pass them explicitly)")
        return f"/repos/{owner}/{repo}{suffix}"

    def get(self, path: str, params: dict | None = None, headers: dict[str, str] | None = None) -> Any:
        return self._request("GET", path, params=params, headers=headers)

    def post(self, path: str, body: Any = None, headers: dict[str, str] | None = None) -> Any:
        return self._request("POST", path, body=body, headers=headers)

    def put(self, path: str, body: Any = None, headers: dict[str, str] | None = None) -> Any:
        return self._request("PUT", path, body=body, headers=headers)

    def patch(self, path: str, body: Any = None, headers: dict[str, str] | None = None) -> Any:
        return self._request("PATCH", path, body=body, headers=headers)

    def delete(self, path: str, params: dict | None = None) -> Any:
        return self._request("DELETE", path, params=params)

    def get_raw(
        self, path: str, params: dict | None = None, headers: dict[str, str] | None = None
    ) -> str | dict | None:
        """GET returning the response body as text, never parsed (e.g. job logs).

        A 302 still yields {"download_url": ...} and a 204 yields None.
        """
        return self._request("GET", path, params=params, headers=headers, raw=True)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        body: Any = None,
        headers: dict[str, str] | None = None,
        raw: bool = False,
    ) -> Any:
        """Issue a request, retrying rate limits and transient network failures.

        Returns parsed JSON, raw text (raw=True), None for 204, or
        {"download_url": ...} for a 302. Raises GitHubAPIError for any other
        non-2xx status and for timeouts (status 408); re-raises the last
        transport error once retries are exhausted.
        """
        url = self._build_url(path, params)
        request_headers = self._build_headers(body is not None, headers)
        content = json.dumps(body).encode() if body is not None else None

        last_error: BaseException | None = None
        for attempt in range(self.max_retries):
            logger.debug("%s %s (attempt %d/%d)", method, url, attempt + 1, self.max_retries)
            outcome = self._attempt(method, url, request_headers, content, raw, attempt)

            if isinstance(outcome, _Success):
                return outcome.value
            if isinstance(outcome, _Failure):
                raise outcome.error

            last_error = outcome.error
            if attempt < self.max_retries - 1:
                logger.warning(
                    "%s %s: %s, retry %d/%d (wait %.1fs)",
                    method, url.path, outcome.reason, attempt + 1, self.max_retries - 1, outcome.wait,
                )
                time.sleep(outcome.wait)

        if last_error is not None:
            raise last_error
        raise RuntimeError("Request failed after retries")

    def _attempt(
        self,
        method: str,
        url: httpx.URL,
        headers: httpx.Headers,
        content: bytes | None,
        raw: bool,
        attempt: int,
    ) -> _Outcome:
        try:
            resp = self._client.request(method, url, headers=headers, content=content)
        except httpx.TimeoutException:
            return _Failure(GitHubAPIError("Request timed out", 408, url.path))
        except httpx.TransportError as exc:
            return _Retry(f"{type(exc).__name__}: {exc}", float(BACKOFF_FACTOR**attempt), exc)
        return self._classify(resp, url, raw)

    def _classify(self, resp: httpx.Response, url: httpx.URL, raw: bool) -> _Outcome:
        status = resp.status_code

        if status == 403 and resp.headers.get("x-ratelimit-remaining") == "0":
            return _Retry("rate limit exhausted", _rate_limit_wait(resp), _api_error(resp, url))

        if status == 429:
            retry_after = _parse_retry_after(resp)
            wait = DEFAULT_RETRY_AFTER if retry_after is None else retry_after
            return _Retry("too many requests", wait, _api_error(resp, url))

        if status == 204:
            return _Success(None)

        # Artifact and log downloads answer with a redirect to storage
        if status == 302:
            return _Success({"download_url": resp.headers.get("location")})

        if not resp.is_success:
            return _Failure(_api_error(resp, url))

        text = resp.text
        if raw:
            return _Success(text)
        if not text:
            return _Success({})
        return _Success(json.loads(text))

    def _build_url(self, path: str, params: dict | None) -> httpx.URL:
        if path.startswith(("http://", "https://")):
            full = path
        else:
            ep = path if path.startswith("/") else f"/{path}"
            full = f"{self._base_url}{ep}"

        url = httpx.URL(full)
        for key, value in (params or {}).items():
            if value is None or value == "":
                continue
            url = url.copy_set_param(key, _stringify(value))
        return url

    def _build_headers(self, has_body: bool, overrides: dict[str, str] | None) -> httpx.Headers:
        headers = httpx.Headers(self._default_headers)
        if has_body:
            headers["Content-Type"] = "application/json"
        if overrides:
            headers.update({k: v for k, v in overrides.items() if v is not None})
        if not headers.get("Authorization"):
            headers["Authorization"] = self._default_headers["Authorization"]
        return headers


def create_client(credentials: Credentials | None = None) -> GitHubClient | None:
    """Build a client from explicit or configured credentials.

    Returns None when no usable token is available.
    """
    credentials = credentials or get_credentials()
    if credentials is None or not validate_credentials(credentials):
        logger.warning("GITHUB_TOKEN not set or invalid, GitHub client not created")
        return None
    logger.debug(
        "GitHub client bound to owner=%s repo=%s at %s",
        credentials.owner or "default", credentials.repo or "default", credentials.api_url,
    )
    return GitHubClient(credentials)


def _api_error(resp: httpx.Response, url: httpx.URL) -> GitHubAPIError:
    return GitHubAPIError(
        f"GitHub API error: {resp.status_code} {resp.reason_phrase}",
        resp.status_code,
        url.path,
        resp.text,
    )


def _rate_limit_wait(resp: httpx.Response) -> float:
    """Seconds until the quota resets, plus a margin, capped."""
    reset = _parse_header_number(resp, "x-ratelimit-reset") or 0.0
    wait = max(0.0, reset - time.time()) + RATE_LIMIT_MARGIN
    return min(wait, RATE_LIMIT_MAX_WAIT)


def _parse_retry_after(resp: httpx.Response) -> float | None:
    return _parse_header_number(resp, "retry-after")


def _parse_header_number(resp: httpx.Response, name: str) -> float | None:
    val = resp.headers.get(name)
    if val is None:
        return None
    try:
        number = float(val)
    except ValueError:
        return None
    if not math.isfinite(number) or number < 0:
        return None
    return number


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
