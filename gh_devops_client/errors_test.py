"""Unit tests for error categorization and formatting."""

import httpx
import pytest

from .errors import ErrorCategory, GitHubAPIError, categorize, describe_error, format_error_for_ai


def describe_GitHubAPIError():
    def it_keeps_status_path_and_body():
        err = GitHubAPIError("GitHub API error: 404 Not Found", 404, "/repos/o/r", '{"message": "Not Found"}')
        assert err.status == 404
        assert err.path == "/repos/o/r"
        assert err.body == '{"message": "Not Found"}'
        assert str(err) == "GitHub API error: 404 Not Found"

    def it_defaults_body_to_empty_string():
        assert GitHubAPIError("Request timed out", 408, "/x").body == ""


def describe_categorize():
    @pytest.mark.parametrize(
        "status,category",
        [
            (401, ErrorCategory.AUTHENTICATION),
            (403, ErrorCategory.ACCESS_DENIED),
            (404, ErrorCategory.NOT_FOUND),
            (408, ErrorCategory.TIMEOUT),
            (422, ErrorCategory.VALIDATION),
            (429, ErrorCategory.RATE_LIMITED),
            (500, ErrorCategory.API),
            (409, ErrorCategory.API),
        ],
    )
    def it_maps_statuses(status, category):
        assert categorize(GitHubAPIError("x", status, "/x")) is category

    def it_maps_transport_errors_to_network():
        assert categorize(httpx.ConnectError("refused")) is ErrorCategory.NETWORK

    def it_maps_anything_else_to_unknown():
        assert categorize(ValueError("bad")) is ErrorCategory.UNKNOWN


def describe_format_error_for_ai():
    def it_flags_invalid_credentials():
        text = format_error_for_ai(GitHubAPIError("x", 401, "/user"), "get_repository")
        assert "Authentication failed for get_repository" in text
        assert "GITHUB_TOKEN" in text

    def it_reports_access_denied():
        text = format_error_for_ai(GitHubAPIError("x", 403, "/x"), "list_secrets")
        assert "Access denied for list_secrets" in text

    def it_guides_not_found_lookups():
        text = format_error_for_ai(GitHubAPIError("x", 404, "/x"), "get_workflow_run")
        assert "owner, repo, and resource ID" in text

    def it_includes_body_for_validation_errors():
        body = '{"message": "Validation Failed", "errors": [{"field": "name"}]}'
        text = format_error_for_ai(GitHubAPIError("x", 422, "/x", body), "create_release")
        assert text.endswith(body)

    def it_reports_timeouts_distinctly():
        text = format_error_for_ai(GitHubAPIError("Request timed out", 408, "/x"), "get_job_logs")
        assert "timed out" in text

    def it_reports_other_statuses_with_message():
        text = format_error_for_ai(GitHubAPIError("GitHub API error: 502 Bad Gateway", 502, "/x"), "list_runs")
        assert text == "❌ GitHub API error (502) for list_runs: GitHub API error: 502 Bad Gateway"

    def it_reports_exhausted_throttling_as_api_error():
        text = format_error_for_ai(GitHubAPIError("GitHub API error: 429 Too Many Requests", 429, "/x"), "t")
        assert "(429)" in text

    def it_reports_network_errors():
        assert "Network error in t: refused" in format_error_for_ai(httpx.ConnectError("refused"), "t")

    def it_handles_plain_and_empty_errors():
        assert format_error_for_ai(RuntimeError("boom"), "t") == "❌ Error in t: boom"
        assert format_error_for_ai(RuntimeError(), "t") == "❌ Unknown error in t"


def describe_describe_error():
    def it_includes_endpoint_and_details():
        err = GitHubAPIError("GitHub API error: 422 Unprocessable Entity", 422, "/repos/o/r/releases", "bad tag")
        text = describe_error(err, "create_release")
        assert text == (
            "[create_release] GitHub API Error (422) at /repos/o/r/releases: "
            "GitHub API error: 422 Unprocessable Entity\nDetails: bad tag"
        )

    def it_omits_details_without_body():
        text = describe_error(GitHubAPIError("Request timed out", 408, "/x"), "t")
        assert "Details" not in text

    def it_handles_other_errors():
        assert describe_error(RuntimeError("boom"), "t") == "[t] Error: boom"
        assert describe_error(RuntimeError(), "t") == "[t] Unknown error occurred"
