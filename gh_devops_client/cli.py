"""CLI commands for ad-hoc GitHub API calls."""

import argparse
import json
import logging
import sys

SETUP_INSTRUCTIONS = """\
GitHub token not configured.

To use gh-devops-api, you need to set the GITHUB_TOKEN environment variable.

1. Create a Personal Access Token at: https://github.com/settings/tokens

2. Required scopes:
   - repo (full control of private repositories)
   - workflow (update GitHub Action workflows)
   - write:packages (upload packages)
   - security_events (read and write security events)

3. Set the environment variable:
   export GITHUB_TOKEN=your_token_here

4. Optionally set defaults:
   export GITHUB_OWNER=your_username
   export GITHUB_REPO=your_default_repo
"""


def _parse_pairs(values: list[str], sep: str, flag: str) -> dict[str, str]:
    pairs = {}
    for item in values:
        key, found, value = item.partition(sep)
        if not found or not key.strip():
            raise SystemExit(f"Invalid {flag} {item!r}, expected KEY{sep}VALUE")
        pairs[key.strip()] = value.strip() if sep == ":" else value
    return pairs


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Call the GitHub REST API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # api subcommand
    api_parser = subparsers.add_parser(
        "api",
        help="Make a GitHub REST API call",
    )
    api_parser.add_argument(
        "endpoint",
        help="API endpoint path, {owner} and {repo} are filled in (e.g., /repos/{owner}/{repo}/actions/runs)",
    )
    api_parser.add_argument(
        "--method",
        default="GET",
        type=str.upper,
        choices=["GET", "POST", "PUT", "PATCH", "DELETE"],
        help="HTTP method (default: GET)",
    )
    api_parser.add_argument(
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Query parameter for GET/DELETE (repeatable, e.g., --param per_page=100)",
    )
    api_parser.add_argument(
        "--header",
        action="append",
        default=[],
        metavar="KEY:VALUE",
        help="Extra request header (repeatable)",
    )
    api_parser.add_argument(
        "--body",
        default=None,
        help="JSON request body for POST/PUT/PATCH",
    )
    api_parser.add_argument(
        "--raw",
        action="store_true",
        help="Print the response body as text instead of JSON (GET only, e.g., job logs; redirects still print as JSON)",
    )
    api_parser.add_argument("--owner", default=None, help="Repository owner (default: GITHUB_OWNER)")
    api_parser.add_argument("--repo", default=None, help="Repository name (default: GITHUB_REPO)")

    # rate-limit subcommand
    subparsers.add_parser(
        "rate-limit",
        help="Show the remaining core API quota",
    )

    return parser


def _run_api(client, args) -> None:
    owner = args.owner or client.owner
    repo = args.repo or client.repo
    endpoint = args.endpoint
    if ("{owner}" in endpoint and not owner) or ("{repo}" in endpoint and not repo):
        raise SystemExit("Endpoint needs {owner}/{repo}: pass --owner/--repo or set GITHUB_OWNER/GITHUB_REPO")
    endpoint = endpoint.replace("{owner}", owner).replace("{repo}", repo)

    params = _parse_pairs(args.param, "=", "--param")
    headers = _parse_pairs(args.header, ":", "--header")
    try:
        body = json.loads(args.body) if args.body is not None else None
    except json.JSONDecodeError as e:
        raise SystemExit(f"--body is not valid JSON: {e}") from e

    if args.raw:
        if args.method != "GET":
            raise SystemExit("--raw only works with --method GET")
        result = client.get_raw(endpoint, params=params or None, headers=headers or None)
        # 302 and 204 still come back as a redirect dict and None
        if isinstance(result, str):
            sys.stdout.write(result)
            sys.stdout.write("\n")
            return
    elif args.method == "GET":
        result = client.get(endpoint, params=params or None, headers=headers or None)
    elif args.method == "DELETE":
        result = client.delete(endpoint, params=params or None)
    else:
        call = getattr(client, args.method.lower())
        result = call(endpoint, body=body, headers=headers or None)

    if result is not None:
        json.dump(result, sys.stdout, indent=2)
        sys.stdout.write("\n")


def _run_rate_limit(client) -> None:
    data = client.get("/rate_limit")
    core = data.get("resources", {}).get("core", {})
    print(
        f"core: {core.get('remaining', '?')}/{core.get('limit', '?')} remaining, "
        f"resets at {core.get('reset', '?')}"
    )


def main():
    parser = _build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    import httpx

    from .client import create_client
    from .errors import GitHubAPIError, format_error_for_ai
    from .settings import get_settings

    _configure_logging(get_settings().log_level)

    client = create_client()
    if client is None:
        sys.stderr.write(SETUP_INSTRUCTIONS)
        sys.exit(1)

    try:
        with client:
            if args.command == "api":
                _run_api(client, args)
            elif args.command == "rate-limit":
                _run_rate_limit(client)
    except (GitHubAPIError, httpx.TransportError, ValueError) as e:
        sys.stderr.write(format_error_for_ai(e, args.command) + "\n")
        sys.exit(1)


if __name__ == "__main__":
    main()
