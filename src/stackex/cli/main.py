"""Command line entry point: fetch questions, comments, sites or users."""

from __future__ import annotations

import argparse
import os
import sys
from dataclasses import replace
from typing import Any, NoReturn

from stackex.api.client import APIClient
from stackex.codec.envelope import APIResponse
from stackex.codec.values import to_json_text
from stackex.core.config import BackoffBehavior, ClientConfig, LogConfig
from stackex.core.exceptions import StackExError
from stackex.core.logging import setup_logging
from stackex.core.version import __version__

OUTPUT_FORMATS = ("json", "csv", "table")


def _exit_error(msg: str) -> NoReturn:
    """Print an error message to stderr and exit with code 1."""
    print(f"ERROR: {msg}", file=sys.stderr)
    sys.exit(1)


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments"""
    parser = argparse.ArgumentParser(
        prog="stackex",
        description="Query the Stack Exchange API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Questions by ID
  stackex questions 11227809 927358

  # Comments on a question, as CSV
  stackex comments 11227809 --format csv

  # Every site of the network, written to a file
  stackex sites --pagesize 100 --output sites.json

  # A user on another site
  stackex users 22656 --site superuser --format table

  # Fail instead of waiting when the API asked us to back off
  stackex questions 1 --backoff throw_error

Environment:
  STACKEX_SITE, STACKEX_FILTER, STACKEX_API_KEY, STACKEX_ACCESS_TOKEN,
  STACKEX_BASE_URL, STACKEX_API_VERSION, STACKEX_TIMEOUT, LOG_LEVEL
  (a .env file in the working directory is loaded first)
""",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")
    questions = subparsers.add_parser("questions", help="Fetch questions by ID")
    questions.add_argument("ids", nargs="+", type=int, metavar="ID")
    comments = subparsers.add_parser("comments", help="Fetch the comments on questions")
    comments.add_argument("ids", nargs="+", type=int, metavar="ID")
    subparsers.add_parser("sites", help="List the sites of the network")
    users = subparsers.add_parser("users", help="Fetch users by ID")
    users.add_argument("ids", nargs="+", type=int, metavar="ID")

    for sub in subparsers.choices.values():
        request = sub.add_argument_group("Request")
        request.add_argument("--site", help="Site to query (default: STACKEX_SITE or stackoverflow)")
        request.add_argument("--filter", dest="filter_name", help="Named API filter")
        request.add_argument("--key", dest="api_key", help="Application key (default: STACKEX_API_KEY)")
        request.add_argument("--page", type=int, help="Page number (1-based)")
        request.add_argument("--pagesize", type=int, help="Items per page (max 100)")
        request.add_argument(
            "--backoff",
            choices=[b.value for b in BackoffBehavior],
            default=BackoffBehavior.WAIT.value,
            help="What to do when the API asked for a backoff (default: wait)",
        )

        output = sub.add_argument_group("Output")
        output.add_argument("--format", choices=OUTPUT_FORMATS, default="json", help="Output format (default: json)")
        output.add_argument("--output", "-o", help="Write to this file instead of stdout ('-' for stdout)")
        output.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
        output.add_argument("--log-format", choices=["text", "json"], default="text")
        output.add_argument("--log-file", help="Also log to this rotating file")

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ClientConfig:
    """Environment configuration with command-line overrides applied."""
    config = ClientConfig.from_env()
    overrides: dict[str, Any] = {}
    if args.site:
        overrides["default_site"] = args.site
    if args.filter_name:
        overrides["default_filter"] = args.filter_name
    if args.api_key:
        overrides["api_key"] = args.api_key
    return replace(config, **overrides) if overrides else config


def request_parameters(args: argparse.Namespace) -> dict[str, Any]:
    params: dict[str, Any] = {}
    if args.page is not None:
        params["page"] = args.page
    if args.pagesize is not None:
        params["pagesize"] = args.pagesize
    return params


def run_command(client: APIClient, args: argparse.Namespace) -> APIResponse[Any]:
    """Dispatch the parsed subcommand to its endpoint call."""
    params = request_parameters(args)
    behavior = BackoffBehavior(args.backoff)
    if args.command == "questions":
        return client.fetch_questions(args.ids, params, behavior)
    if args.command == "comments":
        return client.fetch_comments_on_questions(args.ids, params, behavior)
    if args.command == "sites":
        return client.fetch_sites(params, behavior)
    if args.command == "users":
        return client.fetch_users(args.ids, params, behavior)
    raise ValueError(f"Unknown command: {args.command}")


def format_response(response: APIResponse[Any], output_format: str) -> str:
    """Render an envelope as JSON (with paging/quota metadata), CSV or a text table."""
    if output_format == "json":
        payload = {
            "items": response.items,
            "has_more": response.has_more,
            "quota_remaining": response.quota_remaining,
            "quota_max": response.quota_max,
        }
        return to_json_text(payload) + "\n"

    df = response.to_dataframe()
    if output_format == "csv":
        return df.to_csv(index=False)
    if df.empty:
        return "No items\n"
    return df.to_string(index=False) + "\n"


def _emit_output(data: str, output_file: str | None) -> None:
    """Write ``data`` to ``output_file``, or stdout when it is None or '-'."""
    if output_file and output_file not in ("-", "stdout"):
        parent = os.path.dirname(output_file)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(output_file, "w", encoding="utf-8") as f:
            f.write(data)
    else:
        sys.stdout.write(data)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the script"""
    args = parse_arguments(argv)

    if args.page is not None and args.page < 1:
        _exit_error("--page must be at least 1")
    if args.pagesize is not None and not 0 <= args.pagesize <= 100:
        _exit_error("--pagesize must be between 0 and 100")

    log_config = LogConfig(level=args.log_level or os.environ.get("LOG_LEVEL", "WARNING"), log_format=args.log_format)
    logger = setup_logging(
        log_config.level,
        log_config.log_format,
        args.log_file,
        max_bytes=log_config.file_max_bytes,
        backup_count=log_config.file_backup_count,
    )

    try:
        config = build_config(args)
    except StackExError as e:
        _exit_error(str(e))

    with APIClient(config) as client:
        try:
            response = run_command(client, args)
        except StackExError as e:
            logger.debug(f"{args.command} failed", exc_info=True)
            _exit_error(str(e))
        output = format_response(response, args.format)
        logger.info(f"Quota remaining: {client.quota}/{client.max_quota}")

    try:
        _emit_output(output, args.output)
    except OSError as e:
        _exit_error(f"Cannot write output: {e}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
