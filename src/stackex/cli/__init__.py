"""CLI module - command line interface for stackex."""

from stackex.cli.main import format_response, main, parse_arguments, run_command

__all__ = ["format_response", "main", "parse_arguments", "run_command"]
