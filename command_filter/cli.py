#!/usr/bin/env python3
"""
command-filter command line.

Usage:
    command-filter hook                 # PreToolUse hook (reads JSON on stdin)
    command-filter classify npm install # print the category of a command
    command-filter latest [--path]      # show the most recent log
"""

from __future__ import annotations

import argparse
import sys

from command_filter import __version__
from command_filter.hooks import smart_bash
from command_filter.lib.classifier import classify
from command_filter.lib.config import load_config
from command_filter.lib.log_store import LogStore


def cmd_classify(args: argparse.Namespace) -> int:
    command = " ".join(args.command)
    print(classify(command, load_config().effective_rules()))
    return 0


def cmd_latest(args: argparse.Namespace) -> int:
    latest = LogStore().latest()
    if latest is None:
        print("No command-filter logs yet.", file=sys.stderr)
        return 1
    if args.path:
        print(latest)
    else:
        sys.stdout.write(latest.read_text(errors="replace"))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="command-filter",
        description="Run verbose shell commands, log their output and return a summary",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="subcommand", required=True)

    subparsers.add_parser("hook", help="Run as a Claude Code PreToolUse hook (stdin JSON)")

    classify_parser = subparsers.add_parser("classify", help="Show how a command is classified")
    classify_parser.add_argument("command", nargs=argparse.REMAINDER, help="Command line")

    latest_parser = subparsers.add_parser("latest", help="Print the most recent log")
    latest_parser.add_argument(
        "--path", action="store_true", help="Print the log's path instead of its contents"
    )

    args = parser.parse_args(argv)

    if args.subcommand == "hook":
        smart_bash.main()
        return 0
    if args.subcommand == "classify":
        return cmd_classify(args)
    return cmd_latest(args)


if __name__ == "__main__":
    sys.exit(main())
