#!/usr/bin/env python3
"""
PreToolUse hook that replaces verbose Bash commands with a summary.

Intercepts Bash tool calls whose output is known to be long (installs,
builds, test runs, ...), runs them itself, saves the full output to a log
and hands the agent a one-line summary instead.

Architecture:
    1. Read the PreToolUse envelope from stdin
    2. Classify the command; unmatched commands pass through (no output)
    3. Check the log directory is writable (else pass through)
    4. Open the log record (header written, latest.log repointed)
    5. Run the command with its output streaming into the record
    6. Append the footer, read the record back and summarize it
    7. Print updatedInput replacing the command with `echo "<summary>"`

Exit codes:
    0: Always (pass-through and intercept are told apart by stdout)
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime

from pydantic import ValidationError

from command_filter.hooks.formatter import format_response, render
from command_filter.hooks.schemas import ClaudeGeneralHookOutput, HookInput
from command_filter.lib.classifier import classify
from command_filter.lib.config import FilterConfig, load_config
from command_filter.lib.executor import CommandRequest, execute
from command_filter.lib.log_store import LogStore, LogStoreError
from command_filter.lib.paths import display_path
from command_filter.lib.rules import Category
from command_filter.lib.summarizers import bound, log_hint, summarize

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def intercept(
    hook_input: HookInput, config: FilterConfig, store: LogStore
) -> ClaudeGeneralHookOutput | None:
    """
    Run a verbose command and build the replacement response.

    Args:
        hook_input: Parsed PreToolUse envelope
        config: Effective configuration
        store: Log store to record the output in

    Returns:
        Hook response, or None to let the host run the command unmodified

    Raises:
        LogStoreError: If the log directory is unusable. Raised before the
            command runs, so passing through is safe.
    """
    command = hook_input.shell_command
    if not command or not hook_input.is_bash:
        return None

    category = classify(command, config.effective_rules())
    if category == Category.NONE:
        return None

    store.ensure_writable()

    request = CommandRequest(command=command, cwd=hook_input.cwd)
    pending = store.open_record(request, datetime.now().astimezone())

    logger.info(f"Intercepting {category} command: {command}")
    result = execute(request.command, request.cwd, shell=config.shell, stdout=pending.file)

    # The command has run: every path below must produce a response.
    shown = store.latest_path if pending.latest_updated else pending.path
    hint = log_hint(display_path(shown))
    try:
        record = store.load(store.finish_record(pending, result.exit_code))
        output, exit_code = record.text, record.exit_code
    except Exception as e:
        logger.exception(f"Command ran but its log record could not be completed: {e}")
        output, exit_code = "", result.exit_code
        hint = f"(Full log unavailable: {e})"

    try:
        text = summarize(
            category,
            exit_code,
            output,
            command,
            hint=hint,
            max_length=config.max_summary_length,
            tail_lines=config.tail_lines,
        ).text
    except Exception:
        logger.exception("Summary extraction failed")
        text = bound(f"Command finished (exit {exit_code}).", hint, config.max_summary_length)

    return format_response(text, hook_input.hook_event_name)


def main() -> None:
    """Main hook entry point."""
    config = load_config()
    logging.basicConfig(
        level=config.log_level_number(), format=LOG_FORMAT, stream=sys.stderr
    )

    try:
        hook_input = HookInput.model_validate(json.load(sys.stdin))
    except (ValueError, ValidationError) as e:
        # No input or invalid JSON - pass through
        logger.debug(f"Unusable hook input, passing through: {e}")
        sys.exit(0)

    if not config.enabled:
        sys.exit(0)

    try:
        output = intercept(hook_input, config, LogStore())
    except LogStoreError as e:
        logger.error(f"Log directory unavailable, passing command through: {e}")
        sys.exit(0)
    except Exception:
        logger.exception("command-filter failed, passing command through")
        sys.exit(0)

    try:
        if output is not None:
            print(render(output), flush=True)
    except Exception:
        logger.exception("Failed to write the hook response")
    sys.exit(0)


if __name__ == "__main__":
    main()
