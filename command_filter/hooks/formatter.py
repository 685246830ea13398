"""
Response formatting for intercepted commands.

The response tells the host to run a trivial echo of the summary instead of
the original command. The original command has already run by the time this
is built, so the host must not run it again.
"""

from __future__ import annotations

import re

from command_filter.hooks.schemas import (
    ClaudeGeneralHookOutput,
    ClaudeHookSpecificOutput,
    UpdatedBashInput,
)

DECISION_REASON = "Verbose command output saved to log - returning summary"

# Characters that keep their special meaning inside a double-quoted shell string
_SHELL_SPECIAL_RE = re.compile(r'([\\"$`])')


def quote_for_echo(text: str) -> str:
    """Escape text for use inside "..." in a POSIX shell."""
    return _SHELL_SPECIAL_RE.sub(r"\\\1", text)


def echo_command(summary: str) -> str:
    return f'echo "{quote_for_echo(summary)}"'


def format_response(summary: str, hook_event_name: str = "PreToolUse") -> ClaudeGeneralHookOutput:
    """
    Wrap a summary into the PreToolUse response that replaces the command.

    Args:
        summary: Sanitized summary text
        hook_event_name: Event name to echo back to the host

    Returns:
        ClaudeGeneralHookOutput allowing the call with an updated command
    """
    return ClaudeGeneralHookOutput(
        hookSpecificOutput=ClaudeHookSpecificOutput(
            hookEventName=hook_event_name,
            permissionDecision="allow",
            permissionDecisionReason=DECISION_REASON,
            updatedInput=UpdatedBashInput(command=echo_command(summary)),
        )
    )


def render(output: ClaudeGeneralHookOutput) -> str:
    """Serialize a hook response as the host expects it (no null fields)."""
    return output.model_dump_json(exclude_none=True)
