from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# --- Input Schemas ---


class HookInput(BaseModel):
    """
    PreToolUse input envelope as sent by Claude Code on stdin.

    Only the fields command-filter needs are modelled; everything else is
    ignored. A bare {"command": ..., "cwd": ...} document is accepted too.
    """

    model_config = ConfigDict(extra="ignore")

    hook_event_name: str = Field(
        default="PreToolUse", description="The event name (e.g., PreToolUse)."
    )
    tool_name: str | None = None
    tool_input: dict[str, Any] = Field(default_factory=dict)
    command: str | None = Field(
        None, description="Top-level command, used when tool_input has none."
    )
    cwd: str | None = None

    @property
    def shell_command(self) -> str:
        """The command about to run, or "" if the envelope has none."""
        command = self.tool_input.get("command")
        if not isinstance(command, str) or not command:
            command = self.command or ""
        return command

    @property
    def is_bash(self) -> bool:
        return self.tool_name in (None, "Bash")


# --- Claude Code Hook Schemas ---


class UpdatedBashInput(BaseModel):
    command: str


class ClaudeHookSpecificOutput(BaseModel):
    """
    Nested output structure for Claude Code PreToolUse hooks.
    """

    hookEventName: str
    permissionDecision: Literal["allow", "deny", "ask"] | None = None
    permissionDecisionReason: str | None = None
    updatedInput: UpdatedBashInput | None = None


class ClaudeGeneralHookOutput(BaseModel):
    """
    Output structure for standard Claude Code hooks (PreToolUse, etc.).
    """

    systemMessage: str | None = None
    hookSpecificOutput: ClaudeHookSpecificOutput | None = None
