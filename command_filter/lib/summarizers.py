"""
Summary extraction for captured command output.

Turns raw output into a short status line without an LLM. Every category has
its own small extractor tuned to the tool's usual success/failure phrasing.
Extraction is regex based and best effort: when the expected marker is
absent, extractors fall back to a generic phrase ("See log."), never to an
empty string.

Extractors are pure functions of (output, exit_code, command) and are
registered in EXTRACTORS. summarize() adds the log hint suffix, sanitizes
and bounds the result.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from command_filter.lib.rules import Category

MAX_SUMMARY_LENGTH = 500
TAIL_LINES = 3
SEE_LOG = "See log."

Extractor = Callable[[str, int, str], str]

_ANSI_RE = re.compile(r"\x1b\[[0-?]*[ -/]*[@-~]|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)|\x1b[@-Z\\-_]")
# C0/C1 controls and lone surrogates
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f\ud800-\udfff]")
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class Summary:
    """Bounded substitute text for a command's output."""

    text: str
    category: Category
    success: bool


# --- Matching helpers ---


def first_line(pattern: str, output: str, flags: int = 0) -> str | None:
    """First line containing a match for pattern."""
    regex = re.compile(pattern, flags)
    for line in output.splitlines():
        if regex.search(line):
            return line.strip()
    return None


def last_line(pattern: str, output: str, flags: int = 0) -> str | None:
    """Last line containing a match for pattern."""
    regex = re.compile(pattern, flags)
    for line in reversed(output.splitlines()):
        if regex.search(line):
            return line.strip()
    return None


def last_match(pattern: str, output: str, flags: int = 0) -> str | None:
    """Text of the last match for pattern anywhere in output."""
    matches = [m.group(0) for m in re.finditer(pattern, output, flags)]
    return matches[-1] if matches else None


def count_lines(pattern: str, output: str) -> int:
    regex = re.compile(pattern)
    return sum(1 for line in output.splitlines() if regex.search(line))


def tail(output: str, n: int = TAIL_LINES) -> str:
    """Last n non-blank lines joined by spaces."""
    lines = [line.strip() for line in output.splitlines() if line.strip()]
    return " ".join(lines[-n:])


def tool_label(command: str, default: str) -> str:
    """First two words of the command, e.g. 'yarn install' or 'poetry install'."""
    words = command.split()
    return " ".join(words[:2]) if len(words) >= 2 else default


# --- Per-category extractors ---


def summarize_docker(output: str, exit_code: int, command: str) -> str:
    if exit_code != 0:
        error = first_line(r"error|failed|cannot|unable", output, re.IGNORECASE)
        return f"Docker command failed (exit {exit_code}). {error or SEE_LOG}"

    image = last_line(r"Successfully (built|tagged)", output)
    if image:
        return f"Docker build succeeded. {image}"
    if re.search(r"Container.*(Started|Running)", output):
        return "Docker compose up succeeded. Containers started."
    return "Docker command completed successfully."


def summarize_npm(output: str, exit_code: int, command: str) -> str:
    label = tool_label(command, "npm install")
    if exit_code != 0:
        error = first_line(r"ERR!|error|failed", output, re.IGNORECASE)
        return f"{label} failed (exit {exit_code}). {error or SEE_LOG}"

    packages = last_match(r"added \d+ packages?", output) or "Packages installed"
    vulns = last_match(r"\d+ vulnerabilit(?:y|ies)", output) or "0 vulnerabilities"
    parts = [f"{label} succeeded.", f"{packages}.", f"{vulns}."]
    elapsed = last_match(r"\bin \d+(?:\.\d+)?m?s\b", output)
    if elapsed:
        parts.append(elapsed)
    return " ".join(parts)


def summarize_npm_script(output: str, exit_code: int, command: str) -> str:
    if exit_code == 0:
        return "npm script completed successfully."
    error = first_line(r"error|failed|exception", output, re.IGNORECASE)
    return f"npm script failed (exit {exit_code}). {error or SEE_LOG}"


def summarize_cargo(output: str, exit_code: int, command: str) -> str:
    if exit_code != 0:
        error = first_line(r"^error\[", output)
        return f"Cargo failed (exit {exit_code}). {error or SEE_LOG}"

    warnings = count_lines(r"warning:", output)
    finished = last_line(r"Finished", output)
    if finished:
        return f"Cargo succeeded. {warnings} warning(s). {finished}"
    return f"Cargo succeeded. {warnings} warning(s)."


def summarize_pip(output: str, exit_code: int, command: str) -> str:
    label = tool_label(command, "pip install")
    if exit_code == 0:
        return f"{label} succeeded."
    error = first_line(r"error|failed|could not", output, re.IGNORECASE)
    return f"{label} failed (exit {exit_code}). {error or SEE_LOG}"


def failed_test_ids(output: str, limit: int = 5) -> list[str]:
    """Test ids from pytest's short summary ("FAILED tests/x.py::test_y - reason")."""
    ids = []
    for line in output.splitlines():
        match = re.match(r"FAILED (\S+)", line)
        if match:
            ids.append(match.group(1))
            if len(ids) == limit:
                break
    return ids


def summarize_pytest(output: str, exit_code: int, command: str) -> str:
    passed = last_match(r"\d+ passed", output)

    if exit_code == 0:
        skipped = last_match(r"\d+ skipped", output)
        results = ", ".join(p for p in (passed, skipped) if p)
        summary = f"pytest passed. {results}." if results else "pytest passed."
        elapsed = last_match(r"in \d+\.\d+s", output)
        return f"{summary} {elapsed}" if elapsed else summary

    failed = last_match(r"\d+ failed", output) or "? failed"
    ids = failed_test_ids(output)
    failing = ", ".join(ids) if ids else "see log"
    return f"pytest failed. {passed or '0 passed'}, {failed}. Failed: {failing}"


def summarize_jest(output: str, exit_code: int, command: str) -> str:
    if exit_code == 0:
        tests = last_match(r"Tests:.*\d+ passed", output)
        return f"Jest passed. {tests or 'Tests passed'}"
    tests = last_match(r"Tests:.*", output)
    return f"Jest failed. {tests.strip() if tests else 'Some tests failed'}. {SEE_LOG}"


def summarize_make(output: str, exit_code: int, command: str) -> str:
    if exit_code == 0:
        return "Build succeeded."
    error = first_line(r"error:|Error:|make:.*Error", output)
    return f"Build failed (exit {exit_code}). {error or SEE_LOG}"


def summarize_go(output: str, exit_code: int, command: str) -> str:
    if exit_code == 0:
        return "Go tests passed." if "test" in command else "Go build succeeded."
    error = first_line(r"^.*\.go:\d+:", output)
    return f"Go command failed (exit {exit_code}). {error or SEE_LOG}"


def summarize_git(output: str, exit_code: int, command: str) -> str:
    if exit_code == 0:
        return "Git clone succeeded." if "clone" in command else "Git command succeeded."
    error = first_line(r"error|fatal", output, re.IGNORECASE)
    return f"Git command failed (exit {exit_code}). {error or SEE_LOG}"


def summarize_kubectl(output: str, exit_code: int, command: str, lines: int = TAIL_LINES) -> str:
    status = "kubectl succeeded." if exit_code == 0 else f"kubectl failed (exit {exit_code})."
    return f"{status} {tail(output, lines) or SEE_LOG}"


def summarize_terraform(output: str, exit_code: int, command: str) -> str:
    if exit_code != 0:
        # terraform frames diagnostics in box drawing characters: "│ Error: ..."
        error = first_line(r"^[\s│╷╵]*Error:", output)
        return f"Terraform failed (exit {exit_code}). {error or SEE_LOG}"

    plan = last_line(r"Plan:", output)
    if plan:
        return f"Terraform plan succeeded. {plan}"
    applied = last_line(r"Apply complete", output)
    if applied:
        return f"Terraform apply succeeded. {applied}"
    return "Terraform command succeeded."


def summarize_generic(output: str, exit_code: int, command: str, lines: int = TAIL_LINES) -> str:
    last_lines = tail(output, lines)
    if exit_code == 0:
        return f"Command succeeded. {last_lines}".rstrip()
    return f"Command failed (exit {exit_code}). {last_lines or SEE_LOG}"


EXTRACTORS: dict[Category, Extractor] = {
    Category.DOCKER: summarize_docker,
    Category.NPM: summarize_npm,
    Category.NPM_SCRIPT: summarize_npm_script,
    Category.CARGO: summarize_cargo,
    Category.PIP: summarize_pip,
    Category.PYTEST: summarize_pytest,
    Category.JEST: summarize_jest,
    Category.MAKE: summarize_make,
    Category.GO: summarize_go,
    Category.GIT: summarize_git,
    Category.KUBECTL: summarize_kubectl,
    Category.TERRAFORM: summarize_terraform,
}

# Extractors that report the last lines of output and take a line count
TAILING_EXTRACTORS = (summarize_kubectl, summarize_generic)


# --- Sanitizing ---


def sanitize(text: str) -> str:
    """Strip escape sequences and control characters, fold all whitespace to single spaces."""
    text = _ANSI_RE.sub("", text)
    text = _CONTROL_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def bound(body: str, suffix: str, max_length: int = MAX_SUMMARY_LENGTH) -> str:
    """Join body and suffix, cutting the body so the result fits max_length."""
    body = sanitize(body)
    suffix = sanitize(suffix)
    room = max_length - len(suffix) - 1
    if room < len("... "):
        return suffix[:max_length]
    if len(body) > room:
        body = body[: room - 3].rstrip() + "..."
    return f"{body} {suffix}".strip()


def log_hint(latest: str) -> str:
    return f"(View full: cat {latest})"


def summarize(
    category: Category,
    exit_code: int,
    output: str,
    command: str,
    *,
    hint: str | None = None,
    max_length: int = MAX_SUMMARY_LENGTH,
    tail_lines: int = TAIL_LINES,
) -> Summary:
    """
    Build the summary for one command run.

    Args:
        category: Category from classify()
        exit_code: Exit code recorded in the log
        output: Captured output as read back from the log
        command: The original command line
        hint: Suffix telling the user where the full log is
        max_length: Upper bound on the summary length
        tail_lines: Lines kept by the last-lines extractors

    Returns:
        Summary whose text has no newlines and is at most max_length chars
    """
    extractor = EXTRACTORS.get(category, summarize_generic)
    if extractor in TAILING_EXTRACTORS:
        body = extractor(output, exit_code, command, lines=tail_lines)
    else:
        body = extractor(output, exit_code, command)

    return Summary(
        text=bound(body, hint or log_hint("~/.command-filter/latest.log"), max_length),
        category=category,
        success=exit_code == 0,
    )
