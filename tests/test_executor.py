"""Tests for the execution wrapper (runs real shell commands)."""

import os
from pathlib import Path

from command_filter.lib.executor import SPAWN_FAILURE_EXIT_CODE, execute, resolve_cwd


def test_captures_output_and_exit_code() -> None:
    result = execute("echo hello; exit 3")
    assert result.exit_code == 3
    assert result.output == b"hello\n"
    assert not result.success


def test_interleaves_stdout_and_stderr_in_order() -> None:
    result = execute("echo one; echo two 1>&2; echo three")
    assert result.exit_code == 0
    assert result.output == b"one\ntwo\nthree\n"


def test_shell_operators_work() -> None:
    result = execute("printf 'a\\nb\\nc\\n' | wc -l")
    assert result.text.strip() == "3"


def test_runs_in_given_directory(tmp_path: Path) -> None:
    result = execute("pwd", cwd=str(tmp_path))
    assert Path(result.text.strip()).resolve() == tmp_path.resolve()


def test_missing_directory_is_ignored(tmp_path: Path) -> None:
    missing = tmp_path / "does-not-exist"
    result = execute("pwd", cwd=str(missing))
    assert result.exit_code == 0
    assert Path(result.text.strip()).resolve() == Path(os.getcwd()).resolve()


def test_unknown_command_is_a_normal_result() -> None:
    result = execute("definitely-not-a-real-command-4711")
    assert result.exit_code == 127
    assert b"not found" in result.output


def test_unspawnable_shell_reports_127(tmp_path: Path) -> None:
    result = execute("echo hi", shell=str(tmp_path / "no-such-shell"))
    assert result.exit_code == SPAWN_FAILURE_EXIT_CODE
    assert b"no-such-shell" in result.output


def test_stdin_is_not_inherited() -> None:
    result = execute("cat")
    assert result.exit_code == 0
    assert result.output == b""


def test_binary_output_is_kept_verbatim() -> None:
    result = execute("printf '\\377\\376ok'")
    assert result.output == b"\xff\xfeok"
    assert result.text.endswith("ok")


def test_resolve_cwd() -> None:
    assert resolve_cwd(None) is None
    assert resolve_cwd("") is None
    assert resolve_cwd("/definitely/not/here") is None
    assert resolve_cwd("/") == Path("/")


def test_streams_output_into_given_file(tmp_path: Path) -> None:
    sink = tmp_path / "out.log"
    with open(sink, "ab") as f:
        f.write(b"header\n")
        f.flush()
        result = execute("echo one; echo two 1>&2; exit 5", stdout=f)
    assert result.exit_code == 5
    assert result.output == b""
    assert sink.read_bytes() == b"header\none\ntwo\n"


def test_spawn_failure_is_written_to_given_file(tmp_path: Path) -> None:
    sink = tmp_path / "out.log"
    with open(sink, "ab") as f:
        result = execute("echo hi", shell=str(tmp_path / "no-such-shell"), stdout=f)
    assert result.exit_code == SPAWN_FAILURE_EXIT_CODE
    assert result.output == b""
    assert b"no-such-shell" in sink.read_bytes()


def test_command_with_nul_byte_reports_127() -> None:
    result = execute("echo a\x00b")
    assert result.exit_code == SPAWN_FAILURE_EXIT_CODE
    assert b"null" in result.output
