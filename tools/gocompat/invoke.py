"""Run a command and report failures with enough context to act on them.

`run` and `output` wrap `subprocess.run`. On failure they raise `InvocationError`, which
carries the command, its arguments and the entire (whitespace-trimmed) stderr, plus a
`FailureKind` telling apart a command that could not be started from one that ran and
exited with a non 0 status.
"""

from __future__ import annotations

import enum
import os
import subprocess
from pathlib import Path
from typing import Mapping, Sequence


class FailureKind(enum.Enum):
    START = "start"  # the process could not be started
    EXIT = "exit"  # the process ran and exited with a non 0 status


class InvocationError(RuntimeError):
    def __init__(
        self,
        cmd: str,
        args: Sequence[str],
        *,
        kind: FailureKind,
        stderr: bytes = b"",
        stdout: bytes = b"",
        returncode: int | None = None,
        reason: str = "",
    ) -> None:
        self.cmd = cmd
        self.argv = list(args)
        self.kind = kind
        self.stderr = stderr
        self.stdout = stdout
        self.returncode = returncode
        self.reason = reason or (
            f"exit status {returncode}" if kind is FailureKind.EXIT else "failed to start"
        )
        super().__init__(self._message())

    def _message(self) -> str:
        msg = self.cmd
        if self.argv:
            msg += " " + " ".join(self.argv)
        msg += ": " + self.reason
        if not self.stderr:
            return msg
        return msg + ": " + self.stderr.decode("utf-8", errors="replace")


def pinned_env(goroot: Path | str, base: Mapping[str, str] | None = None) -> dict[str, str]:
    """Return a fresh copy of `base` (default: the process environment) with GOROOT set."""

    env = dict(os.environ if base is None else base)
    env["GOROOT"] = str(goroot)
    return env


def _invoke(
    cmd: Path | str,
    args: Sequence[str],
    *,
    env: Mapping[str, str] | None,
    cwd: Path | str | None,
) -> bytes:
    cmd = str(cmd)
    try:
        proc = subprocess.run(
            [cmd, *args],
            cwd=cwd,
            env=None if env is None else dict(env),
            capture_output=True,
            check=False,
        )
    except (OSError, ValueError) as e:
        # OSError: missing/non-executable file; ValueError: bad arguments (e.g. embedded NUL).
        raise InvocationError(cmd, args, kind=FailureKind.START, reason=str(e)) from e

    stdout = proc.stdout.strip()
    if proc.returncode != 0:
        raise InvocationError(
            cmd,
            args,
            kind=FailureKind.EXIT,
            stderr=proc.stderr.strip(),
            stdout=stdout,
            returncode=proc.returncode,
        )
    return stdout


def run(
    cmd: Path | str,
    args: Sequence[str] = (),
    *,
    env: Mapping[str, str] | None = None,
    cwd: Path | str | None = None,
) -> None:
    """Run `cmd`, discarding its stdout."""

    _invoke(cmd, args, env=env, cwd=cwd)


def output(
    cmd: Path | str,
    args: Sequence[str] = (),
    *,
    env: Mapping[str, str] | None = None,
    cwd: Path | str | None = None,
) -> bytes:
    """Run `cmd` and return its stdout with leading and trailing whitespace removed."""

    return _invoke(cmd, args, env=env, cwd=cwd)
