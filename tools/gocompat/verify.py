"""Run a verification command against each release and report incompatibilities.

A command that exits with a non 0 status is, in practice, almost always the package failing
the stricter (or just different) rules of an older release: that is what we want to report,
so it becomes a `Diagnostic` and the run continues. Only a command that cannot be started at
all (or one the pluggable `is_fatal` predicate rejects) becomes `Fatal` and stops the run.

The run is split in two:
- `iter_outcomes` invokes the command per release and classifies the result (no stream I/O)
- `write_report` prints diagnostics and turns a `Fatal` outcome into `FatalRunError`
"""

from __future__ import annotations

import enum
import sys
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Sequence, TextIO, Union

from . import invoke
from .invoke import FailureKind, InvocationError
from .sdk import Release


class Mode(enum.Enum):
    VET = "vet"
    BUILD = "build"
    TEST = "test"

    def command(self, patterns: Sequence[str]) -> list[str]:
        return [self.value, *patterns]


@dataclass(frozen=True)
class Clean:
    pass


@dataclass(frozen=True)
class Diagnostic:
    message: bytes


@dataclass(frozen=True)
class Fatal:
    error: InvocationError


Outcome = Union[Clean, Diagnostic, Fatal]

FatalPredicate = Callable[[InvocationError], bool]
Invoker = Callable[[Release, Sequence[str]], None]


class FatalRunError(RuntimeError):
    def __init__(self, release: Release, error: InvocationError) -> None:
        self.release = release
        self.error = error
        super().__init__(f"{release}: {error}")


def default_is_fatal(err: InvocationError) -> bool:
    """Decide whether a command that ran and exited non 0 should abort the run."""

    # Build constraints excluding all Go files: exit status 1, message starts with "package".
    # TODO: all Go files excluded by build constraints is probably fatal; decide once there is
    # a reliable way to tell it apart from other "package ..." errors.
    if err.stderr.startswith(b"package"):
        return False

    # Syntax errors: exit status 2, message starts with "#" and the package name.
    if err.stderr.startswith(b"#"):
        return False

    return False


def classify(err: InvocationError, *, is_fatal: FatalPredicate = default_is_fatal) -> Outcome:
    match err.kind:
        case FailureKind.START:
            return Fatal(err)
        case FailureKind.EXIT if is_fatal(err):
            return Fatal(err)
        case _:
            # `go test` reports failing tests on stdout.
            return Diagnostic(err.stderr or err.stdout)


def invoke_release(release: Release, args: Sequence[str]) -> None:
    invoke.run(release.go, args, env=invoke.pinned_env(release.root))


def check_release(
    release: Release,
    patterns: Sequence[str],
    mode: Mode,
    *,
    invoker: Invoker = invoke_release,
    is_fatal: FatalPredicate = default_is_fatal,
) -> Outcome:
    try:
        invoker(release, mode.command(patterns))
    except InvocationError as e:
        return classify(e, is_fatal=is_fatal)
    return Clean()


def iter_outcomes(
    releases: Iterable[Release],
    patterns: Sequence[str],
    mode: Mode = Mode.VET,
    *,
    invoker: Invoker = invoke_release,
    is_fatal: FatalPredicate = default_is_fatal,
    on_start: Callable[[Release], None] | None = None,
) -> Iterator[tuple[Release, Outcome]]:
    """Yield `(release, outcome)` in order, stopping after the first `Fatal` outcome."""

    for release in releases:
        if on_start is not None:
            on_start(release)
        outcome = check_release(release, patterns, mode, invoker=invoker, is_fatal=is_fatal)
        yield release, outcome
        if isinstance(outcome, Fatal):
            return


def write_report(results: Iterable[tuple[Release, Outcome]], stream: TextIO) -> int:
    """Write one block per diagnostic to `stream`; return the number of blocks written.

    Consecutive blocks are separated by a blank line. A `Fatal` outcome raises
    `FatalRunError`; blocks already written stay written.
    """

    failed = 0
    for release, outcome in results:
        match outcome:
            case Clean():
                continue
            case Fatal(error=error):
                raise FatalRunError(release, error) from error
            case Diagnostic(message=message):
                if failed > 0:
                    stream.write("\n")
                stream.write(f"using {release}\n")
                stream.write(message.decode("utf-8", errors="replace"))
                stream.write("\n")
                stream.flush()
                failed += 1
    return failed


def run_all(
    releases: Iterable[Release],
    patterns: Sequence[str],
    mode: Mode = Mode.VET,
    *,
    stream: TextIO | None = None,
    invoker: Invoker = invoke_release,
    is_fatal: FatalPredicate = default_is_fatal,
    on_start: Callable[[Release], None] | None = None,
) -> int:
    """Verify `patterns` against every release; return the number of incompatible releases."""

    results = iter_outcomes(
        releases, patterns, mode, invoker=invoker, is_fatal=is_fatal, on_start=on_start
    )
    return write_report(results, sys.stderr if stream is None else stream)
