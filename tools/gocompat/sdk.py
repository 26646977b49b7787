"""Discovery of the Go releases installed in an SDK directory.

The SDK directory holds one subdirectory per release (`~/sdk/go1.16.3`, `~/sdk/go1.17beta1`,
...), each a complete GOROOT. Every candidate is asked for its own version with GOROOT
pinned to the candidate, so a globally configured GOROOT never leaks into the answer.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from . import invoke
from .version import PREFIX, ParseError, Version, parse_line


class DiscoveryError(RuntimeError):
    pass


@dataclass(frozen=True)
class Release:
    root: Path
    version: Version

    @property
    def go(self) -> Path:
        return go_exe(self.root)

    def __str__(self) -> str:
        return PREFIX + str(self.version)


def _go_exe_name() -> str:
    return "go.exe" if os.name == "nt" else "go"


def go_exe(goroot: Path) -> Path:
    return goroot / "bin" / _go_exe_name()


def go_version(goroot: Path) -> str:
    """Return the first line printed by `go version` for the release installed in `goroot`."""

    # TODO: a candidate without bin/go (e.g. a partially downloaded release) aborts discovery;
    # consider skipping it with a warning instead.
    stdout = invoke.output(go_exe(goroot), ["version"], env=invoke.pinned_env(goroot))
    text = stdout.decode("utf-8", errors="replace")
    return text.splitlines()[0] if text else ""


def discover(sdk_root: Path, since: Version | None = None) -> list[Release]:
    """Return the releases installed in `sdk_root`, sorted by ascending version.

    Releases older than `since` are skipped. Raises `DiscoveryError` when the directory
    cannot be listed, a release cannot report a parseable version, or no release is left.
    """

    try:
        entries = sorted(sdk_root.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise DiscoveryError(f"cannot list go sdk directory {sdk_root}: {e}") from e

    releases: list[Release] = []
    for entry in entries:
        if not entry.name.startswith(PREFIX) or not entry.is_dir():
            continue
        try:
            line = go_version(entry)
        except invoke.InvocationError as e:
            raise DiscoveryError(f"{entry.name}: {e}") from e
        try:
            version = parse_line(line)
        except ParseError as e:
            raise DiscoveryError(f"{entry.name}: {e}") from e

        if since is not None and version < since:
            continue
        releases.append(Release(root=entry, version=version))

    if not releases:
        if since is not None:
            raise DiscoveryError(f"no go releases since go{since} found in {sdk_root}")
        raise DiscoveryError(f"no go releases found in {sdk_root}")

    # `sorted` is stable: equal versions keep directory listing order.
    return sorted(releases, key=lambda r: r.version)
