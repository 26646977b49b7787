from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from .version import PREFIX, Version, parse
from .verify import Mode


SDK_ENV = "GOSDK"


def resolve_sdk_root(
    override: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    home: Path | None = None,
) -> Path:
    """Return the Go SDK directory.

    Precedence: explicit override, then `$GOSDK` (even when empty), then `~/sdk`, which is
    where `golang.org/dl` installs releases.
    """

    if override is not None:
        return Path(override).expanduser()
    env = os.environ if environ is None else environ
    if SDK_ENV in env:
        return Path(env[SDK_ENV])
    return (Path.home() if home is None else home) / "sdk"


def parse_since(text: str) -> Version:
    """Parse a `--since` value, accepting both `go1.15` and `1.15`."""

    text = text.strip()
    if not text.startswith(PREFIX):
        text = PREFIX + text
    return parse(text)


@dataclass(frozen=True)
class Config:
    sdk_root: Path
    mode: Mode = Mode.VET
    since: Version | None = None
    patterns: tuple[str, ...] = ()
    verbose: bool = False
