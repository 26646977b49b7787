"""Parsing and ordering of Go release versions.

Go versions look like semver but are not:
- the patch number is optional (`go1.16` is `1.16.0`)
- pre-releases are appended without a separator (`go1.16beta1`), or with `-` for
  development builds (`go1.17-3f4977bd58`); the `-` is kept as part of the pre-release

Ordering compares major/minor/patch numerically. With an equal numeric triple a final
release outranks any pre-release, and two distinct pre-releases compare as plain strings.
The string comparison is a deliberate simplification: it is not semver pre-release
precedence and must not be "fixed" (`rc1` > `beta2` happens to hold, `beta10` < `beta2`).
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass


PREFIX = "go"

# Based on the semver regex from https://regex101.com/r/Ly7O1x/3/, with the patch made
# optional and the pre-release relaxed to any trailing text.
RE_VERSION = re.compile(
    r"^(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)(?:\.(?P<patch>0|[1-9]\d*))?(?P<prerelease>.*)$",
    re.ASCII | re.DOTALL,
)


class ParseError(ValueError):
    """Raised when a version string (or `go version` line) cannot be parsed."""


def _intcmp(a: int, b: int) -> int:
    return (a > b) - (a < b)


def _precmp(x: str, y: str) -> int:
    if x == y:
        return 0
    if x == "":
        return 1
    if y == "":
        return -1
    return (x > y) - (x < y)


@functools.total_ordering
@dataclass(frozen=True)
class Version:
    major: int
    minor: int
    patch: int = 0
    pre_release: str = ""

    def compare(self, other: Version) -> int:
        """Return -1, 0 or +1 as `self` is lower than, equal to or greater than `other`."""

        for a, b in (
            (self.major, other.major),
            (self.minor, other.minor),
            (self.patch, other.patch),
        ):
            c = _intcmp(a, b)
            if c != 0:
                return c
        return _precmp(self.pre_release, other.pre_release)

    def less(self, other: Version) -> bool:
        return self.compare(other) < 0

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.compare(other) < 0

    def __str__(self) -> str:
        s = f"{self.major}.{self.minor}"
        if self.patch > 0:
            s += f".{self.patch}"
        return s + self.pre_release


def parse(text: str) -> Version:
    """Parse a version such as `go1.16`, `go1.16.3`, `go1.16beta1` or `go1.17-3f4977bd58`."""

    if not text.startswith(PREFIX):
        raise ParseError(f"version {text!r} does not have the {PREFIX!r} prefix")
    body = text[len(PREFIX) :]

    m = RE_VERSION.match(body)
    if m is None:
        raise ParseError(f"unable to parse version {body!r}")

    fields: dict[str, int] = {}
    for name in ("major", "minor", "patch"):
        raw = m.group(name)
        if raw is None:
            fields[name] = 0
            continue
        try:
            fields[name] = int(raw)
        except ValueError as e:
            raise ParseError(f"invalid {name} in version {body!r}") from e

    return Version(pre_release=m.group("prerelease"), **fields)


def parse_line(line: str) -> Version:
    """Parse the first line printed by `go version`.

    Stable releases print `go version go<version> <os>/<arch>`; development builds print
    `go version devel go<version> <timestamp> <os>/<arch>`.
    """

    fields = line.split()
    if len(fields) < 3:
        raise ParseError(f"unexpected go version output {line!r}")
    token = fields[2]  # field after "go version"
    if token == "devel":
        if len(fields) < 4:
            raise ParseError(f"unexpected go version output {line!r}")
        token = fields[3]  # field after "go version devel"
    return parse(token)
