#!/usr/bin/env python3

from __future__ import annotations

import argparse
import sys

from .config import Config, SDK_ENV, parse_since, resolve_sdk_root
from .sdk import DiscoveryError, Release, discover
from .verify import FatalRunError, Mode, run_all
from .version import ParseError


PROG = "go-compatible"


def _error(msg: object) -> None:
    print(f"{PROG}: {msg}", file=sys.stderr)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description=(
            "Check that Go packages still vet, build or test cleanly with every Go release "
            "installed in the SDK directory."
        ),
    )
    parser.add_argument(
        "--since",
        help="Only check releases at or above this version (e.g. go1.15 or 1.15).",
    )
    parser.add_argument(
        "--mode",
        choices=[m.value for m in Mode],
        default=Mode.VET.value,
        help="Verification command to run for each release (default: vet).",
    )
    parser.add_argument(
        "--sdk",
        help=f"Go SDK directory (default: ${SDK_ENV}, else ~/sdk).",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List the discovered releases and exit.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Report each release as it is checked.",
    )
    parser.add_argument("patterns", nargs="*", help="Package patterns passed to the go command.")
    return parser


def _config(args: argparse.Namespace) -> Config:
    return Config(
        sdk_root=resolve_sdk_root(args.sdk),
        mode=Mode(args.mode),
        since=parse_since(args.since) if args.since is not None else None,
        patterns=tuple(args.patterns),
        verbose=args.verbose,
    )


def _progress(release: Release) -> None:
    print(f"{PROG}: checking {release}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        config = _config(args)
    except ParseError as e:
        _error(f"invalid --since: {e}")
        return 1

    try:
        releases = discover(config.sdk_root, config.since)
    except DiscoveryError as e:
        _error(e)
        return 1

    if args.list:
        for rel in releases:
            print(f"{rel}\t{rel.root}")
        return 0

    try:
        run_all(
            releases,
            config.patterns,
            config.mode,
            on_start=_progress if config.verbose else None,
        )
    except FatalRunError as e:
        _error(e)
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
