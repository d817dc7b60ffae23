# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""dialprobe CLI."""

from __future__ import annotations

import argparse
import re
import signal
from typing import Any

from ..config import ProbeSettings, load_probe_settings
from ..errors import InvalidWorkerCount
from ..log import setup_logging
from ..probe.supervisor import Supervisor

STOP_SIGNALS = (signal.SIGINT, signal.SIGTERM)
_DECIMAL_RE = re.compile(r"[+-]?[0-9]+")


def parse_worker_count(raw: Any, default: int = 1) -> int:
    """
    Return `raw` as a positive int, or `default` when no value was given.

    Only a bare ASCII decimal is accepted: no surrounding whitespace,
    underscores or non-ASCII digits.
    """
    if raw is None:
        return default
    text = str(raw)
    if not _DECIMAL_RE.fullmatch(text):
        raise InvalidWorkerCount(raw)
    count = int(text)
    if count <= 0:
        raise InvalidWorkerCount(raw)
    return count


def resolve_worker_count(raw: str | None, default: int) -> int:
    try:
        return parse_worker_count(raw, default)
    except InvalidWorkerCount as exc:
        print(f"{exc}. Using default value of {default}.")
        return default


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Repeatedly probe a fixed HTTP endpoint through a pinned host")
    parser.add_argument(
        "workers",
        nargs="?",
        default=None,
        help="Number of concurrent workers (positive integer, default 1)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: DIALPROBE_LOG_LEVEL or INFO)",
    )
    return parser


def install_signal_handlers(supervisor: Supervisor) -> None:
    def _handle(signum: int, frame: Any) -> None:  # noqa: ARG001
        supervisor.request_stop()

    for signum in STOP_SIGNALS:
        signal.signal(signum, _handle)


def _print_banner(settings: ProbeSettings, worker_count: int) -> None:
    target = settings.target
    print(
        f"Starting HTTP monitor for {target.url} using host override {target.host_override} "
        f"with {worker_count} worker(s)"
    )
    print("Press Ctrl+C to stop...")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    settings = load_probe_settings()
    worker_count = resolve_worker_count(args.workers, settings.default_workers)
    _print_banner(settings, worker_count)

    supervisor = Supervisor(settings, worker_count)
    install_signal_handlers(supervisor)
    supervisor.run()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
