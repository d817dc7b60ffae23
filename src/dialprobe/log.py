# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging helpers for dialprobe."""

from __future__ import annotations

import logging
import os
import sys

DEFAULT_LOG_LEVEL = os.getenv("DIALPROBE_LOG_LEVEL", "INFO").upper()


def setup_logging(level: str | None = None) -> None:
    """Send probe events to stdout as plain text lines."""
    effective_level = (level or DEFAULT_LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, effective_level, logging.INFO),
        format="%(message)s",
        stream=sys.stdout,
    )
    # httpx logs every request at INFO, which would double each outcome line.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


__all__ = ["setup_logging"]
