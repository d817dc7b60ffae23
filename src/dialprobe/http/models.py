# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Probe outcome data model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from ..errors import ErrorCategory

HEADER_NOT_FOUND = "not found"


def format_clock(moment: datetime) -> str:
    """HH:MM:SS.mmm wall-clock stamp used on every probe line."""
    return moment.strftime("%H:%M:%S.") + f"{moment.microsecond // 1000:03d}"


def format_duration(duration: timedelta) -> str:
    millis = round(duration.total_seconds() * 1000)
    return f"{millis}ms"


@dataclass
class ProbeOutcome:
    """Result of a single GET attempt; rendered once and then discarded."""

    prefix: str
    started_at: datetime
    ended_at: datetime
    status_code: int | None = None
    bytes_read: int = 0
    header_name: str = ""
    header_value: str = HEADER_NOT_FOUND
    error: str | None = None
    error_category: ErrorCategory | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.status_code is not None

    @property
    def duration(self) -> timedelta:
        return self.ended_at - self.started_at

    def render(self) -> str:
        stamp = format_clock(self.ended_at)
        if not self.ok:
            category = (self.error_category or ErrorCategory.UNKNOWN_ERROR).value
            return f"{self.prefix} [{stamp}] Error ({category}): {self.error}"
        return (
            f"{self.prefix} [{stamp}] End - Status: {self.status_code}, "
            f"Size: {self.bytes_read} bytes, Duration: {format_duration(self.duration)}, "
            f"{self.header_name}: {self.header_value}"
        )


__all__ = ["HEADER_NOT_FOUND", "ProbeOutcome", "format_clock", "format_duration"]
