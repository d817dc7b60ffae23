# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Single GET probe: time it, drain it, log one outcome line."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

import httpx

from ..config import ProbeSettings
from ..errors import categorize_exception
from ..http.models import HEADER_NOT_FOUND, ProbeOutcome, format_clock

logger = logging.getLogger(__name__)


class Prober:
    """Issues probes against the configured target through one worker's client."""

    def __init__(
        self,
        client: httpx.Client,
        settings: ProbeSettings,
        prefix: str,
        *,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.client = client
        self.settings = settings
        self.prefix = prefix
        self._now = now

    def probe(self) -> ProbeOutcome:
        url = self.settings.target.url
        header_name = self.settings.trace_header
        started_at = self._now()
        logger.debug("%s [%s] Start", self.prefix, format_clock(started_at))

        try:
            with self.client.stream("GET", url) as resp:
                header_value = resp.headers.get(header_name) or HEADER_NOT_FOUND
                # The body must be consumed in full before the connection can return to the pool.
                bytes_read = 0
                for chunk in resp.iter_bytes():
                    bytes_read += len(chunk)
                status_code = resp.status_code
        except httpx.RequestError as exc:
            outcome = ProbeOutcome(
                prefix=self.prefix,
                started_at=started_at,
                ended_at=self._now(),
                header_name=header_name,
                error=str(exc) or type(exc).__name__,
                error_category=categorize_exception(exc),
            )
        else:
            outcome = ProbeOutcome(
                prefix=self.prefix,
                started_at=started_at,
                ended_at=self._now(),
                status_code=status_code,
                bytes_read=bytes_read,
                header_name=header_name,
                header_value=header_value,
            )

        logger.info("%s", outcome.render())
        return outcome


__all__ = ["Prober"]
