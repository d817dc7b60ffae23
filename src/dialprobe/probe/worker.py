# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Periodic probe worker.

A worker owns one httpx client (and therefore one connection pool) and runs
on its own thread. Probes are strictly sequential: a probe that outlasts the
interval delays the next one instead of overlapping it.
"""

from __future__ import annotations

import logging
import threading
import time
from enum import Enum
from typing import Callable

import httpx

from ..config import ProbeSettings
from ..http.client import create_probe_client
from .prober import Prober

logger = logging.getLogger(__name__)

ClientFactory = Callable[[ProbeSettings, str], httpx.Client]


class WorkerState(str, Enum):
    STARTING = "STARTING"
    RUNNING = "RUNNING"
    STOPPING = "STOPPING"
    TERMINATED = "TERMINATED"


class Ticker:
    """
    Fixed-rate schedule anchored at construction time.

    Ticks missed while the caller was busy are dropped, not replayed in a burst.
    """

    def __init__(self, interval: float, clock: Callable[[], float] = time.monotonic):
        if interval <= 0:
            raise ValueError("ticker interval must be positive")
        self.interval = interval
        self._clock = clock
        self.next_tick = clock() + interval

    def wait(self, stop: threading.Event) -> bool:
        """Block until the next tick (True) or until `stop` is set (False)."""
        if stop.wait(max(0.0, self.next_tick - self._clock())):
            return False
        now = self._clock()
        self.next_tick += self.interval
        if self.next_tick <= now:
            missed = int((now - self.next_tick) // self.interval) + 1
            self.next_tick += missed * self.interval
        return True


def worker_prefix(worker_id: int) -> str:
    return f"[G{worker_id}]"


class Worker:
    """One probing stream: Starting -> Running -> Stopping -> Terminated."""

    def __init__(
        self,
        worker_id: int,
        settings: ProbeSettings,
        stop: threading.Event,
        *,
        client_factory: ClientFactory = create_probe_client,
    ):
        self.worker_id = worker_id
        self.settings = settings
        self.stop = stop
        self.prefix = worker_prefix(worker_id)
        self.state = WorkerState.STARTING
        self.probes = 0
        self._client_factory = client_factory

    def _probe(self, prober: Prober) -> None:
        prober.probe()
        self.probes += 1

    def run(self) -> None:
        client = self._client_factory(self.settings, self.prefix)
        prober = Prober(client, self.settings, self.prefix)
        ticker = Ticker(self.settings.probe_interval)
        logger.info("%s Worker %d started", self.prefix, self.worker_id)

        self._probe(prober)
        self.state = WorkerState.RUNNING
        while ticker.wait(self.stop):
            self._probe(prober)

        self.state = WorkerState.STOPPING
        logger.info("%s Worker %d stopping...", self.prefix, self.worker_id)
        # Pooled connections are left for process exit to reclaim.
        self.state = WorkerState.TERMINATED


__all__ = ["ClientFactory", "Ticker", "Worker", "WorkerState", "worker_prefix"]
