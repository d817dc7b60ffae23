# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Starts staggered workers and broadcasts shutdown to them."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Protocol

from ..config import ProbeSettings
from .worker import Worker

logger = logging.getLogger(__name__)


class Runnable(Protocol):
    worker_id: int

    def run(self) -> None: ...


WorkerFactory = Callable[[int, ProbeSettings, threading.Event], Runnable]


class Supervisor:
    """
    Owns the shared stop event and the worker threads.

    Workers are daemon threads: `run()` returns as soon as stop is requested
    and never waits for an in-flight probe to finish.
    """

    def __init__(
        self,
        settings: ProbeSettings,
        worker_count: int,
        *,
        stop: threading.Event | None = None,
        worker_factory: WorkerFactory | None = None,
    ):
        if worker_count < 1:
            raise ValueError("worker_count must be a positive integer")
        self.settings = settings
        self.worker_count = worker_count
        self.stop = stop or threading.Event()
        self._worker_factory = worker_factory or Worker
        self.workers: list[Runnable] = []
        self.threads: list[threading.Thread] = []

    def start(self) -> None:
        for worker_id in range(1, self.worker_count + 1):
            if self.stop.wait(self.settings.worker_stagger):
                break
            worker = self._worker_factory(worker_id, self.settings, self.stop)
            thread = threading.Thread(target=worker.run, name=f"dialprobe-worker-{worker_id}", daemon=True)
            self.workers.append(worker)
            self.threads.append(thread)
            thread.start()

    def request_stop(self) -> None:
        self.stop.set()

    def run(self) -> None:
        self.start()
        self.stop.wait()
        logger.info("Shutting down...")


__all__ = ["Runnable", "Supervisor", "WorkerFactory"]
