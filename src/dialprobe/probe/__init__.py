# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Probing engine: prober, worker loop and supervisor."""

from .prober import Prober
from .supervisor import Supervisor
from .worker import Ticker, Worker, WorkerState

__all__ = ["Prober", "Supervisor", "Ticker", "Worker", "WorkerState"]
