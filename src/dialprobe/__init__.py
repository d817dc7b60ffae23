"""
    dialprobe, a host-pinned HTTP liveness and latency probe.
    Copyright (C) 2025  Theori Inc.

    This program is free software: you can redistribute it and/or modify
    it under the terms of the GNU Affero General Public License as published
    by the Free Software Foundation, either version 3 of the License, or
    (at your option) any later version.

    This program is distributed in the hope that it will be useful,
    but WITHOUT ANY WARRANTY; without even the implied warranty of
    MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
    GNU Affero General Public License for more details.

    You should have received a copy of the GNU Affero General Public License
    along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""

"""
dialprobe package entrypoint.

Workers issue periodic GET requests against one fixed URL while every TCP
connection is dialed to a pinned override host. Connection open/close events
and one outcome line per probe are written to stdout through logging.
"""

from .config import ProbeSettings, Target, load_probe_settings
from .errors import ErrorCategory, InvalidWorkerCount, categorize_exception
from .http import DialingBackend, DialingTransport, ProbeOutcome, TrackedStream, create_probe_client
from .log import setup_logging
from .probe import Prober, Supervisor, Ticker, Worker, WorkerState

__all__ = [
    "DialingBackend",
    "DialingTransport",
    "ErrorCategory",
    "InvalidWorkerCount",
    "ProbeOutcome",
    "ProbeSettings",
    "Prober",
    "Supervisor",
    "Target",
    "Ticker",
    "TrackedStream",
    "Worker",
    "WorkerState",
    "categorize_exception",
    "create_probe_client",
    "load_probe_settings",
    "setup_logging",
]
