# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP layer exports."""

from .client import DialingTransport, create_probe_client
from .dialer import DialingBackend, join_host_port, keepalive_socket_options, split_host_port
from .models import HEADER_NOT_FOUND, ProbeOutcome
from .tracker import TrackedStream

__all__ = [
    "HEADER_NOT_FOUND",
    "DialingBackend",
    "DialingTransport",
    "ProbeOutcome",
    "TrackedStream",
    "create_probe_client",
    "join_host_port",
    "keepalive_socket_options",
    "split_host_port",
]
