# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Fixed probe configuration for dialprobe."""

from __future__ import annotations

from dataclasses import dataclass, field

import httpx

TARGET_URL = "https://aga-degradation.pacnw.xyz/test_50kb.bin"
HOST_OVERRIDE = "alias-icn1.vercel.com"
TRACE_HEADER = "x-vercel-id"


@dataclass(frozen=True)
class Target:
    """URL to request and the host every connection is dialed to instead."""

    url: str = TARGET_URL
    host_override: str = HOST_OVERRIDE


@dataclass(frozen=True)
class ProbeSettings:
    """Compiled-in timing, pooling and target settings shared by every worker."""

    target: Target = field(default_factory=Target)
    trace_header: str = TRACE_HEADER
    connect_timeout: float = 10.0
    request_timeout: float = 10.0
    keepalive_interval: float = 30.0
    probe_interval: float = 1.0
    worker_stagger: float = 0.147
    idle_timeout: float = 10.0
    max_idle_conns: int = 1
    max_idle_conns_per_host: int = 1
    max_conns_per_host: int = 1
    verify_ssl: bool = True
    default_workers: int = 1

    def pool_limits(self) -> httpx.Limits:
        # Each worker talks to a single destination, so the per-host and
        # overall limits collapse onto the same pool.
        return httpx.Limits(
            max_connections=self.max_conns_per_host,
            max_keepalive_connections=min(self.max_idle_conns, self.max_idle_conns_per_host),
            keepalive_expiry=self.idle_timeout,
        )

    def timeouts(self) -> httpx.Timeout:
        return httpx.Timeout(self.request_timeout, connect=self.connect_timeout)


def load_probe_settings() -> ProbeSettings:
    """Return the compiled-in probe settings."""
    return ProbeSettings()
