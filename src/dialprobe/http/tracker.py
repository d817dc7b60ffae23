# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Network stream decorator that reports when a pooled connection closes."""

from __future__ import annotations

import logging
import ssl
import typing

import httpcore

logger = logging.getLogger(__name__)


class TrackedStream(httpcore.NetworkStream):
    """
    Forwards I/O to the wrapped stream and logs its closure exactly once.

    The wrapper never owns the connection: httpcore's pool decides when to
    close it, and the underlying close error (if any) reaches the pool as-is.
    """

    def __init__(self, stream: httpcore.NetworkStream, address: str, prefix: str):
        self._stream = stream
        self.address = address
        self.prefix = prefix
        self._reported = False

    def read(self, max_bytes: int, timeout: float | None = None) -> bytes:
        return self._stream.read(max_bytes, timeout=timeout)

    def write(self, buffer: bytes, timeout: float | None = None) -> None:
        self._stream.write(buffer, timeout=timeout)

    def close(self) -> None:
        if not self._reported:
            self._reported = True
            logger.info("%s 🔌 CONNECTION CLOSED to %s", self.prefix, self.address)
        self._stream.close()

    def start_tls(
        self,
        ssl_context: ssl.SSLContext,
        server_hostname: str | None = None,
        timeout: float | None = None,
    ) -> httpcore.NetworkStream:
        try:
            upgraded = self._stream.start_tls(ssl_context, server_hostname=server_hostname, timeout=timeout)
        except Exception:
            # A failed handshake leaves no stream for the pool to close.
            self.close()
            raise
        # The pool only keeps the upgraded stream, so it inherits close reporting.
        self._reported = True
        return TrackedStream(upgraded, self.address, self.prefix)

    def get_extra_info(self, info: str) -> typing.Any:
        return self._stream.get_extra_info(info)


__all__ = ["TrackedStream"]
