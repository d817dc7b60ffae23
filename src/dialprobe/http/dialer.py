# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Connection establishment with a fixed host override.

`DialingBackend` sits between httpcore's connection pool and the socket
layer. Every TCP dial keeps the port the pool asked for but connects to the
override host, so TLS SNI and the Host header still carry the URL's hostname
while the socket lands on a pinned edge.
"""

from __future__ import annotations

import logging
import socket
import typing

import httpcore

from .tracker import TrackedStream

logger = logging.getLogger(__name__)

IPV4_ANY = "0.0.0.0"

SocketOption = typing.Union[
    typing.Tuple[int, int, int],
    typing.Tuple[int, int, typing.Union[bytes, bytearray]],
    typing.Tuple[int, int, None, int],
]


def split_host_port(address: str) -> tuple[str, int]:
    """Split ``host:port`` (or ``[v6]:port``) into its parts."""
    if address.startswith("["):
        end = address.find("]")
        if end == -1 or address[end + 1 : end + 2] != ":":
            raise ValueError(f"address {address!r}: missing port in address")
        host, port_text = address[1:end], address[end + 2 :]
    else:
        host, sep, port_text = address.rpartition(":")
        if not sep:
            raise ValueError(f"address {address!r}: missing port in address")
        if ":" in host:
            raise ValueError(f"address {address!r}: too many colons in address")
    try:
        port = int(port_text)
    except ValueError:
        raise ValueError(f"address {address!r}: invalid port") from None
    if not 0 <= port <= 65535:
        raise ValueError(f"address {address!r}: invalid port")
    return host, port


def join_host_port(host: str, port: int) -> str:
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def keepalive_socket_options(interval: float) -> list[SocketOption]:
    """SO_KEEPALIVE plus probe timing where the platform exposes it."""
    seconds = max(1, int(interval))
    options: list[SocketOption] = [(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)]
    for name in ("TCP_KEEPIDLE", "TCP_KEEPINTVL"):
        opt = getattr(socket, name, None)
        if opt is not None:
            options.append((socket.IPPROTO_TCP, opt, seconds))
    return options


class DialingBackend(httpcore.NetworkBackend):
    """httpcore network backend that redirects TCP dials to a fixed host."""

    def __init__(
        self,
        host_override: str,
        prefix: str,
        *,
        connect_timeout: float,
        keepalive_interval: float,
        backend: httpcore.NetworkBackend | None = None,
    ):
        self.host_override = host_override
        self.prefix = prefix
        self.connect_timeout = connect_timeout
        self.keepalive_interval = keepalive_interval
        self._backend = backend or httpcore.SyncBackend()

    def resolve_address(self, host: str, port: int) -> str:
        address = join_host_port(host, port)
        if self.host_override:
            _, original_port = split_host_port(address)
            address = join_host_port(self.host_override, original_port)
        return address

    def connect_tcp(
        self,
        host: str,
        port: int,
        timeout: float | None = None,
        local_address: str | None = None,
        socket_options: typing.Iterable[SocketOption] | None = None,
    ) -> httpcore.NetworkStream:
        try:
            address = self.resolve_address(host, port)
            dial_host, dial_port = split_host_port(address)
        except ValueError as exc:
            raise httpcore.ConnectError(str(exc)) from exc
        options = list(socket_options or []) + keepalive_socket_options(self.keepalive_interval)

        stream = self._backend.connect_tcp(
            dial_host,
            dial_port,
            timeout=self.connect_timeout if timeout is None else timeout,
            # Binding the local side to the IPv4 wildcard restricts the dial to IPv4.
            local_address=local_address or IPV4_ANY,
            socket_options=options,
        )
        logger.info("%s 🔗 NEW CONNECTION established to %s", self.prefix, address)
        return TrackedStream(stream, address, self.prefix)

    def connect_unix_socket(
        self,
        path: str,
        timeout: float | None = None,
        socket_options: typing.Iterable[SocketOption] | None = None,
    ) -> httpcore.NetworkStream:  # pragma: no cover - probes never use unix sockets
        raise NotImplementedError("dialprobe only dials TCP")

    def sleep(self, seconds: float) -> None:
        self._backend.sleep(seconds)


__all__ = ["DialingBackend", "join_host_port", "keepalive_socket_options", "split_host_port"]
