# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx client factory with host-override dialing and a single-connection pool."""

from __future__ import annotations

import contextlib
import typing

import httpcore
import httpx

from ..config import ProbeSettings, load_probe_settings
from .dialer import DialingBackend

MAX_REDIRECTS = 10

_EXCEPTION_MAP: dict[type[Exception], type[httpx.TransportError]] = {
    httpcore.TimeoutException: httpx.TimeoutException,
    httpcore.ConnectTimeout: httpx.ConnectTimeout,
    httpcore.ReadTimeout: httpx.ReadTimeout,
    httpcore.WriteTimeout: httpx.WriteTimeout,
    httpcore.PoolTimeout: httpx.PoolTimeout,
    httpcore.NetworkError: httpx.NetworkError,
    httpcore.ConnectError: httpx.ConnectError,
    httpcore.ReadError: httpx.ReadError,
    httpcore.WriteError: httpx.WriteError,
    httpcore.ProxyError: httpx.ProxyError,
    httpcore.UnsupportedProtocol: httpx.UnsupportedProtocol,
    httpcore.ProtocolError: httpx.ProtocolError,
    httpcore.LocalProtocolError: httpx.LocalProtocolError,
    httpcore.RemoteProtocolError: httpx.RemoteProtocolError,
}


@contextlib.contextmanager
def map_httpcore_exceptions() -> typing.Iterator[None]:
    """Re-raise httpcore failures as the matching (most specific) httpx exception."""
    try:
        yield
    except Exception as exc:
        mapped: type[httpx.TransportError] | None = None
        for from_exc, to_exc in _EXCEPTION_MAP.items():
            if isinstance(exc, from_exc) and (mapped is None or issubclass(to_exc, mapped)):
                mapped = to_exc
        if mapped is None:
            raise
        raise mapped(str(exc)) from exc


class _PoolByteStream(httpx.SyncByteStream):
    def __init__(self, stream: typing.Iterable[bytes]):
        self._stream = stream

    def __iter__(self) -> typing.Iterator[bytes]:
        with map_httpcore_exceptions():
            yield from self._stream

    def close(self) -> None:
        if hasattr(self._stream, "close"):
            self._stream.close()


class DialingTransport(httpx.BaseTransport):
    """HTTP/1.1 transport whose pool dials every connection through `network_backend`."""

    def __init__(
        self,
        network_backend: httpcore.NetworkBackend,
        *,
        verify: bool = True,
        limits: httpx.Limits | None = None,
    ):
        limits = limits or httpx.Limits()
        self.network_backend = network_backend
        self.pool = httpcore.ConnectionPool(
            ssl_context=httpx.create_ssl_context(verify=verify),
            max_connections=limits.max_connections,
            max_keepalive_connections=limits.max_keepalive_connections,
            keepalive_expiry=limits.keepalive_expiry,
            http1=True,
            http2=False,
            retries=0,
            network_backend=network_backend,
        )

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        assert isinstance(request.stream, httpx.SyncByteStream)

        core_request = httpcore.Request(
            method=request.method,
            url=httpcore.URL(
                scheme=request.url.raw_scheme,
                host=request.url.raw_host,
                port=request.url.port,
                target=request.url.raw_path,
            ),
            headers=request.headers.raw,
            content=request.stream,
            extensions=request.extensions,
        )
        with map_httpcore_exceptions():
            core_response = self.pool.handle_request(core_request)

        assert isinstance(core_response.stream, typing.Iterable)
        return httpx.Response(
            status_code=core_response.status,
            headers=core_response.headers,
            stream=_PoolByteStream(core_response.stream),
            extensions=core_response.extensions,
        )

    def close(self) -> None:
        self.pool.close()


def create_probe_client(
    settings: ProbeSettings | None = None,
    prefix: str = "",
    *,
    backend: httpcore.NetworkBackend | None = None,
) -> httpx.Client:
    """Build the per-worker httpx client; `backend` replaces the real socket layer."""
    settings = settings or load_probe_settings()
    dialing_backend = DialingBackend(
        settings.target.host_override,
        prefix,
        connect_timeout=settings.connect_timeout,
        keepalive_interval=settings.keepalive_interval,
        backend=backend,
    )
    transport = DialingTransport(
        dialing_backend,
        verify=settings.verify_ssl,
        limits=settings.pool_limits(),
    )
    return httpx.Client(
        transport=transport,
        timeout=settings.timeouts(),
        follow_redirects=True,
        max_redirects=MAX_REDIRECTS,
    )


__all__ = ["MAX_REDIRECTS", "DialingTransport", "create_probe_client", "map_httpcore_exceptions"]
