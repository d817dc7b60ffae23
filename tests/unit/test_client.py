# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging
import socket
import threading

import httpcore
import httpx
import pytest

from dialprobe.config import ProbeSettings, Target
from dialprobe.errors import ErrorCategory
from dialprobe.http.client import MAX_REDIRECTS, DialingTransport, create_probe_client, map_httpcore_exceptions
from dialprobe.http.dialer import DialingBackend
from dialprobe.probe.prober import Prober

BODY = b"x" * 2048
RESPONSE = (
    b"HTTP/1.1 200 OK\r\n"
    b"Content-Length: 2048\r\n"
    b"x-vercel-id: icn1::abcde-123\r\n"
    b"\r\n" + BODY
)
REDIRECT = (
    b"HTTP/1.1 301 Moved Permanently\r\n"
    b"Location: /final\r\n"
    b"Content-Length: 0\r\n"
    b"\r\n"
)


class CountingBackend(httpcore.MockBackend):
    def __init__(self, buffer):
        super().__init__(buffer)
        self.dials = []

    def connect_tcp(self, host, port, timeout=None, local_address=None, socket_options=None):
        self.dials.append((host, port))
        return super().connect_tcp(host, port, timeout=timeout, local_address=local_address, socket_options=socket_options)


def _settings(url="http://probe.example.com:8080/test_50kb.bin", host_override="203.0.113.7"):
    return ProbeSettings(target=Target(url=url, host_override=host_override))


@pytest.fixture
def plaintext_server():
    """A TCP listener on 127.0.0.1 that answers every connection in cleartext."""
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(("127.0.0.1", 0))
    listener.listen(4)
    listener.settimeout(5.0)

    def serve():
        try:
            conn, _ = listener.accept()
        except OSError:
            return
        with conn:
            conn.sendall(b"HTTP/1.1 400 Bad Request\r\nContent-Length: 0\r\n\r\n")
            conn.settimeout(5.0)
            try:
                conn.recv(1024)
            except OSError:
                pass

    thread = threading.Thread(target=serve, daemon=True)
    thread.start()
    yield listener.getsockname()[1]
    listener.close()
    thread.join(timeout=5.0)


def test_client_applies_pool_limits_and_dialing_backend():
    settings = _settings()
    client = create_probe_client(settings, "[G1]", backend=CountingBackend([]))
    try:
        transport = client._transport
        assert isinstance(transport, DialingTransport)
        assert isinstance(transport.network_backend, DialingBackend)
        assert isinstance(transport.pool, httpcore.ConnectionPool)
        assert transport.network_backend.host_override == "203.0.113.7"
        assert client.follow_redirects is True
        assert client.max_redirects == MAX_REDIRECTS
        assert client.timeout.connect == settings.connect_timeout
    finally:
        client.close()


def test_pool_limits_mirror_settings():
    limits = ProbeSettings().pool_limits()
    assert limits.max_connections == 1
    assert limits.max_keepalive_connections == 1
    assert limits.keepalive_expiry == 10.0


def test_requests_dial_override_host_with_url_port():
    backend = CountingBackend([RESPONSE])
    with create_probe_client(_settings(), "[G1]", backend=backend) as client:
        resp = client.get("http://probe.example.com:8080/test_50kb.bin")

    assert resp.status_code == 200
    assert resp.content == BODY
    assert resp.request.headers["host"] == "probe.example.com:8080"
    assert backend.dials == [("203.0.113.7", 8080)]


def test_back_to_back_requests_reuse_pooled_connection(caplog):
    caplog.set_level(logging.INFO)
    backend = CountingBackend([RESPONSE, RESPONSE])
    client = create_probe_client(_settings(), "[G1]", backend=backend)

    for _ in range(2):
        with client.stream("GET", "http://probe.example.com:8080/test_50kb.bin") as resp:
            assert sum(len(chunk) for chunk in resp.iter_bytes()) == len(BODY)

    opened = [r for r in caplog.records if "NEW CONNECTION" in r.getMessage()]
    assert len(backend.dials) == 1
    assert len(opened) == 1

    client.close()
    closed = [r for r in caplog.records if "CONNECTION CLOSED to 203.0.113.7:8080" in r.getMessage()]
    assert len(closed) == 1


def test_redirects_are_followed_to_final_response():
    settings = _settings()
    backend = CountingBackend([REDIRECT, RESPONSE])
    with create_probe_client(settings, "[G1]", backend=backend) as client:
        outcome = Prober(client, settings, "[G1]").probe()

    assert outcome.status_code == 200
    assert outcome.bytes_read == len(BODY)
    assert outcome.header_value == "icn1::abcde-123"
    assert backend.dials == [("203.0.113.7", 8080)]


def test_httpcore_errors_become_httpx_errors():
    cause = ConnectionRefusedError(111, "Connection refused")
    with pytest.raises(httpx.ConnectError) as excinfo:
        with map_httpcore_exceptions():
            raise httpcore.ConnectError(str(cause)) from cause

    assert isinstance(excinfo.value.__cause__, httpcore.ConnectError)

    with pytest.raises(httpx.ReadTimeout):
        with map_httpcore_exceptions():
            raise httpcore.ReadTimeout("timed out")

    with pytest.raises(ValueError):
        with map_httpcore_exceptions():
            raise ValueError("not a transport error")


def test_failed_tls_handshake_is_reported_as_ssl_error_and_closed(plaintext_server, caplog):
    caplog.set_level(logging.INFO)
    settings = _settings(url=f"https://probe.example.com:{plaintext_server}/test_50kb.bin", host_override="127.0.0.1")

    with create_probe_client(settings, "[G1]") as client:
        outcome = Prober(client, settings, "[G1]").probe()

    assert outcome.status_code is None
    assert outcome.error_category is ErrorCategory.SSL_ERROR
    messages = [r.getMessage() for r in caplog.records]
    assert len([m for m in messages if f"NEW CONNECTION established to 127.0.0.1:{plaintext_server}" in m]) == 1
    assert len([m for m in messages if f"CONNECTION CLOSED to 127.0.0.1:{plaintext_server}" in m]) == 1
