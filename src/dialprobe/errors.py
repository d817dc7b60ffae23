# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import socket
import ssl as ssl_module
from enum import Enum

import httpcore
import httpx


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    SSL_ERROR = "SSL_ERROR"
    DNS_ERROR = "DNS_ERROR"
    PROTOCOL_ERROR = "PROTOCOL_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class InvalidWorkerCount(ValueError):
    """Worker count argument is not a positive integer."""

    def __init__(self, raw: object):
        super().__init__(f"Invalid number of workers: {raw}")
        self.raw = raw


def _root_cause(exc: BaseException) -> BaseException:
    seen = set()
    current: BaseException = exc
    while id(current) not in seen:
        seen.add(id(current))
        nxt = current.__cause__ or current.__context__
        if nxt is None:
            break
        current = nxt
    return current


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map httpx/httpcore/socket exceptions raised during a probe to ErrorCategory.
    """
    cause = _root_cause(exc)

    if isinstance(cause, (ssl_module.SSLError, ssl_module.CertificateError)):
        return ErrorCategory.SSL_ERROR

    if isinstance(cause, socket.gaierror):
        return ErrorCategory.DNS_ERROR

    if isinstance(exc, (httpx.TimeoutException, httpcore.TimeoutException)) or isinstance(cause, TimeoutError):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, (httpx.RemoteProtocolError, httpx.LocalProtocolError, httpcore.ProtocolError)):
        return ErrorCategory.PROTOCOL_ERROR

    if isinstance(exc, (httpx.NetworkError, httpcore.NetworkError)):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(cause, (ConnectionError, OSError)):
        return ErrorCategory.CONNECTION_ERROR

    return ErrorCategory.UNKNOWN_ERROR


__all__ = ["ErrorCategory", "InvalidWorkerCount", "categorize_exception"]
