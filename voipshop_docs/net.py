"""Network-related helpers for the local HTTP server."""

from __future__ import annotations

import errno
from typing import Any

DISCONNECT_ERRNOS = {
    errno.EPIPE,
    errno.ECONNRESET,
    errno.ECONNABORTED,
    errno.ETIMEDOUT,
}
if hasattr(errno, "WSAECONNRESET"):
    DISCONNECT_ERRNOS.add(errno.WSAECONNRESET)  # pragma: no cover


def is_client_disconnect(exc: BaseException) -> bool:
    """True when ``exc`` means the peer went away mid-request."""
    if isinstance(exc, (BrokenPipeError, ConnectionResetError, ConnectionAbortedError, TimeoutError)):
        return True
    return isinstance(exc, OSError) and exc.errno in DISCONNECT_ERRNOS


def peer_host(client_address: Any) -> str:
    """Host part of a socket peer address; ``""`` for anything unexpected."""
    if isinstance(client_address, (tuple, list)) and client_address:
        return str(client_address[0])
    if isinstance(client_address, str):
        return client_address
    return ""
