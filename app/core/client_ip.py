"""Client address extraction used as the default rate limit key."""

from __future__ import annotations

from typing import Any

UNKNOWN_CLIENT = "unknown"

# Checked in order; the first non-blank value wins.
FORWARDING_HEADERS = ("x-forwarded-for", "x-real-ip", "x-client-ip")


def _first_entry(header: str, value: str) -> str:
    if header == "x-forwarded-for":
        # Proxies append hops, so the original client comes first.
        return value.split(",")[0].strip()
    return value.strip()


def get_client_ip(request: Any) -> str:
    """Derive the client address from proxy headers or the connection.

    Works with a Starlette ``Request`` or any object exposing
    ``headers.get(name)`` and an optional ``client.host``.

    Args:
        request: Inbound request-like object.

    Returns:
        Client address, or "unknown" when nothing identifies the caller.

    Examples:
        >>> from types import SimpleNamespace
        >>> get_client_ip(SimpleNamespace(headers={"x-forwarded-for": "1.2.3.4, 5.6.7.8"}))
        '1.2.3.4'
        >>> get_client_ip(SimpleNamespace(headers={}, client=None))
        'unknown'
    """

    headers = getattr(request, "headers", None) or {}
    for header in FORWARDING_HEADERS:
        value = headers.get(header)
        if value:
            address = _first_entry(header, value)
            if address:
                return address

    client = getattr(request, "client", None)
    host = getattr(client, "host", None) if client is not None else None
    return host or UNKNOWN_CLIENT
