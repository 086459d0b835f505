from __future__ import annotations

import urllib.parse


def parse_endpoint(value: str, *, scheme: str) -> tuple[str, int]:
    """Split a ``host:port`` endpoint, requiring an explicit port.

    IPv6 hosts must be bracketed (``[fd79::1]:4242``). Raises ``ValueError``
    with a short reason when the endpoint cannot be used.
    """
    text = value.strip()
    if not text or any(char.isspace() for char in text):
        raise ValueError("endpoint must be host:port")

    try:
        parts = urllib.parse.urlsplit(f"{scheme}://{text}")
        port = parts.port
    except ValueError as exc:
        raise ValueError(str(exc)) from exc

    if parts.path or parts.query or parts.fragment or "@" in parts.netloc:
        raise ValueError("endpoint must be host:port only")
    if not parts.hostname:
        raise ValueError("missing host")
    if port is None:
        raise ValueError("missing port")
    if port == 0:
        raise ValueError("port must be between 1 and 65535")
    return parts.hostname, port
