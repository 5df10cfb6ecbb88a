"""
TLS utilities for the probe client.

This module provides helper functions for setting up TLS connections
to targets whose certificates are irrelevant to the test.
"""

import ssl
from typing import Optional


def create_ssl_context(
    alpn_protocols: Optional[list[str]] = None,
    verify: bool = False,
) -> ssl.SSLContext:
    """Create an SSL context for probe connections.

    Args:
        alpn_protocols: List of ALPN protocols to advertise (e.g., ['http/1.1'])
        verify: Whether to verify server certificates

    Returns:
        Configured SSL context
    """
    context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)

    if not verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE

    if alpn_protocols:
        context.set_alpn_protocols(alpn_protocols)

    return context


def get_http1_ssl_context(verify: bool = False) -> ssl.SSLContext:
    """Get an SSL context that only offers HTTP/1.1 via ALPN."""
    return create_ssl_context(alpn_protocols=['http/1.1'], verify=verify)


def get_negotiated_protocol(ssl_object: Optional[ssl.SSLObject]) -> Optional[str]:
    """Get the negotiated ALPN protocol from an SSL object, if any."""
    if ssl_object is None:
        return None
    try:
        return ssl_object.selected_alpn_protocol()
    except AttributeError:
        return None
