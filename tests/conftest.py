"""Shared fixtures and doubles for the scanner tests."""

import asyncio
from typing import Callable, Iterable, List, Optional, Union

import pytest

from httpsmuggler.config import ScannerConfig
from httpsmuggler.detectors.payloads import (
    TE_OBFUSCATIONS,
    build_cl_te_payload,
    build_normal_payload,
    build_te_cl_payload,
    build_te_te_payload,
)
from httpsmuggler.models import ProbeResponse, Target

OK_RESPONSE = b"HTTP/1.1 200 OK\r\nContent-Length: 0\r\nConnection: close\r\n\r\n"

Reply = Union[ProbeResponse, Exception]


class FakeSender:
    """Probe sender double.

    ``respond`` maps a payload to a ProbeResponse, or to an exception that is
    raised instead. Every call is recorded in ``calls`` as (host, payload).
    """

    def __init__(self, respond: Callable[[bytes], Reply]):
        self.respond = respond
        self.calls: List[tuple] = []

    async def __call__(self, host: str, port: int, use_tls: bool, payload: bytes, timeout: float) -> ProbeResponse:
        self.calls.append((host, payload))
        reply = self.respond(payload)
        if isinstance(reply, Exception):
            raise reply
        return reply

    @property
    def payloads(self) -> List[bytes]:
        return [payload for _, payload in self.calls]


def all_payloads(host: str) -> set:
    payloads = {
        build_cl_te_payload(host),
        build_te_cl_payload(host),
        build_normal_payload(host),
    }
    payloads.update(build_te_te_payload(host, o) for o in TE_OBFUSCATIONS)
    return payloads


async def read_payload(reader: asyncio.StreamReader, expected: Iterable[bytes], timeout: float = 2.0) -> bytes:
    """Read until the buffer equals one of ``expected`` or ``timeout`` passes."""
    expected = set(expected)
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    buf = bytearray()
    while bytes(buf) not in expected:
        remaining = deadline - loop.time()
        if remaining <= 0:
            break
        try:
            chunk = await asyncio.wait_for(reader.read(65536), timeout=remaining)
        except asyncio.TimeoutError:
            break
        if not chunk:
            break
        buf.extend(chunk)
    return bytes(buf)


async def finish(writer: asyncio.StreamWriter, data: Optional[bytes] = None) -> None:
    try:
        if data:
            writer.write(data)
            await writer.drain()
        writer.close()
        await writer.wait_closed()
    except OSError:
        pass


async def start_backend(handler, ssl=None) -> tuple:
    """Start a local back-end on an ephemeral port; returns (server, port)."""
    server = await asyncio.start_server(handler, '127.0.0.1', 0, ssl=ssl)
    port = server.sockets[0].getsockname()[1]
    return server, port


@pytest.fixture
def config() -> ScannerConfig:
    return ScannerConfig(timeout=5.0, threads=2)


@pytest.fixture
def target() -> Target:
    return Target(url="https://example.com/", host="example.com", port=443, use_tls=True)
