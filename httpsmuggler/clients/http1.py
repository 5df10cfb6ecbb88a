"""
Raw HTTP/1.1 probe client.

This module provides a low-level client that writes arbitrary bytes to a
target and reads back whatever it answers, without any attempt to parse or
frame the exchange. Ambiguous requests are the whole point, so nothing here
validates the payload.
"""

import asyncio
import time

from httpsmuggler.clients.base import BaseClient
from httpsmuggler.models import ProbeResponse
from httpsmuggler.utils import tls
from httpsmuggler.utils.logging import get_logger, log_probe, log_probe_response

READ_SIZE = 8192
CLOSE_TIMEOUT = 1.0


class HTTP1Client(BaseClient):
    """Single-use raw client over TCP or TLS.

    Features:
    - Raw TCP & TLS sockets using asyncio streams
    - Certificate verification disabled, ALPN pinned to http/1.1
    - One deadline shared by the write and the read
    - Read deadline treated as the end of a valid response
    """

    def __init__(
        self,
        host: str,
        port: int,
        use_tls: bool = True,
        timeout: float = 15.0,
        verify_ssl: bool = False,
    ) -> None:
        super().__init__(host, port, use_tls, timeout)
        self.verify_ssl = verify_ssl
        self.logger = get_logger()

        if self.use_tls:
            self.ssl_context = tls.get_http1_ssl_context(verify=verify_ssl)

    async def connect(self) -> None:
        """Establish a connection to the target server.

        Raises:
            ConnectionError: If the connection or TLS handshake fails or times out
        """
        if self._connected:
            return

        try:
            self.logger.debug(f"Connecting to {self.host}:{self.port} ({'HTTPS' if self.use_tls else 'HTTP'})")
            self._reader, self._writer = await asyncio.wait_for(
                asyncio.open_connection(
                    self.host,
                    self.port,
                    ssl=self.ssl_context if self.use_tls else None,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            raise ConnectionError(f"Connection to {self.host}:{self.port} timed out")
        except (OSError, UnicodeError) as e:
            # UnicodeError: host names that fail IDNA encoding
            raise ConnectionError(f"Failed to connect to {self.host}:{self.port}: {e}") from e

        self._connected = True
        if self.use_tls:
            protocol = tls.get_negotiated_protocol(self._writer.get_extra_info('ssl_object'))
            if protocol:
                self.logger.debug(f"Negotiated protocol: {protocol}")

    async def close(self) -> None:
        """Close the connection to the target server."""
        if not self._connected or not self._writer:
            return

        try:
            self._writer.close()
            await asyncio.wait_for(self._writer.wait_closed(), timeout=CLOSE_TIMEOUT)
        except asyncio.TimeoutError:
            # Stalled peers never answer the TLS close_notify
            self.logger.debug(f"Close timed out, aborting connection to {self.host}:{self.port}")
            self._writer.transport.abort()
        except OSError as e:
            self.logger.debug(f"Error closing connection: {e}")
        finally:
            self._connected = False
            self._reader = None
            self._writer = None

    async def send_raw(self, data: bytes, deadline: float) -> None:
        """Send raw bytes over the connection.

        Raises:
            ConnectionError: If the write fails or does not finish by ``deadline``
        """
        if not self._connected or not self._writer:
            raise ConnectionError("Not connected")

        remaining = deadline - asyncio.get_running_loop().time()
        try:
            self._writer.write(data)
            await asyncio.wait_for(self._writer.drain(), timeout=max(remaining, 0))
        except asyncio.TimeoutError:
            raise ConnectionError(f"Write to {self.host}:{self.port} timed out")
        except OSError as e:
            raise ConnectionError(f"Error sending data: {e}") from e

    async def receive_raw(self, deadline: float) -> bytes:
        """Read until the peer closes the connection or ``deadline`` passes.

        Hitting the deadline is not an error: a back-end that hangs waiting
        for more body bytes is exactly what the timing test looks for, so
        whatever arrived so far (possibly nothing) is returned.

        Raises:
            ConnectionError: On any I/O error other than the deadline
        """
        if not self._connected or not self._reader:
            raise ConnectionError("Not connected")

        loop = asyncio.get_running_loop()
        body = bytearray()
        while True:
            remaining = deadline - loop.time()
            if remaining <= 0:
                self.logger.debug(f"Read deadline reached after {len(body)} bytes")
                break
            try:
                chunk = await asyncio.wait_for(self._reader.read(READ_SIZE), timeout=remaining)
            except asyncio.TimeoutError:
                self.logger.debug(f"Read deadline reached after {len(body)} bytes")
                break
            except OSError as e:
                raise ConnectionError(f"Error receiving data: {e}") from e
            if not chunk:
                break
            body.extend(chunk)

        return bytes(body)

    async def probe(self, payload: bytes) -> ProbeResponse:
        """Send one payload on a fresh connection and time the full exchange.

        Elapsed time runs from just before connecting to just after the read
        finishes. The connection is always closed afterwards.

        Raises:
            ConnectionError: If connecting, writing or reading fails
        """
        log_probe(self.logger, self.host, self.port, payload)
        start_time = time.monotonic()
        try:
            await self.connect()
            deadline = asyncio.get_running_loop().time() + self.timeout
            await self.send_raw(payload, deadline)
            raw = await self.receive_raw(deadline)
            elapsed = time.monotonic() - start_time
        finally:
            await self.close()

        response = ProbeResponse(raw=raw, elapsed=elapsed)
        log_probe_response(self.logger, response)
        return response


async def send_payload(
    host: str,
    port: int,
    use_tls: bool,
    payload: bytes,
    timeout: float,
) -> ProbeResponse:
    """Send ``payload`` to ``host:port`` once, on its own connection.

    There is no retry: exactly one attempt is made per call.

    Raises:
        ConnectionError: If the probe could not be delivered or read
    """
    client = HTTP1Client(host=host, port=port, use_tls=use_tls, timeout=timeout)
    return await client.probe(payload)
