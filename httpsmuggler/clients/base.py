"""
Base client interface for probe clients.

This module defines the abstract base class that probe clients implement.
"""

from abc import ABC, abstractmethod
from typing import Optional
import asyncio
import ssl

from httpsmuggler.models import ProbeResponse


class BaseClient(ABC):
    """Abstract base class for raw probe clients.

    A client owns at most one connection and is meant to be used for a
    single probe, so timing measurements never share socket state.
    """

    def __init__(
        self,
        host: str,
        port: int,
        use_tls: bool = True,
        timeout: float = 15.0,
    ) -> None:
        """Initialize a new probe client.

        Args:
            host: Target hostname or IP address
            port: Target port
            use_tls: Whether to wrap the connection in TLS
            timeout: Seconds allowed for connecting, and again for write + read
        """
        self.host = host
        self.port = port
        self.use_tls = use_tls
        self.timeout = timeout
        self.ssl_context: Optional[ssl.SSLContext] = None
        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None
        self._connected = False

    @abstractmethod
    async def connect(self) -> None:
        """Establish a connection to the target server."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the connection to the target server."""
        pass

    @abstractmethod
    async def send_raw(self, data: bytes, deadline: float) -> None:
        """Write raw bytes, finishing before the loop time ``deadline``."""
        pass

    @abstractmethod
    async def receive_raw(self, deadline: float) -> bytes:
        """Read until the peer closes or the loop time ``deadline`` passes."""
        pass

    @abstractmethod
    async def probe(self, payload: bytes) -> ProbeResponse:
        """Connect, send ``payload``, read the full response and time it all."""
        pass

    @property
    def is_connected(self) -> bool:
        """Return whether the client is currently connected."""
        return self._connected
