"""High-level scan orchestration."""

from __future__ import annotations

import asyncio
import urllib.parse
from typing import Callable, Iterable, List, Optional

from httpsmuggler.clients.http1 import send_payload
from httpsmuggler.config import ScannerConfig
from httpsmuggler.detectors import cl_te_detector, te_cl_detector, te_te_detector
from httpsmuggler.detectors.oracle import ProbeSender
from httpsmuggler.models import DetectionResult, Target
from httpsmuggler.utils.logging import get_logger

FindingCallback = Callable[[DetectionResult], None]


class InvalidTargetError(ValueError):
    """Raised when a target URL cannot be scanned."""


def _host_from_netloc(netloc: str) -> str:
    # urlsplit().hostname lowercases
    hostinfo = netloc.rpartition('@')[2]
    if hostinfo.startswith('['):
        return hostinfo[1:hostinfo.index(']')]
    return hostinfo.partition(':')[0]


def parse_target(url: str) -> Target:
    """Parse a target URL into host, port and TLS flag.

    Only http and https are accepted; the port defaults to 443 for https and
    80 for http. The host keeps its original case because it is sent
    verbatim in the Host header.

    Raises:
        InvalidTargetError: If the URL is malformed or uses another scheme
    """
    try:
        parsed_url = urllib.parse.urlsplit(url.strip())
        port = parsed_url.port
    except ValueError as e:
        raise InvalidTargetError(f"Invalid URL {url!r}: {e}") from e

    scheme = parsed_url.scheme.lower()
    if scheme not in ('http', 'https'):
        raise InvalidTargetError(f"Invalid URL scheme {scheme!r} in {url!r}. Must be http or https.")

    if not parsed_url.hostname:
        raise InvalidTargetError(f"Invalid URL {url!r}: missing host")
    host = _host_from_netloc(parsed_url.netloc)

    use_tls = scheme == 'https'
    if port is None:
        port = 443 if use_tls else 80

    return Target(url=url, host=host, port=port, use_tls=use_tls)


class Scanner:
    """Runs the three desync tests against one or many targets.

    Args:
        config: Shared, read-only scanner settings
        send: Probe transport, replaceable for tests
        on_finding: Called once per finding as soon as it is aggregated
    """

    def __init__(
        self,
        config: ScannerConfig,
        send: ProbeSender = send_payload,
        on_finding: Optional[FindingCallback] = None,
    ) -> None:
        self.config = config
        self.send = send
        self.on_finding = on_finding
        self.logger = get_logger()

    async def scan_url(self, url: str) -> List[DetectionResult]:
        """Run CL.TE, TE.CL and TE.TE against one URL.

        Each test runs even if an earlier one failed to connect. An invalid
        URL yields no findings and sends no probes.

        Returns:
            The vulnerable results only, in test order
        """
        try:
            target = parse_target(url)
        except InvalidTargetError as e:
            self.logger.warning(str(e))
            return []

        findings = []
        for detector in (
            cl_te_detector.test_cl_te,
            te_cl_detector.test_te_cl,
            te_te_detector.test_te_te,
        ):
            result = await detector(target, self.config, self.send)
            if result.vulnerable:
                findings.append(result)
        return findings

    async def scan_urls(self, urls: Iterable[str]) -> List[DetectionResult]:
        """Scan many URLs with at most ``config.threads`` in flight.

        Tasks hand their findings to a queue drained by a single consumer,
        which owns the aggregate list and reports each finding immediately.
        Returns only after every task and the consumer have finished.
        """
        semaphore = asyncio.Semaphore(self.config.threads)
        queue: asyncio.Queue = asyncio.Queue()
        results: List[DetectionResult] = []

        consumer = asyncio.create_task(self._consume(queue, results))
        try:
            await asyncio.gather(*(self._bounded_scan(url, semaphore, queue) for url in urls))
        finally:
            await queue.put(None)
            await consumer

        return results

    async def _bounded_scan(
        self,
        url: str,
        semaphore: asyncio.Semaphore,
        queue: asyncio.Queue,
    ) -> None:
        async with semaphore:
            try:
                findings = await self.scan_url(url)
            except Exception:
                self.logger.exception(f"Unexpected error while scanning {url}")
                findings = []
        await queue.put(findings)

    async def _consume(self, queue: asyncio.Queue, results: List[DetectionResult]) -> None:
        while True:
            findings = await queue.get()
            if findings is None:
                break
            for finding in findings:
                results.append(finding)
                if self.on_finding:
                    try:
                        self.on_finding(finding)
                    except Exception:
                        self.logger.exception(f"Error reporting finding for {finding.url}")
