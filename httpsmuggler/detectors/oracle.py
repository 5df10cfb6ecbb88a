"""
Verdict functions mapping probe observations to vulnerable / not vulnerable.

Two strategies exist: a timing comparison against a baseline request (CL.TE
and TE.CL) and a search for error markers in the raw response (TE.TE).
"""

from typing import Awaitable, Callable, Iterable, Optional, Tuple

from httpsmuggler.config import ScannerConfig
from httpsmuggler.detectors.payloads import build_normal_payload
from httpsmuggler.models import DetectionResult, ProbeResponse, SmugglingType, Target
from httpsmuggler.utils.logging import get_logger

TIMING_TECHNIQUE = "Time-based detection"
RESPONSE_TECHNIQUE = "Response analysis"

# (host, port, use_tls, payload, timeout) -> response; raises ConnectionError
ProbeSender = Callable[[str, int, bool, bytes, float], Awaitable[ProbeResponse]]


def classify_timing(probe_time: float, baseline_time: float, threshold: float) -> Tuple[bool, float]:
    """Compare a crafted probe against the baseline.

    Returns:
        ``(vulnerable, diff)``; vulnerable only when ``diff`` is strictly
        greater than ``threshold``
    """
    diff = probe_time - baseline_time
    return diff > threshold, diff


def match_response(text: str, markers: Iterable[str]) -> Optional[str]:
    """Return the first marker found in the raw response text, if any."""
    for marker in markers:
        if marker in text:
            return marker
    return None


async def timing_test(
    target: Target,
    smuggling_type: SmugglingType,
    payload: bytes,
    details: str,
    config: ScannerConfig,
    send: ProbeSender,
) -> DetectionResult:
    """Run the crafted probe, then the baseline, and compare elapsed times.

    A failed crafted probe ends the test as not vulnerable. A failed baseline
    is tolerated and counts as zero seconds.
    """
    logger = get_logger()
    result = DetectionResult(url=target.url, smuggling_type=smuggling_type)

    logger.debug(f"Testing {smuggling_type} on {target.url}")
    try:
        probe = await send(target.host, target.port, target.use_tls, payload, config.timeout)
    except ConnectionError as e:
        logger.debug(f"{smuggling_type} probe failed for {target.url}: {e}")
        return result

    baseline_time = 0.0
    try:
        baseline = await send(
            target.host, target.port, target.use_tls,
            build_normal_payload(target.host), config.timeout,
        )
        baseline_time = baseline.elapsed
    except ConnectionError as e:
        logger.debug(f"Baseline probe failed for {target.url}: {e}")

    vulnerable, diff = classify_timing(probe.elapsed, baseline_time, config.time_threshold)
    logger.debug(
        f"{smuggling_type} timing for {target.url}: probe {probe.elapsed:.3f}s, "
        f"baseline {baseline_time:.3f}s, diff {diff:.3f}s"
    )
    if vulnerable:
        result.mark_vulnerable(TIMING_TECHNIQUE, details, time_diff=diff)
    return result
