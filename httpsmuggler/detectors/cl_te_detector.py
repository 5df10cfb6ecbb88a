"""
Detector for CL.TE HTTP request smuggling vulnerabilities.

Sends a request with both Content-Length and Transfer-Encoding whose body
ends in one stray byte after the chunked terminator, then compares its
response time against an unambiguous baseline request.
"""

from httpsmuggler.clients.http1 import send_payload
from httpsmuggler.config import ScannerConfig
from httpsmuggler.detectors.oracle import ProbeSender, timing_test
from httpsmuggler.detectors.payloads import build_cl_te_payload
from httpsmuggler.models import DetectionResult, SmugglingType, Target

DETAILS = "Backend appears to wait for more data (Transfer-Encoding processing)"


async def test_cl_te(
    target: Target,
    config: ScannerConfig,
    send: ProbeSender = send_payload,
) -> DetectionResult:
    """Test a target for CL.TE using the time-delay technique.

    Args:
        target: Parsed target
        config: Scanner settings (timeout, threshold)
        send: Probe transport

    Returns:
        The detection result, vulnerable or not
    """
    return await timing_test(
        target,
        SmugglingType.CL_TE,
        build_cl_te_payload(target.host),
        DETAILS,
        config,
        send,
    )
