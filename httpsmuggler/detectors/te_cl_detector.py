"""
Detector for TE.CL HTTP request smuggling vulnerabilities.

Sends a chunked body that hides a second request behind a short
Content-Length, then compares its response time against an unambiguous
baseline request.
"""

from httpsmuggler.clients.http1 import send_payload
from httpsmuggler.config import ScannerConfig
from httpsmuggler.detectors.oracle import ProbeSender, timing_test
from httpsmuggler.detectors.payloads import build_te_cl_payload
from httpsmuggler.models import DetectionResult, SmugglingType, Target

DETAILS = "Backend appears to use Content-Length while frontend uses Transfer-Encoding"


async def test_te_cl(
    target: Target,
    config: ScannerConfig,
    send: ProbeSender = send_payload,
) -> DetectionResult:
    """Test a target for TE.CL using the time-delay technique."""
    return await timing_test(
        target,
        SmugglingType.TE_CL,
        build_te_cl_payload(target.host),
        DETAILS,
        config,
        send,
    )
