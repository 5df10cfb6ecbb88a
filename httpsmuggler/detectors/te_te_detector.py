"""
Detector for TE.TE HTTP request smuggling vulnerabilities.

Tries a fixed list of Transfer-Encoding obfuscations and looks for an error
marker in the raw response, which suggests one of the two servers did not
recognise the obfuscated header as chunked.
"""

from httpsmuggler.clients.http1 import send_payload
from httpsmuggler.config import ScannerConfig
from httpsmuggler.detectors.oracle import RESPONSE_TECHNIQUE, ProbeSender, match_response
from httpsmuggler.detectors.payloads import TE_OBFUSCATIONS, build_te_te_payload
from httpsmuggler.models import DetectionResult, SmugglingType, Target, escape_header
from httpsmuggler.utils.logging import get_logger


async def test_te_te(
    target: Target,
    config: ScannerConfig,
    send: ProbeSender = send_payload,
) -> DetectionResult:
    """Test a target for TE.TE using response analysis.

    Variants are tried in order and the first matching response ends the
    test, so at most one obfuscation is ever reported. A variant whose probe
    fails is skipped.

    Args:
        target: Parsed target
        config: Scanner settings (timeout, response markers)
        send: Probe transport

    Returns:
        The detection result, vulnerable or not
    """
    logger = get_logger()
    result = DetectionResult(url=target.url, smuggling_type=SmugglingType.TE_TE)

    logger.debug(f"Testing TE.TE obfuscations on {target.url}")
    for i, obfuscation in enumerate(TE_OBFUSCATIONS):
        payload = build_te_te_payload(target.host, obfuscation)
        try:
            response = await send(target.host, target.port, target.use_tls, payload, config.timeout)
        except ConnectionError as e:
            logger.debug(f"TE.TE variant {i + 1} failed for {target.url}: {e}")
            continue

        marker = match_response(response.text, config.response_markers)
        if marker is not None:
            logger.debug(
                f"TE.TE variant {i + 1} ({escape_header(obfuscation)}) matched "
                f"{marker!r} on {target.url}"
            )
            result.mark_vulnerable(RESPONSE_TECHNIQUE, f"TE obfuscation may work: {obfuscation}")
            return result

    return result
