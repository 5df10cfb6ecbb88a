import pytest

from conftest import FakeSender
from httpsmuggler.config import ScannerConfig
from httpsmuggler.detectors import cl_te_detector, te_cl_detector, te_te_detector
from httpsmuggler.detectors.payloads import (
    TE_OBFUSCATIONS,
    build_cl_te_payload,
    build_normal_payload,
    build_te_cl_payload,
    build_te_te_payload,
)
from httpsmuggler.models import ProbeResponse, SmugglingType


def timed(elapsed, raw=b"HTTP/1.1 200 OK\r\n\r\n"):
    return ProbeResponse(raw=raw, elapsed=elapsed)


class TestCLTE:

    @pytest.mark.asyncio
    async def test_delayed_probe_is_vulnerable(self, target, config):
        crafted = build_cl_te_payload(target.host)
        send = FakeSender(lambda p: timed(7.0 if p == crafted else 0.2))

        result = await cl_te_detector.test_cl_te(target, config, send)

        assert result.vulnerable
        assert result.smuggling_type is SmugglingType.CL_TE
        assert result.technique == "Time-based detection"
        assert result.details == cl_te_detector.DETAILS
        assert result.time_diff == pytest.approx(6.8)
        assert send.payloads == [crafted, build_normal_payload(target.host)]

    @pytest.mark.asyncio
    async def test_exact_threshold_is_not_vulnerable(self, target, config):
        crafted = build_cl_te_payload(target.host)
        send = FakeSender(lambda p: timed(5.0 if p == crafted else 0.0))

        result = await cl_te_detector.test_cl_te(target, config, send)

        assert not result.vulnerable
        assert result.time_diff == 0.0
        assert result.technique == ""

    @pytest.mark.asyncio
    async def test_crafted_probe_error_aborts_without_baseline(self, target, config):
        send = FakeSender(lambda p: ConnectionError("refused"))

        result = await cl_te_detector.test_cl_te(target, config, send)

        assert not result.vulnerable
        assert len(send.calls) == 1

    @pytest.mark.asyncio
    async def test_baseline_error_counts_as_zero(self, target, config):
        crafted = build_cl_te_payload(target.host)
        send = FakeSender(lambda p: timed(6.0) if p == crafted else ConnectionError("reset"))

        result = await cl_te_detector.test_cl_te(target, config, send)

        assert result.vulnerable
        assert result.time_diff == pytest.approx(6.0)

    @pytest.mark.asyncio
    async def test_threshold_comes_from_config(self, target):
        crafted = build_cl_te_payload(target.host)
        send = FakeSender(lambda p: timed(0.9 if p == crafted else 0.1))

        strict = await cl_te_detector.test_cl_te(target, ScannerConfig(), send)
        relaxed = await cl_te_detector.test_cl_te(target, ScannerConfig(time_threshold=0.5), send)

        assert not strict.vulnerable
        assert relaxed.vulnerable


class TestTECL:

    @pytest.mark.asyncio
    async def test_delayed_probe_is_vulnerable(self, target, config):
        crafted = build_te_cl_payload(target.host)
        send = FakeSender(lambda p: timed(15.0 if p == crafted else 0.5))

        result = await te_cl_detector.test_te_cl(target, config, send)

        assert result.vulnerable
        assert result.smuggling_type is SmugglingType.TE_CL
        assert result.details == te_cl_detector.DETAILS
        assert result.time_diff == pytest.approx(14.5)
        assert send.payloads[0] == crafted

    @pytest.mark.asyncio
    async def test_fast_target_is_not_vulnerable(self, target, config):
        send = FakeSender(lambda p: timed(0.3))

        result = await te_cl_detector.test_te_cl(target, config, send)

        assert not result.vulnerable
        assert len(send.calls) == 2


class TestTETE:

    @pytest.mark.asyncio
    async def test_stops_at_first_matching_variant(self, target, config):
        third = build_te_te_payload(target.host, TE_OBFUSCATIONS[2])
        send = FakeSender(lambda p: timed(
            0.1,
            b"HTTP/1.1 403 Forbidden\r\n\r\nUnrecognized method GPOST" if p == third else b"HTTP/1.1 200 OK\r\n\r\n",
        ))

        result = await te_te_detector.test_te_te(target, config, send)

        assert result.vulnerable
        assert result.smuggling_type is SmugglingType.TE_TE
        assert result.technique == "Response analysis"
        assert result.details == "TE obfuscation may work: Transfer-Encoding: xchunked"
        assert result.time_diff == 0.0
        assert len(send.calls) == 3

    @pytest.mark.asyncio
    async def test_failed_variant_is_skipped(self, target, config):
        first = build_te_te_payload(target.host, TE_OBFUSCATIONS[0])
        send = FakeSender(lambda p: ConnectionError("reset") if p == first else timed(0.1, b"HTTP/1.1 400 Bad Request\r\n\r\n"))

        result = await te_te_detector.test_te_te(target, config, send)

        assert result.vulnerable
        assert result.details == f"TE obfuscation may work: {TE_OBFUSCATIONS[1]}"
        assert len(send.calls) == 2

    @pytest.mark.asyncio
    async def test_no_match_tries_every_variant(self, target, config):
        send = FakeSender(lambda p: timed(0.1))

        result = await te_te_detector.test_te_te(target, config, send)

        assert not result.vulnerable
        assert send.payloads == [build_te_te_payload(target.host, o) for o in TE_OBFUSCATIONS]

    @pytest.mark.asyncio
    async def test_all_variants_failing_is_not_vulnerable(self, target, config):
        send = FakeSender(lambda p: ConnectionError("refused"))

        result = await te_te_detector.test_te_te(target, config, send)

        assert not result.vulnerable
        assert len(send.calls) == 7

    @pytest.mark.asyncio
    async def test_markers_come_from_config(self, target):
        send = FakeSender(lambda p: timed(0.1, b"HTTP/1.1 501 Not Implemented\r\n\r\n"))

        default = await te_te_detector.test_te_te(target, ScannerConfig(), send)
        custom = await te_te_detector.test_te_te(target, ScannerConfig(response_markers=("501",)), send)

        assert not default.vulnerable
        assert custom.vulnerable
