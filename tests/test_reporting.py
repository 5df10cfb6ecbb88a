import pytest

from httpsmuggler.detectors.payloads import TE_OBFUSCATIONS
from httpsmuggler.models import DetectionResult, SmugglingType
from httpsmuggler.reporting import print_result, read_targets, write_results


def finding(url, smuggling_type, technique, details, time_diff=0.0):
    result = DetectionResult(url=url, smuggling_type=smuggling_type)
    result.mark_vulnerable(technique, details, time_diff=time_diff)
    return result


def test_read_targets_skips_blanks_and_comments(tmp_path):
    path = tmp_path / "urls.txt"
    path.write_text("# staging\nhttps://a.test\n\n   \n  http://b.test:8080  \n#http://c.test\n")

    assert read_targets(str(path)) == ["https://a.test", "http://b.test:8080"]


def test_read_targets_missing_file(tmp_path):
    with pytest.raises(OSError):
        read_targets(str(tmp_path / "missing.txt"))


def test_write_results_pipe_delimited(tmp_path):
    path = tmp_path / "out.txt"
    write_results(str(path), [
        finding("https://a.test", SmugglingType.CL_TE, "Time-based detection", "slow", 6.2),
        finding("https://b.test", SmugglingType.TE_TE, "Response analysis", "TE obfuscation may work: X"),
    ])

    assert path.read_text() == (
        "https://a.test | CL.TE | Time-based detection | slow\n"
        "https://b.test | TE.TE | Response analysis | TE obfuscation may work: X\n"
    )


def test_print_result_shows_time_difference_for_timing_findings(capsys):
    print_result(finding("https://a.test", SmugglingType.TE_CL, "Time-based detection", "slow", 6.25))

    out = capsys.readouterr().out
    assert "[POTENTIAL VULNERABILITY]" in out
    assert "https://a.test" in out
    assert "TE.CL" in out
    assert "Time Difference: 6.250s" in out
    assert "Details: slow" in out


def test_print_result_omits_time_difference_for_response_findings(capsys):
    print_result(finding("https://a.test", SmugglingType.TE_TE, "Response analysis", "x"))

    assert "Time Difference" not in capsys.readouterr().out


def test_write_results_keeps_obfuscated_te_finding_on_one_line(tmp_path):
    path = tmp_path / "out.txt"
    details = f"TE obfuscation may work: {TE_OBFUSCATIONS[0]}"
    write_results(str(path), [finding("https://a.test", SmugglingType.TE_TE, "Response analysis", details)])

    data = path.read_bytes()
    assert data.count(b"\n") == 1
    assert b"\r" not in data
    assert data == (
        b"https://a.test | TE.TE | Response analysis | "
        b"TE obfuscation may work: Transfer-Encoding: chunked\\r\\nTransfer-encoding: x\n"
    )


def test_print_result_escapes_details_and_describes_type(capsys):
    details = f"TE obfuscation may work: {TE_OBFUSCATIONS[0]}"
    print_result(finding("https://a.test", SmugglingType.TE_TE, "Response analysis", details))

    out = capsys.readouterr().out
    assert "chunked\\r\\nTransfer-encoding: x" in out
    assert "\r" not in out
    assert SmugglingType.TE_TE.desc in out
