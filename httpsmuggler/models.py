"""Core data structures shared by the detectors and the scanner."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

_STATUS_LINE = re.compile(rb'HTTP/1\.[01] (\d{3})')


def escape_header(value: str) -> str:
    """Display form of a header value with control characters escaped."""
    return value.replace('\r', '\\r').replace('\n', '\\n').replace('\t', '\\t')


class SmugglingType(Enum):
    """Request smuggling classes the scanner tests for."""

    CL_TE = ("CL.TE", "Front-end: Content-Length | Back-end: Transfer-Encoding")
    TE_CL = ("TE.CL", "Front-end: Transfer-Encoding | Back-end: Content-Length")
    TE_TE = ("TE.TE", "Both ends use TE but handle obfuscation differently")

    def __init__(self, short: str, desc: str):
        self.short = short
        self.desc = desc

    def __str__(self) -> str:
        return self.short


@dataclass(frozen=True)
class Target:
    """A target URL broken down into what the transport needs."""

    url: str
    host: str
    port: int
    use_tls: bool


@dataclass(frozen=True)
class ProbeResponse:
    """Raw bytes read back from one probe and how long the probe took."""

    raw: bytes
    elapsed: float

    @property
    def text(self) -> str:
        return self.raw.decode('utf-8', errors='replace')

    @property
    def status_code(self) -> Optional[int]:
        match = _STATUS_LINE.match(self.raw)
        return int(match.group(1)) if match else None


@dataclass
class DetectionResult:
    """Outcome of one (target, smuggling type) test.

    A vulnerable result always carries the technique that fired and a
    human-readable rationale; ``time_diff`` is only set by timing tests.
    """

    url: str
    smuggling_type: SmugglingType
    vulnerable: bool = False
    technique: str = ""
    time_diff: float = 0.0
    details: str = ""

    def __post_init__(self) -> None:
        if self.vulnerable and not (self.technique and self.details):
            raise ValueError("vulnerable results need a technique and details")

    def mark_vulnerable(self, technique: str, details: str, time_diff: float = 0.0) -> None:
        if not technique or not details:
            raise ValueError("vulnerable results need a technique and details")
        self.vulnerable = True
        self.technique = technique
        self.details = details
        self.time_diff = time_diff

    def to_line(self) -> str:
        """Render the pipe-delimited line used by the output file.

        Control characters in ``details`` are escaped so a finding always
        fits on one line.
        """
        return f"{self.url} | {self.smuggling_type} | {self.technique} | {escape_header(self.details)}"
