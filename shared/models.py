"""
elfsym Shared Data Models
==========================

Pydantic v2 models for the outcome of one run: a :class:`ScanResult`
holds timing, a summary line, a metadata payload and the
:class:`Finding` diagnostics collected on the way.

References:
    - Pydantic v2 documentation. https://docs.pydantic.dev/latest/
"""

from __future__ import annotations

import datetime as _dt
import json as _json
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _utcnow() -> _dt.datetime:
    return _dt.datetime.now(_dt.timezone.utc)


class Severity(str, Enum):
    """How much of the input a diagnostic affects.

    Attributes:
        CRITICAL: Nothing could be read.
        HIGH:     A whole section was unusable.
        MEDIUM:   One record was skipped.
        LOW:      Irregular but harmless.
        INFO:     Informational.
    """

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    INFO = "INFO"


class Finding(BaseModel):
    """One diagnostic.

    ``evidence`` accepts a string or any JSON-serialisable value, which is
    stored as its JSON text.
    """

    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    severity: Severity
    title: str = Field(..., min_length=1, max_length=256)
    description: str = Field(..., min_length=1)
    evidence: str = ""
    recommendation: str = ""

    @field_validator("evidence", mode="before")
    @classmethod
    def _evidence_as_text(cls, v: Any) -> str:
        if isinstance(v, str):
            return v
        return _json.dumps(v, ensure_ascii=False, sort_keys=True, default=str)


class ScanResult(BaseModel):
    """Everything one run produced.

    Attributes:
        tool_name:  Component that produced the result.
        target:     Processed input, usually a file path.
        start_time: UTC start of the run.
        end_time:   UTC end of the run; set by :meth:`finalize`.
        findings:   Diagnostics in the order they were met.
        summary:    One-line human-readable summary.
        metadata:   Serialised tool-specific payload.
    """

    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    tool_name: str = Field(..., min_length=1)
    target: str = Field(..., min_length=1)
    start_time: _dt.datetime = Field(default_factory=_utcnow)
    end_time: Optional[_dt.datetime] = None
    findings: list[Finding] = Field(default_factory=list)
    summary: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def duration_seconds(self) -> float | None:
        if self.end_time is None:
            return None
        return (self.end_time - self.start_time).total_seconds()

    @property
    def severity_counts(self) -> dict[str, int]:
        """Number of findings per severity, every severity present."""
        counts = {s.value: 0 for s in Severity}
        for finding in self.findings:
            counts[finding.severity.value] += 1
        return counts

    def add_finding(self, finding: Finding) -> None:
        self.findings.append(finding)

    def finalize(self, summary: str | None = None) -> ScanResult:
        """Stamp ``end_time`` and set the summary; returns ``self``.

        Without *summary*, one is built from the severity counts.
        """
        self.end_time = _utcnow()
        if summary is None:
            parts = [f"{sev}: {n}" for sev, n in self.severity_counts.items() if n]
            summary = f"Findings: {len(self.findings)} ({', '.join(parts) or 'none'})"
        self.summary = summary
        return self
