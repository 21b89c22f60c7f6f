"""
elfsym Report Generator
========================

Writes a structured JSON report of a run for machine consumption and
downstream pipelines.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from shared.models import ScanResult

from elfsym import __version__
from elfsym.core.models import SymbolTableResult


class SymbolReportGenerator:
    """Generates JSON reports from :class:`ScanResult` objects.

    Usage::

        generator = SymbolReportGenerator()
        generator.generate_json(scan, "report.json")
    """

    def build(self, scan: ScanResult) -> dict[str, Any]:
        """Assemble the report as a plain dictionary."""
        raw = scan.metadata.get("symbol_table")
        table = SymbolTableResult.model_validate(raw) if raw else SymbolTableResult()

        return {
            "report_type": "elfsym_symbol_table",
            "version": __version__,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "target": scan.target,
            "summary": scan.summary,
            "duration_seconds": scan.duration_seconds,
            "severity_counts": scan.severity_counts,
            "elf": {
                "path": table.path,
                "size": table.size,
                "bits": table.bits,
                "endian": table.endian,
                "section_count": table.section_count,
            },
            "symbols": [sym.model_dump() for sym in table.symbols],
            "resolved": [
                {
                    "address": f"0x{item.address:x}",
                    "symbol": item.symbol,
                    "offset": item.offset,
                }
                for item in table.resolved
            ],
            "diagnostics": [
                finding.model_dump(mode="json") for finding in scan.findings
            ],
        }

    def generate_json(self, scan: ScanResult, output_path: str | Path) -> str:
        """Write the JSON report to *output_path*.

        Returns:
            The absolute path of the generated report.
        """
        report_data = self.build(scan)

        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(report_data, f, indent=2, ensure_ascii=False, default=str)

        return str(path.resolve())
