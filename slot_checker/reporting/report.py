"""
Scan Report - Summary and persistence of one scan run
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

from slot_checker.scanner.results import ProbeResult, ProbeStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanSummary:
    total: int = 0
    available: int = 0
    unavailable: int = 0
    uncertain: int = 0
    errors: int = 0

    @classmethod
    def from_results(cls, results: List[ProbeResult]) -> "ScanSummary":
        def count(status: ProbeStatus) -> int:
            return sum(1 for r in results if r.status == status)

        return cls(
            total=len(results),
            available=count(ProbeStatus.AVAILABLE),
            unavailable=count(ProbeStatus.UNAVAILABLE),
            uncertain=count(ProbeStatus.UNCERTAIN),
            errors=count(ProbeStatus.ERROR),
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "available": self.available,
            "unavailable": self.unavailable,
            "uncertain": self.uncertain,
            "errors": self.errors,
        }


@dataclass(frozen=True)
class ScanReport:
    timestamp: str
    results: List[ProbeResult] = field(default_factory=list)
    summary: ScanSummary = field(default_factory=ScanSummary)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "results": [r.to_dict() for r in self.results],
            "summary": self.summary.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScanReport":
        summary = data.get("summary", {})
        return cls(
            timestamp=data["timestamp"],
            results=[ProbeResult.from_dict(r) for r in data.get("results", [])],
            summary=ScanSummary(
                total=summary.get("total", 0),
                available=summary.get("available", 0),
                unavailable=summary.get("unavailable", 0),
                uncertain=summary.get("uncertain", 0),
                errors=summary.get("errors", 0),
            ),
        )


def build_report(results: List[ProbeResult]) -> ScanReport:
    timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return ScanReport(timestamp=timestamp, results=list(results), summary=ScanSummary.from_results(results))


def load_report(path: Path) -> ScanReport:
    with open(path, "r", encoding="utf-8") as f:
        return ScanReport.from_dict(json.load(f))


class ReportAggregator:
    """Builds the run report and writes it over the previous one"""

    def __init__(self, path: Path):
        self.path = Path(path)

    def aggregate(self, results: List[ProbeResult]) -> ScanReport:
        report = build_report(results)
        self.save(report)
        return report

    def save(self, report: ScanReport) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(report.to_dict(), f, indent=2, ensure_ascii=False)
        logger.info(f"Results saved to {self.path}")
