"""
Probe Results - Outcome of checking one location
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

MAX_SAMPLE_DATES = 5


class ProbeStatus(str, Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    UNCERTAIN = "uncertain"
    ERROR = "error"


@dataclass(frozen=True)
class ProbeResult:
    office: str
    status: ProbeStatus
    count: int = 0
    dates: List[str] = field(default_factory=list)
    message: Optional[str] = None

    @classmethod
    def available(cls, office: str, count: int, dates: List[str]) -> "ProbeResult":
        return cls(office=office, status=ProbeStatus.AVAILABLE, count=count, dates=list(dates[:MAX_SAMPLE_DATES]))

    @classmethod
    def unavailable(cls, office: str) -> "ProbeResult":
        return cls(office=office, status=ProbeStatus.UNAVAILABLE)

    @classmethod
    def uncertain(cls, office: str) -> "ProbeResult":
        return cls(office=office, status=ProbeStatus.UNCERTAIN)

    @classmethod
    def error(cls, office: str, message: str) -> "ProbeResult":
        return cls(office=office, status=ProbeStatus.ERROR, message=message)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"office": self.office, "status": self.status.value}
        if self.status == ProbeStatus.AVAILABLE:
            data["count"] = self.count
            data["dates"] = list(self.dates)
        elif self.status == ProbeStatus.ERROR:
            data["message"] = self.message
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProbeResult":
        status = ProbeStatus(data["status"])
        return cls(
            office=data["office"],
            status=status,
            count=data.get("count", 0),
            dates=list(data.get("dates", [])),
            message=data.get("message"),
        )
