"""Scanner Module - Location discovery and slot scanning"""

from .appointment_scanner import ScanOrchestrator
from .availability_checker import AvailabilityProbe
from .locations import Location, LocationEnumerator
from .results import ProbeResult, ProbeStatus

__all__ = ['ScanOrchestrator', 'AvailabilityProbe', 'Location', 'LocationEnumerator', 'ProbeResult', 'ProbeStatus']
