"""
Appointment Scanner - Sequential scan over every discovered location
"""

import inspect
import logging
from typing import Awaitable, Callable, List, Optional, Union

from slot_checker.auth.login import AuthenticatedSession
from .availability_checker import AvailabilityProbe
from .locations import Location
from .results import ProbeResult

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProbeResult, int, int], Union[None, Awaitable[None]]]


class ScanOrchestrator:
    """Probes locations one at a time; one failing location never stops the rest"""

    def __init__(self, probe: AvailabilityProbe, visa_type: str, on_result: Optional[ProgressCallback] = None):
        self.probe = probe
        self.visa_type = visa_type
        self.on_result = on_result

    async def scan_all(self, session: AuthenticatedSession, locations: List[Location]) -> List[ProbeResult]:
        results: List[ProbeResult] = []
        total = len(locations)

        for index, location in enumerate(locations, start=1):
            logger.info(f"Checking {location.display_name} ({index}/{total})...")
            try:
                result = await self.probe.probe(session, location, self.visa_type)
            except Exception as e:
                logger.exception(f"Probe for {location.display_name} raised")
                result = ProbeResult.error(location.display_name, str(e))

            results.append(result)
            await self._safe_callback(result, index, total)

        return results

    async def _safe_callback(self, result: ProbeResult, index: int, total: int) -> None:
        if not self.on_result:
            return
        try:
            if inspect.iscoroutinefunction(self.on_result):
                await self.on_result(result, index, total)
            else:
                self.on_result(result, index, total)
        except Exception as e:
            logger.warning(f"Progress callback error: {e}")
