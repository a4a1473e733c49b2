"""Naval vessel placeholder. No marine-traffic provider is integrated."""

from dataclasses import dataclass, field
from typing import List

from .base import SourceClient

NO_INTEGRATION_NOTE = "Navy tracking requires marine traffic API integration"


@dataclass
class VesselPayload:
    vessels: List[dict] = field(default_factory=list)
    message: str = NO_INTEGRATION_NOTE


class VesselClient(SourceClient[VesselPayload]):
    name = "navy"

    async def _fetch(self) -> VesselPayload:
        return VesselPayload()

    def fallback(self, reason: str) -> VesselPayload:
        return VesselPayload(message=f"{NO_INTEGRATION_NOTE} ({reason})")
