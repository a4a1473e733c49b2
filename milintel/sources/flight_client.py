"""OpenSky Network client filtered down to military airframes."""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from pydantic import BaseModel

from .base import SourceClient

# OpenSky state vector layout
_ICAO24, _CALLSIGN, _COUNTRY, _TIME_POSITION = 0, 1, 2, 3
_LONGITUDE, _LATITUDE, _BARO_ALTITUDE, _VELOCITY = 5, 6, 7, 9


@dataclass
class Flight:
    identifier: str
    callsign: Optional[str] = None
    country: Optional[str] = None
    longitude: Optional[float] = None
    latitude: Optional[float] = None
    altitude: Optional[float] = None
    velocity: Optional[float] = None
    observed_at: Optional[int] = None


@dataclass
class FlightPayload:
    count: int = 0
    flights: List[Flight] = field(default_factory=list)
    error: Optional[str] = None


class _StatesResponse(BaseModel):
    time: Optional[int] = None
    states: Optional[List[List[Any]]] = None


def _at(vector: Sequence[Any], index: int) -> Any:
    return vector[index] if len(vector) > index else None


def is_military(identifier: Any, prefixes: Sequence[str]) -> bool:
    """True if an ICAO24 address falls in one of the recognized ranges."""
    if not isinstance(identifier, str) or not identifier:
        return False
    ident = identifier.strip().upper()
    return any(ident.startswith(p.upper()) for p in prefixes)


def to_flight(vector: Sequence[Any]) -> Flight:
    callsign = _at(vector, _CALLSIGN)
    return Flight(
        identifier=vector[_ICAO24],
        callsign=callsign.strip() if isinstance(callsign, str) else None,
        country=_at(vector, _COUNTRY),
        longitude=_at(vector, _LONGITUDE),
        latitude=_at(vector, _LATITUDE),
        altitude=_at(vector, _BARO_ALTITUDE),
        velocity=_at(vector, _VELOCITY),
        observed_at=_at(vector, _TIME_POSITION),
    )


def filter_military(
    states: Sequence[Sequence[Any]],
    prefixes: Sequence[str],
    limit: int,
) -> FlightPayload:
    """Keep state vectors with a military prefix; count is pre-truncation."""
    matches = [
        to_flight(v) for v in states
        if v and is_military(v[_ICAO24], prefixes)
    ]
    return FlightPayload(count=len(matches), flights=matches[:limit])


class FlightClient(SourceClient[FlightPayload]):
    """Bulk ``/states/all`` pull, filtered client-side."""

    name = "flights"

    async def _fetch(self) -> FlightPayload:
        async with self.session() as client:
            resp = await client.get(self.config.opensky_states_url)
        resp.raise_for_status()
        body = _StatesResponse.model_validate(resp.json())
        return filter_military(
            body.states or [],
            self.config.military_icao_prefixes,
            self.config.max_flights,
        )

    def fallback(self, reason: str) -> FlightPayload:
        return FlightPayload(error=reason)
