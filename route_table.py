# route_table.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Route:
    origin: str
    destination: str
    distance_km: float

    def __post_init__(self) -> None:
        if not self.distance_km > 0:
            raise ValueError(
                f"route {self.origin!r} -> {self.destination!r}: distance_km must be > 0"
            )


def _normalize(city: str) -> str:
    return city.strip().casefold()


class RouteTable:
    """
    Known city-pair distances, looked up in either direction.

    Routes keep their table order. When two entries describe the same pair,
    the earlier one wins.
    """

    def __init__(self, routes: Iterable[Route]) -> None:
        self._routes: Tuple[Route, ...] = tuple(routes)

    def __len__(self) -> int:
        return len(self._routes)

    def list_cities(self) -> List[str]:
        cities = {r.origin for r in self._routes} | {r.destination for r in self._routes}
        return sorted(cities)

    def find_distance(self, city_a: Optional[str], city_b: Optional[str]) -> Optional[float]:
        """
        Distance in km between two cities, or None when the pair is unknown.

        Inputs are trimmed and case-folded before comparison; no partial
        matching is attempted.
        """
        if not city_a or not city_b:
            return None

        a, b = _normalize(city_a), _normalize(city_b)
        for route in self._routes:
            origin, dest = _normalize(route.origin), _normalize(route.destination)
            if (origin == a and dest == b) or (origin == b and dest == a):
                return route.distance_km

        log.debug("no route between %r and %r", city_a, city_b)
        return None


# Major Canadian and U.S. city pairs, road distance in km
DEFAULT_ROUTES: Tuple[Route, ...] = (
    # Canada: capitals and major cities
    Route("Toronto, ON", "Ottawa, ON", 451),
    Route("Ottawa, ON", "Montreal, QC", 199),
    Route("Toronto, ON", "Montreal, QC", 541),
    Route("Edmonton, AB", "Ottawa, ON", 3389),
    Route("Vancouver, BC", "Ottawa, ON", 4450),
    Route("Calgary, AB", "Edmonton, AB", 299),
    Route("Vancouver, BC", "Calgary, AB", 970),
    Route("Winnipeg, MB", "Toronto, ON", 2225),
    Route("Winnipeg, MB", "Regina, SK", 575),
    Route("Regina, SK", "Saskatoon, SK", 262),
    Route("Halifax, NS", "Moncton, NB", 260),
    Route("Halifax, NS", "St. John's, NL", 1810),
    Route("Quebec City, QC", "Montreal, QC", 252),
    Route("Quebec City, QC", "Ottawa, ON", 445),
    Route("Hamilton, ON", "Toronto, ON", 68),
    # Canada <-> USA
    Route("Toronto, ON", "New York, NY", 790),
    Route("Toronto, ON", "Chicago, IL", 701),
    Route("Vancouver, BC", "Seattle, WA", 230),
    Route("Montreal, QC", "Boston, MA", 500),
    Route("Vancouver, BC", "San Francisco, CA", 1275),
    Route("Calgary, AB", "Denver, CO", 1350),
    Route("Windsor, ON", "Detroit, MI", 11),
    # USA
    Route("New York, NY", "Washington, DC", 362),
    Route("Washington, DC", "Boston, MA", 634),
    Route("Los Angeles, CA", "San Francisco, CA", 615),
    Route("Los Angeles, CA", "Las Vegas, NV", 435),
    Route("San Francisco, CA", "Seattle, WA", 1306),
    Route("Chicago, IL", "Detroit, MI", 454),
    Route("Chicago, IL", "Minneapolis, MN", 661),
    Route("Dallas, TX", "Houston, TX", 385),
    Route("Atlanta, GA", "Miami, FL", 1065),
    Route("Denver, CO", "Salt Lake City, UT", 830),
    Route("Phoenix, AZ", "Las Vegas, NV", 475),
    Route("San Diego, CA", "Los Angeles, CA", 195),
)


def default_table() -> RouteTable:
    return RouteTable(DEFAULT_ROUTES)
