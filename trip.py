# trip.py
from __future__ import annotations

import logging
import math
from typing import List, Literal, Optional, TypedDict

from emissions import (
    BASELINE_MODE,
    MODES,
    CreditPrice,
    EmissionEngine,
    Mode,
    ModeComparison,
    SavingsResult,
)
from route_table import RouteTable

log = logging.getLogger(__name__)


class TripValidationError(ValueError):
    """User input that cannot be turned into a trip."""


class RouteNotFoundError(TripValidationError):
    pass


class TripReport(TypedDict):
    origin: str
    destination: str
    distance_km: float
    distance_source: Literal["manual", "route_table"]
    mode: Mode
    emission_kg: float
    baseline_kg: float
    savings: SavingsResult
    comparison: List[ModeComparison]
    credits: float
    price: CreditPrice


def _as_distance(value) -> Optional[float]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise TripValidationError("Please enter a valid distance greater than 0 km.")
    try:
        km = float(value)
    except (TypeError, ValueError, OverflowError):
        raise TripValidationError("Please enter a valid distance greater than 0 km.") from None
    if not math.isfinite(km) or km <= 0:
        raise TripValidationError("Please enter a valid distance greater than 0 km.")
    return km


def validate_trip(
    origin: Optional[str],
    destination: Optional[str],
    mode: Optional[str],
    distance_km=None,
) -> Optional[float]:
    """
    Check the trip inputs a user typed in.

    Returns the manual distance as a float, or None when no manual distance
    was given and the route table has to supply one.
    """
    origin = origin.strip() if isinstance(origin, str) else ""
    destination = destination.strip() if isinstance(destination, str) else ""

    if not origin:
        raise TripValidationError("Please enter an origin city.")
    if not destination:
        raise TripValidationError("Please enter a destination city.")
    km = _as_distance(distance_km)
    if not mode:
        raise TripValidationError("Please select a transport mode.")
    if mode not in MODES:
        raise TripValidationError(
            f"Unknown transport mode {mode!r}. Choose from: {', '.join(MODES)}."
        )
    if origin.casefold() == destination.casefold():
        raise TripValidationError("Origin and destination cannot be the same city.")
    return km


def resolve_distance(
    routes: RouteTable,
    origin: str,
    destination: str,
    manual_km: Optional[float] = None,
) -> float:
    if manual_km is not None:
        return manual_km

    km = routes.find_distance(origin, destination)
    if km is None:
        raise RouteNotFoundError(
            "Route not found in database. Please enter the distance manually or check spelling."
        )
    return float(km)


def calculate_trip(
    engine: EmissionEngine,
    routes: RouteTable,
    *,
    origin: str,
    destination: str,
    mode: str,
    distance_km=None,
) -> TripReport:
    """
    Validate a trip, resolve its distance and run every calculation.

    The selected mode is compared with the car baseline, all modes are
    ranked, and the credits needed to offset the selected mode are priced.
    """
    manual_km = validate_trip(origin, destination, mode, distance_km)
    origin, destination = origin.strip(), destination.strip()
    km = resolve_distance(routes, origin, destination, manual_km)

    emission = engine.emission(km, mode)
    baseline = engine.emission(km, BASELINE_MODE)
    credits = engine.carbon_credits(emission)

    log.info(
        "trip %s -> %s: %.1f km by %s = %.2f kg CO2",
        origin, destination, km, mode, emission,
    )

    return {
        "origin": origin,
        "destination": destination,
        "distance_km": km,
        "distance_source": "manual" if manual_km is not None else "route_table",
        "mode": mode,  # type: ignore[typeddict-item]
        "emission_kg": emission,
        "baseline_kg": baseline,
        "savings": engine.savings(emission, baseline),
        "comparison": engine.all_modes(km),
        "credits": credits,
        "price": engine.credit_price(credits),
    }
