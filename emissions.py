# emissions.py
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, localcontext
from numbers import Real
from typing import Dict, List, Literal, Mapping, Optional, Tuple, TypedDict, TypeAlias

log = logging.getLogger(__name__)

# Allowed transport modes, in declaration order
Mode: TypeAlias = Literal[
    "bicycle",
    "car",
    "bus",
    "truck",
]

MODES: Tuple[Mode, ...] = ("bicycle", "car", "bus", "truck")

BASELINE_MODE: Mode = "car"


class EmissionResult(TypedDict):
    mode: Mode
    distance_km: float
    emission_kg: float


class ModeComparison(TypedDict):
    mode: Mode
    emission_kg: float
    percentage_vs_car: Optional[int]


class SavingsResult(TypedDict):
    saved_kg: float
    percentage: float


class CreditPrice(TypedDict):
    min: float
    max: float
    average: float


class InvalidModeError(ValueError):
    """Mode outside the closed transport enumeration (caller bug)."""


class InvalidDistanceError(ValueError):
    """Distance that is not a finite real number."""


class InvalidAmountError(ValueError):
    """Negative emission or credit amount."""


# kg CO2 per km
EMISSION_FACTORS: Dict[Mode, float] = {
    "bicycle": 0.0,   # human powered
    "car": 0.12,      # average gasoline passenger car
    "bus": 0.089,     # diesel bus, per passenger load
    "truck": 0.96,    # heavy-duty diesel truck
}


@dataclass(frozen=True)
class CarbonCreditConfig:
    kg_per_credit: float = 1000
    price_min_usd: float = 50
    price_max_usd: float = 150


CARBON_CREDIT = CarbonCreditConfig()


def _dec(value: float) -> Decimal:
    # repr() keeps the shortest decimal form, so 2.705 stays 2.705
    return Decimal(repr(value)) if isinstance(value, float) else Decimal(value)


def _is_finite(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        # int too large for a float is still finite
        return True


def _round(value: Decimal, places: int, error: type = InvalidAmountError) -> float:
    with localcontext() as ctx:
        # quantize needs every digit left of the rounding position
        ctx.prec = max(ctx.prec, value.adjusted() + places + 2)
        result = float(value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))
    if not math.isfinite(result):
        raise error(f"result {value:.3E} is outside the floating point range")
    return result


def _finite_amount(value: float, name: str) -> Decimal:
    if not _is_finite(value):
        raise InvalidAmountError(f"{name} must be a finite number")
    return _dec(value)


def _check_amount(value: float, name: str) -> Decimal:
    amount = _finite_amount(value, name)
    if amount < 0:
        raise InvalidAmountError(f"{name} must be >= 0")
    return amount


class EmissionEngine:
    """
    Stateless emission calculator over an injected factor table.

    Invalid input policy: a non-positive distance yields zero emission, a
    non-finite or non-numeric distance raises InvalidDistanceError, and an
    unknown mode raises InvalidModeError. Every method applies the same
    policy. Rounding is decimal half-away-from-zero on the decimal value of
    the inputs, so identical inputs always give identical floats. Results
    that overflow a float raise the error class of the offending input.
    """

    def __init__(
        self,
        factors: Mapping[str, float] = EMISSION_FACTORS,
        credit: CarbonCreditConfig = CARBON_CREDIT,
    ) -> None:
        unknown = set(factors) - set(MODES)
        missing = set(MODES) - set(factors)
        if unknown or missing:
            raise ValueError(
                f"factor table must cover exactly {', '.join(MODES)} "
                f"(unknown={sorted(unknown)}, missing={sorted(missing)})"
            )
        for mode, f in factors.items():
            if not math.isfinite(f) or f < 0:
                raise ValueError(f"factor for {mode!r} must be a finite number >= 0")
        if credit.kg_per_credit <= 0:
            raise ValueError("kg_per_credit must be > 0")
        if credit.price_min_usd < 0 or credit.price_max_usd < credit.price_min_usd:
            raise ValueError("credit prices must satisfy 0 <= min <= max")

        self._factors: Dict[Mode, Decimal] = {m: _dec(factors[m]) for m in MODES}
        self.credit = credit

    @property
    def factors(self) -> Dict[Mode, float]:
        return {m: float(f) for m, f in self._factors.items()}

    def _factor(self, mode: str) -> Decimal:
        try:
            return self._factors[mode]  # type: ignore[index]
        except (KeyError, TypeError):
            raise InvalidModeError(
                f"unknown transport mode {mode!r}; expected one of: {', '.join(MODES)}"
            ) from None

    # ------------------------------------------------------------------
    # Emissions
    # ------------------------------------------------------------------
    def emission(self, distance_km: float, mode: Mode | str) -> float:
        """
        Convert a trip distance (km) to kg CO2 for one mode.

        emission = distance_km * factor[mode], rounded to 2 decimals.
        """
        factor = self._factor(mode)
        if not _is_finite(distance_km):
            raise InvalidDistanceError(f"distance_km must be a finite number, got {distance_km!r}")
        if distance_km <= 0:
            return 0.0
        return _round(_dec(distance_km) * factor, 2, InvalidDistanceError)

    def estimate(self, distance_km: float, mode: Mode | str) -> EmissionResult:
        kg = self.emission(distance_km, mode)
        return {
            "mode": mode,  # type: ignore[typeddict-item]
            "distance_km": float(distance_km),
            "emission_kg": kg,
        }

    def all_modes(self, distance_km: float) -> List[ModeComparison]:
        """
        Emissions for every mode, each compared with the car baseline.

        Sorted ascending by emission; ties keep declaration order. When the
        car emits nothing, zero-emission modes report 100 and the rest None.
        """
        car = _dec(self.emission(distance_km, BASELINE_MODE))
        results: List[ModeComparison] = []
        for mode in MODES:
            kg = self.emission(distance_km, mode)
            if car > 0:
                pct: Optional[int] = int(_round(_dec(kg) / car * 100, 0))
            else:
                pct = 100 if kg == 0 else None
            results.append({"mode": mode, "emission_kg": kg, "percentage_vs_car": pct})

        # sorted() is stable, so equal emissions stay in MODES order
        results = sorted(results, key=lambda r: r["emission_kg"])
        log.debug("compared %d modes for %s km", len(results), distance_km)
        return results

    # ------------------------------------------------------------------
    # Savings & credits
    # ------------------------------------------------------------------
    def savings(self, actual_kg: float, baseline_kg: float) -> SavingsResult:
        actual = _finite_amount(actual_kg, "actual_kg")
        baseline = _finite_amount(baseline_kg, "baseline_kg")
        if baseline <= 0:
            return {"saved_kg": 0.0, "percentage": 0.0}

        saved = max(Decimal(0), baseline - actual)
        return {
            "saved_kg": _round(saved, 2),
            "percentage": _round(saved / baseline * 100, 2),
        }

    def carbon_credits(self, emission_kg: float) -> float:
        """Credits needed to offset `emission_kg` (1 credit = 1000 kg)."""
        kg = _check_amount(emission_kg, "emission_kg")
        return _round(kg / _dec(self.credit.kg_per_credit), 4)

    def credit_price(self, credits: float) -> CreditPrice:
        amount = _check_amount(credits, "credits")
        low = amount * _dec(self.credit.price_min_usd)
        high = amount * _dec(self.credit.price_max_usd)
        return {
            "min": _round(low, 2),
            "max": _round(high, 2),
            "average": _round((low + high) / 2, 2),
        }


def estimate_emissions(distance_km: float, mode: Mode | str) -> EmissionResult:
    """Estimate a single trip with the standard factor table."""
    return EmissionEngine().estimate(distance_km, mode)
