# formatting.py
from __future__ import annotations

import math
from numbers import Real
from typing import Dict, List, Optional, TypedDict

from emissions import Mode, ModeComparison


class ModeDisplay(TypedDict):
    label: str
    icon: str
    color: str
    impact: str


MODE_DISPLAY: Dict[Mode, ModeDisplay] = {
    "bicycle": {"label": "Bicycle", "icon": "🚲", "color": "#10b981", "impact": "Zero-emission transport"},
    "car":     {"label": "Car",     "icon": "🚗", "color": "#3b82f6", "impact": "Standard passenger vehicle"},
    "bus":     {"label": "Bus",     "icon": "🚌", "color": "#f59e0b", "impact": "Shared public transport"},
    "truck":   {"label": "Truck",   "icon": "🚚", "color": "#ef4444", "impact": "Commercial freight transport"},
}


def _is_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return not (isinstance(value, float) and math.isnan(value))


def format_number(value, decimals: int = 2) -> str:
    """
    Thousands-separated fixed-point text, e.g. 12345.678 -> "12,345.68".

    Zero prints as "0" and magnitudes under 0.01 switch to scientific
    notation so tiny emissions don't collapse to "0.00". The exponent
    carries no zero padding: 0.005 -> "5.00e-3".
    """
    if not _is_number(value):
        return "N/A"
    if value == 0:
        return "0"
    if abs(value) < 0.01:
        mantissa, exponent = f"{value:.2e}".split("e")
        return f"{mantissa}e{int(exponent)}"
    return f"{value:,.{decimals}f}"


def format_currency(value) -> str:
    if not _is_number(value):
        return "US$ N/A"
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def describe_vs_car(percentage: Optional[int]) -> str:
    if percentage is None:
        return "No car baseline"
    if percentage == 100:
        return "Baseline"
    if percentage < 100:
        return f"Saves {100 - percentage}% vs car"
    return f"{percentage - 100}% more than car"


def _bar_level(share: float, emission_kg: float) -> str:
    if emission_kg == 0 or share <= 25:
        return "green"
    if share <= 75:
        return "yellow"
    return "orange"


def comparison_rows(comparison: List[ModeComparison], selected: Optional[str] = None) -> List[dict]:
    """Decorate an all-modes comparison with labels, icons and bar widths."""
    top = max((c["emission_kg"] for c in comparison), default=0.0)
    rows = []
    for c in comparison:
        share = round(c["emission_kg"] / top * 100, 2) if top > 0 else 0.0
        rows.append({
            **c,
            **MODE_DISPLAY[c["mode"]],
            "emission_text": f"{format_number(c['emission_kg'])} kg",
            "share_of_max": share,
            "bar_level": _bar_level(share, c["emission_kg"]),
            "selected": c["mode"] == selected,
            "note": describe_vs_car(c["percentage_vs_car"]),
        })
    return rows
