"""
PediaDose: Presentation Adapter
===============================
Both sides of the engine boundary:
- IN:  raw form strings -> floats (parse_number)
- OUT: unrounded results -> display strings and a quick-read summary

All rounding happens here. The engines never round.
"""

import math
import re
from typing import Optional

from models import DoseResult, FluidResult

PLACEHOLDER = "—"

DOSE_CAUTION = "Check route of administration, commercial concentration and dosing interval against your protocol."
FLUID_CAUTION = "Adjust fluid type and replacement rate to the clinical picture and local protocol."

_NON_NUMERIC = re.compile(r"[^0-9.\-]")


def parse_number(raw) -> float:
    """
    Coerces a user-entered value to float.
    Strips everything except digits, '.' and '-' ("12 kg" -> 12.0).
    Returns nan when nothing usable is left, so the engine rejects it.
    """
    if isinstance(raw, bool) or raw is None:
        return math.nan
    if isinstance(raw, (int, float)):
        value = float(raw)
        return value if math.isfinite(value) else math.nan

    cleaned = _NON_NUMERIC.sub("", str(raw))
    if cleaned == "":
        return 0.0  # An empty field reads as zero, which is then an invalid weight
    try:
        value = float(cleaned)
    except ValueError:
        return math.nan
    return value if math.isfinite(value) else math.nan


def format_number(value: Optional[float], places: int = 2) -> str:
    if value is None or isinstance(value, bool) or not math.isfinite(value):
        return PLACEHOLDER
    return f"{value:.{places}f}"


def format_dose(result: DoseResult) -> dict:
    """
    Display strings for a dose. Keys for absent values (volume, cap, daily max)
    are left out rather than rendered as zero.
    """
    display = {
        "label": result.label,
        "total_dose_mg": format_number(result.total_dose_mg, 2),
        "mg_per_kg": format_number(result.mg_per_kg, 2),
    }
    if result.volume_ml is not None:
        display["volume_ml"] = format_number(result.volume_ml, 2)
        display["concentration_mg_per_ml"] = format_number(result.concentration_mg_per_ml, 2)
    if result.was_capped:
        display["max_mg_per_dose"] = format_number(result.max_mg_per_dose, 0)
    if result.daily_max_mg is not None:
        display["daily_max_mg"] = format_number(result.daily_max_mg, 0)
    return display


def dose_summary(result: DoseResult) -> str:
    d = format_dose(result)
    lines = [d["label"], f"Calculated dose: {d['total_dose_mg']} mg ({d['mg_per_kg']} mg/kg)"]
    if "volume_ml" in d:
        lines.append(f"Equivalent volume: {d['volume_ml']} mL at {d['concentration_mg_per_ml']} mg/mL")
    if "max_mg_per_dose" in d:
        lines.append(f"Dose limited to the per-dose maximum: {d['max_mg_per_dose']} mg")
    if "daily_max_mg" in d:
        lines.append(f"Approximate daily maximum: {d['daily_max_mg']} mg/day")
    lines.append(DOSE_CAUTION)
    return "\n".join(lines)


def format_fluids(result: FluidResult) -> dict:
    return {
        "maintenance_ml_per_day": format_number(result.maintenance_ml_per_day, 0),
        "maintenance_ml_per_hour": format_number(result.maintenance_ml_per_hour, 1),
        "bolus_rate_ml_per_kg": format_number(result.bolus_rate_ml_per_kg, 0),
        "bolus_ml": format_number(result.bolus_ml, 0),
        "deficit_5_ml": format_number(result.deficit_5_ml, 0),
        "deficit_7_ml": format_number(result.deficit_7_ml, 0),
        "deficit_10_ml": format_number(result.deficit_10_ml, 0),
    }


def fluid_summary(result: FluidResult) -> str:
    d = format_fluids(result)
    return "\n".join([
        f"Maintenance: {d['maintenance_ml_per_day']} mL/day ({d['maintenance_ml_per_hour']} mL/hr)",
        f"Bolus ({d['bolus_rate_ml_per_kg']} mL/kg): {d['bolus_ml']} mL",
        f"Deficit 5%: {d['deficit_5_ml']} mL",
        f"Deficit 7%: {d['deficit_7_ml']} mL",
        f"Deficit 10%: {d['deficit_10_ml']} mL",
        FLUID_CAUTION,
    ])
