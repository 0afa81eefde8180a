"""
PediaDose: Fluid Engine
=======================
Maintenance (Holliday-Segar), bolus and dehydration deficit volumes.
"""

from constants import FLUID_CONSTANTS
from models import (
    FluidRequest,
    FluidResult,
    CalculationOutcome,
    CalculationInputError,
    InvalidWeightError,
    InvalidBolusRateError,
    is_positive_number
)


class FluidEngine:

    @staticmethod
    def _holliday_segar_ml_per_day(weight_kg: float) -> float:
        """
        Cumulative 100/50/20 rule: each rate only applies to the kilograms
        inside its band, so 10 kg -> 1000 and 20 kg -> 1500 from either side.
        """
        c = FLUID_CONSTANTS
        if weight_kg <= c.FIRST_BAND_LIMIT_KG:
            return weight_kg * c.FIRST_BAND_ML_PER_KG

        first_band_total = c.FIRST_BAND_LIMIT_KG * c.FIRST_BAND_ML_PER_KG
        if weight_kg <= c.SECOND_BAND_LIMIT_KG:
            return first_band_total + (weight_kg - c.FIRST_BAND_LIMIT_KG) * c.SECOND_BAND_ML_PER_KG

        second_band_total = first_band_total + \
            (c.SECOND_BAND_LIMIT_KG - c.FIRST_BAND_LIMIT_KG) * c.SECOND_BAND_ML_PER_KG
        return second_band_total + (weight_kg - c.SECOND_BAND_LIMIT_KG) * c.THIRD_BAND_ML_PER_KG

    @staticmethod
    def _deficit_ml(weight_kg: float, percent: int) -> float:
        return weight_kg * (percent * FLUID_CONSTANTS.DEFICIT_ML_PER_KG_PER_PERCENT)

    @staticmethod
    def compute_fluids(request: FluidRequest) -> CalculationOutcome:
        try:
            if not is_positive_number(request.weight_kg):
                raise InvalidWeightError("Please enter a valid weight.")
            # None means "no selection": fall back to the pre-selected rate
            rate = request.bolus_rate_ml_per_kg
            if rate is None:
                rate = FLUID_CONSTANTS.DEFAULT_BOLUS_RATE_ML_PER_KG
            if not is_positive_number(rate):
                raise InvalidBolusRateError(f"Bolus rate must be a positive number of mL/kg, got {rate!r}")
        except CalculationInputError as e:
            return CalculationOutcome.failed(e)

        weight = float(request.weight_kg)
        rate = float(rate)

        per_day = FluidEngine._holliday_segar_ml_per_day(weight)

        return CalculationOutcome.ok(FluidResult(
            maintenance_ml_per_day=per_day,
            maintenance_ml_per_hour=per_day / FLUID_CONSTANTS.HOURS_PER_DAY,
            bolus_ml=weight * rate,
            deficit_5_ml=FluidEngine._deficit_ml(weight, 5),
            deficit_7_ml=FluidEngine._deficit_ml(weight, 7),
            deficit_10_ml=FluidEngine._deficit_ml(weight, 10),
            weight_kg=weight,
            bolus_rate_ml_per_kg=rate
        ))
