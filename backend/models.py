"""
PediaDose: Data Dictionary
==========================
Requests, results and error types shared by the Dose and Fluid engines.

NO LOGIC is implemented here beyond input checks and error translation.
Every object is a frozen value: built per calculation and discarded once the
caller reads it.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from constants import FLUID_CONSTANTS


# --- 1. ERRORS ---

class ErrorCode(Enum):
    INVALID_WEIGHT = "invalid_weight"
    UNKNOWN_DRUG = "unknown_drug"
    INVALID_BOLUS_RATE = "invalid_bolus_rate"


@dataclass(frozen=True)
class CalculationError:
    """Which precondition failed, so the UI can point at the right form field."""
    code: ErrorCode
    field: str
    message: str


class CalculationInputError(ValueError):
    """Raised inside the engines when an input fails validation."""
    code = None
    field = None

    def to_error(self) -> CalculationError:
        return CalculationError(code=self.code, field=self.field, message=str(self))


class InvalidWeightError(CalculationInputError):
    """Weight missing, non-numeric, non-finite or <= 0."""
    code = ErrorCode.INVALID_WEIGHT
    field = "weight_kg"


class UnknownDrugError(CalculationInputError):
    """Drug identifier not present in the rule table."""
    code = ErrorCode.UNKNOWN_DRUG
    field = "drug_id"


class InvalidBolusRateError(CalculationInputError):
    code = ErrorCode.INVALID_BOLUS_RATE
    field = "bolus_rate_ml_per_kg"


def is_positive_number(value) -> bool:
    """True for a finite int/float > 0. Bools and strings never qualify."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0


# --- 2. INPUT LAYER ---

@dataclass(frozen=True)
class DoseRequest:
    weight_kg: float
    drug_id: str
    concentration_mg_per_ml: Optional[float] = None  # mg/mL, enables volume


@dataclass(frozen=True)
class FluidRequest:
    weight_kg: float
    # None is treated as "no selection" and falls back to the default
    bolus_rate_ml_per_kg: Optional[float] = FLUID_CONSTANTS.DEFAULT_BOLUS_RATE_ML_PER_KG


# --- 3. OUTPUT LAYER (unrounded) ---

@dataclass(frozen=True)
class DoseResult:
    total_dose_mg: float
    was_capped: bool
    volume_ml: Optional[float]       # None = not computable (no usable concentration)
    daily_max_mg: Optional[float]    # None = rule has no daily ceiling

    # Pass-through from the resolved rule, for display only
    drug_id: str = ""
    label: str = ""
    mg_per_kg: float = 0.0
    max_mg_per_dose: Optional[float] = None
    concentration_mg_per_ml: Optional[float] = None


@dataclass(frozen=True)
class FluidResult:
    maintenance_ml_per_day: float
    maintenance_ml_per_hour: float
    bolus_ml: float
    deficit_5_ml: float
    deficit_7_ml: float
    deficit_10_ml: float

    weight_kg: float = 0.0
    bolus_rate_ml_per_kg: float = FLUID_CONSTANTS.DEFAULT_BOLUS_RATE_ML_PER_KG


@dataclass(frozen=True)
class CalculationOutcome:
    """Standardized response format for API/UI."""
    success: bool
    result: Optional[Union[DoseResult, FluidResult]] = None
    error: Optional[CalculationError] = None

    @classmethod
    def ok(cls, result: Union[DoseResult, FluidResult]) -> "CalculationOutcome":
        return cls(success=True, result=result)

    @classmethod
    def failed(cls, exc: CalculationInputError) -> "CalculationOutcome":
        return cls(success=False, error=exc.to_error())
