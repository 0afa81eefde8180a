# reference_list.py
"""
Read-only medication reference list (name, concentration, usual dose, warning).
Display data only: the engines never read it, so a missing or broken file
only affects the /medications listing.
"""

import json
import logging
import math
from pathlib import Path
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from presentation import PLACEHOLDER

logger = logging.getLogger("pediadose.reference")

EMPTY_MESSAGE = "No drug data available."
UNAVAILABLE_MESSAGE = "Could not load the medication list. Check that the data file exists and is valid JSON."


class ReferenceListUnavailable(RuntimeError):
    """Raised when the reference file cannot be read or has the wrong shape."""
    pass


class MedicationEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: Optional[Union[str, int, float]] = None
    concentration: Optional[Union[str, int, float]] = None
    dose_per_kg: Optional[Any] = Field(None, alias="dosePerKg")
    warning: Optional[Union[str, int, float]] = None

    def usual_dose(self) -> str:
        value = self.dose_per_kg
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            return PLACEHOLDER
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        return f"{value} mg/kg"

    def display(self) -> dict:
        return {
            "name": str(self.name) if self.name is not None else "Drug",
            "concentration": str(self.concentration) if self.concentration is not None else PLACEHOLDER,
            "usual_dose": self.usual_dose(),
            "warning": str(self.warning) if self.warning is not None else PLACEHOLDER,
        }


def load_reference_list(path: Path) -> List[MedicationEntry]:
    """
    Reads {"drugs": [...]} from disk.
    A document without a usable "drugs" array is an empty list, not an error.
    """
    try:
        with open(path, encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Med list error: {e}")
        raise ReferenceListUnavailable(UNAVAILABLE_MESSAGE) from e

    if not isinstance(data, dict) or not isinstance(data.get("drugs"), list):
        return []

    try:
        return [MedicationEntry.model_validate(item) for item in data["drugs"]]
    except ValidationError as e:
        logger.error(f"Med list error: {e}")
        raise ReferenceListUnavailable(UNAVAILABLE_MESSAGE) from e
