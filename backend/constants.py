import os
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Optional

from dotenv import load_dotenv

VERSION = "1.0.0"

# --- SETTINGS (overridable from the environment or a local .env) ---
load_dotenv()

BASE_DIR = Path(__file__).parent
LOG_LEVEL = os.getenv("PEDIADOSE_LOG_LEVEL", "INFO").upper()
REFERENCE_LIST_PATH = Path(os.getenv("PEDIADOSE_REFERENCE_LIST", str(BASE_DIR / "data" / "medications.json")))
CORS_ORIGINS = [o.strip() for o in os.getenv("PEDIADOSE_CORS_ORIGINS", "*").split(",") if o.strip()]


@dataclass(frozen=True)
class DrugRule:
    label: str
    mg_per_kg: float
    max_mg_per_dose: Optional[float] = None        # Per-administration ceiling
    max_mg_per_day_per_kg: Optional[float] = None  # Daily ceiling = this * weight

    def __post_init__(self):
        if not self.mg_per_kg > 0:
            raise ValueError(f"{self.label}: mg_per_kg must be > 0, got {self.mg_per_kg}")
        if self.max_mg_per_dose is not None and not self.max_mg_per_dose > 0:
            raise ValueError(f"{self.label}: max_mg_per_dose must be > 0, got {self.max_mg_per_dose}")
        if self.max_mg_per_day_per_kg is not None and not self.max_mg_per_day_per_kg > 0:
            raise ValueError(f"{self.label}: max_mg_per_day_per_kg must be > 0, got {self.max_mg_per_day_per_kg}")


class FLUID_CONSTANTS:
    # Holliday-Segar bands (kg) and their mL/kg/day rates
    FIRST_BAND_LIMIT_KG = 10.0
    SECOND_BAND_LIMIT_KG = 20.0
    FIRST_BAND_ML_PER_KG = 100.0
    SECOND_BAND_ML_PER_KG = 50.0
    THIRD_BAND_ML_PER_KG = 20.0
    HOURS_PER_DAY = 24.0

    # Pre-selected bolus when the caller does not choose one
    DEFAULT_BOLUS_RATE_ML_PER_KG = 20.0
    ALLOWED_BOLUS_RATES = (10.0, 20.0, 30.0)

    # 1% body weight ~ 10 mL/kg
    DEFICIT_ML_PER_KG_PER_PERCENT = 10.0


class DRUG_LIBRARY:
    """
    The default dosing table.
    Read-only: pass it (or a substitute) into DoseEngine.compute_dose.
    """
    SPECS = MappingProxyType({
        "paracetamol": DrugRule(
            label="Paracetamol",
            mg_per_kg=15, max_mg_per_dose=1000, max_mg_per_day_per_kg=75
        ),
        "ibuprofen": DrugRule(
            label="Ibuprofen",
            mg_per_kg=10, max_mg_per_dose=400, max_mg_per_day_per_kg=40
        ),
        "ceftriaxone": DrugRule(
            label="Ceftriaxone",
            mg_per_kg=50, max_mg_per_dose=2000, max_mg_per_day_per_kg=100
        ),
        "diazepam": DrugRule(
            label="Diazepam",
            mg_per_kg=0.3, max_mg_per_dose=10
        ),
        "adrenaline": DrugRule(
            label="Adrenaline (Epinephrine)",
            mg_per_kg=0.01, max_mg_per_dose=0.5
        ),
    })
