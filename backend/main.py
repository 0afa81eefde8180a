# main.py

import logging
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, StrictBool, StrictFloat, StrictInt, StrictStr

from constants import (
    VERSION,
    CORS_ORIGINS,
    LOG_LEVEL,
    REFERENCE_LIST_PATH,
    DRUG_LIBRARY,
    FLUID_CONSTANTS,
    DrugRule
)
from models import (
    DoseRequest,
    FluidRequest,
    CalculationError,
    ErrorCode
)
from dose_engine import DoseEngine
from fluid_engine import FluidEngine
from presentation import parse_number, format_dose, dose_summary, format_fluids, fluid_summary
from reference_list import load_reference_list, ReferenceListUnavailable, EMPTY_MESSAGE

# --- 1. CONFIGURATION & LOGGING ---
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger("pediadose-api")

app = FastAPI(
    title="PediaDose API",
    version=VERSION,
    description="Weight-based drug dosing and IV fluid calculator. \n\n"
                "**WARNING**: Decision Support Tool Only. Verify every dose against your protocol.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- 2. INJECTED COLLABORATORS ---
def get_drug_rules() -> Mapping[str, DrugRule]:
    return DRUG_LIBRARY.SPECS


def get_reference_list_path() -> Path:
    return REFERENCE_LIST_PATH


# --- 3. INPUT SCHEMAS ---
# Numbers may arrive as raw form strings ("12 kg"); parse_number coerces them.
# Strict members keep JSON booleans as bool, which parse_number rejects.
RawNumber = Union[StrictFloat, StrictInt, StrictStr, StrictBool, None]


class DoseBody(BaseModel):
    weight: RawNumber = Field(None, description="Weight in kg")
    drug_id: Optional[str] = Field(None, description="Key in the drug rule table")
    concentration: RawNumber = Field(None, description="Optional mg/mL, enables volume")

    class Config:
        json_schema_extra = {
            "example": {"weight": 10, "drug_id": "paracetamol", "concentration": 24}
        }


class FluidBody(BaseModel):
    weight: RawNumber = Field(None, description="Weight in kg")
    bolus_rate: RawNumber = Field(None, description="mL/kg, one of 10 | 20 | 30. Defaults to 20")


# --- 4. RESPONSE SCHEMAS ---
class DrugRuleResponse(BaseModel):
    id: str
    label: str
    mg_per_kg: float
    max_mg_per_dose: Optional[float] = None
    max_mg_per_day_per_kg: Optional[float] = None


class DoseResponse(BaseModel):
    # Unrounded values
    total_dose_mg: float
    was_capped: bool
    volume_ml: Optional[float] = None
    daily_max_mg: Optional[float] = None
    drug_id: str
    label: str
    mg_per_kg: float
    max_mg_per_dose: Optional[float] = None
    concentration_mg_per_ml: Optional[float] = None

    # UX
    display: Dict[str, str]
    summary: str
    generated_at: datetime = Field(default_factory=datetime.now)


class FluidResponse(BaseModel):
    maintenance_ml_per_day: float
    maintenance_ml_per_hour: float
    bolus_ml: float
    deficit_5_ml: float
    deficit_7_ml: float
    deficit_10_ml: float
    weight_kg: float
    bolus_rate_ml_per_kg: float

    display: Dict[str, str]
    summary: str
    generated_at: datetime = Field(default_factory=datetime.now)


class MedicationResponse(BaseModel):
    name: str
    concentration: str
    usual_dose: str
    warning: str


class MedicationListResponse(BaseModel):
    drugs: List[MedicationResponse]
    message: Optional[str] = None


def _reject(error: CalculationError):
    logger.warning(f"Calculation rejected: {error.code.value} ({error.field}): {error.message}")
    raise HTTPException(
        status_code=422,
        detail={"code": error.code.value, "field": error.field, "message": error.message}
    )


# --- 5. ENDPOINTS ---
@app.get("/")
def read_root():
    return {"status": "active", "message": "PediaDose API is running successfully!"}


@app.get("/health")
def health_check():
    """K8s/AWS Health Probe"""
    return {"status": "active", "version": VERSION, "module": "pediadose-calculation-engine"}


@app.get("/drugs", response_model=List[DrugRuleResponse])
def list_drugs(rules: Mapping[str, DrugRule] = Depends(get_drug_rules)):
    return [DrugRuleResponse(id=drug_id, **asdict(rule)) for drug_id, rule in rules.items()]


@app.post("/dose", response_model=DoseResponse)
def calculate_dose(body: DoseBody, rules: Mapping[str, DrugRule] = Depends(get_drug_rules)):
    """
    Per-kg dose with per-dose cap, daily maximum and (if a concentration is
    given) the volume to draw up.
    """
    try:
        logger.info(f"Dose request: drug={body.drug_id}, weight={body.weight}")
        request = DoseRequest(
            weight_kg=parse_number(body.weight),
            drug_id=body.drug_id or "",
            concentration_mg_per_ml=parse_number(body.concentration) if body.concentration is not None else None
        )
        outcome = DoseEngine.compute_dose(request, rules)
    except Exception as e:
        logger.error(f"Internal Dose Engine Failure: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal Dose Engine Error")

    if not outcome.success:
        _reject(outcome.error)

    result = outcome.result
    return DoseResponse(**asdict(result), display=format_dose(result), summary=dose_summary(result))


@app.post("/fluids", response_model=FluidResponse)
def calculate_fluids(body: FluidBody):
    """Holliday-Segar maintenance, bolus and 5/7/10% deficit volumes."""
    rate = None
    if body.bolus_rate is not None:
        rate = parse_number(body.bolus_rate)
        if rate not in FLUID_CONSTANTS.ALLOWED_BOLUS_RATES:
            allowed = ", ".join(f"{r:g}" for r in FLUID_CONSTANTS.ALLOWED_BOLUS_RATES)
            _reject(CalculationError(
                code=ErrorCode.INVALID_BOLUS_RATE,
                field="bolus_rate_ml_per_kg",
                message=f"Bolus rate must be one of {allowed} mL/kg."
            ))

    try:
        logger.info(f"Fluid request: weight={body.weight}, bolus_rate={rate}")
        outcome = FluidEngine.compute_fluids(FluidRequest(
            weight_kg=parse_number(body.weight),
            bolus_rate_ml_per_kg=rate
        ))
    except Exception as e:
        logger.error(f"Internal Fluid Engine Failure: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal Fluid Engine Error")

    if not outcome.success:
        _reject(outcome.error)

    result = outcome.result
    return FluidResponse(**asdict(result), display=format_fluids(result), summary=fluid_summary(result))


@app.get("/medications", response_model=MedicationListResponse)
def list_medications(path: Path = Depends(get_reference_list_path)):
    """Reference cards for display. Not used by any calculation."""
    try:
        entries = load_reference_list(path)
    except ReferenceListUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))

    if not entries:
        return MedicationListResponse(drugs=[], message=EMPTY_MESSAGE)
    return MedicationListResponse(drugs=[MedicationResponse(**entry.display()) for entry in entries])
