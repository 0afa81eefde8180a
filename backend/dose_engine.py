"""
PediaDose: Dose Engine
======================
Weight-based dose calculation against an injected rule table.
Pure: no rounding, no I/O, no state.
"""

from typing import Mapping

from constants import DrugRule
from models import (
    DoseRequest,
    DoseResult,
    CalculationOutcome,
    CalculationInputError,
    InvalidWeightError,
    UnknownDrugError,
    is_positive_number
)


class DoseEngine:

    @staticmethod
    def _resolve_rule(drug_id: str, rules: Mapping[str, DrugRule]) -> DrugRule:
        if not drug_id or not isinstance(drug_id, str):
            raise UnknownDrugError("Please select a drug.")
        rule = rules.get(drug_id)
        if rule is None:
            raise UnknownDrugError(f"Unknown drug: '{drug_id}'")
        return rule

    @staticmethod
    def _apply_cap(raw_dose_mg: float, rule: DrugRule) -> tuple:
        """
        Returns (total_dose_mg, was_capped).
        The cap only replaces the total. A dose exactly at the cap is not capped.
        """
        if rule.max_mg_per_dose is not None and raw_dose_mg > rule.max_mg_per_dose:
            return float(rule.max_mg_per_dose), True
        return raw_dose_mg, False

    @staticmethod
    def compute_dose(request: DoseRequest, rules: Mapping[str, DrugRule]) -> CalculationOutcome:
        """
        SAFE ENTRY POINT: validates, resolves the rule and computes the dose.
        Validation failures come back as a failed outcome, never as an exception.
        """
        try:
            # 1. Weight first: nothing below runs on a bad weight
            if not is_positive_number(request.weight_kg):
                raise InvalidWeightError("Please enter a valid weight.")
            weight = float(request.weight_kg)

            # 2. Drug lookup
            rule = DoseEngine._resolve_rule(request.drug_id, rules)
        except CalculationInputError as e:
            return CalculationOutcome.failed(e)

        # 3. Per-kg dose, then cap
        raw_dose_mg = rule.mg_per_kg * weight
        total_dose_mg, was_capped = DoseEngine._apply_cap(raw_dose_mg, rule)

        # 4. Volume only when a usable concentration was given
        concentration = request.concentration_mg_per_ml
        if is_positive_number(concentration):
            concentration = float(concentration)
            volume_ml = total_dose_mg / concentration
        else:
            concentration = None
            volume_ml = None

        # 5. Daily ceiling
        daily_max_mg = None
        if rule.max_mg_per_day_per_kg is not None:
            daily_max_mg = rule.max_mg_per_day_per_kg * weight

        return CalculationOutcome.ok(DoseResult(
            total_dose_mg=total_dose_mg,
            was_capped=was_capped,
            volume_ml=volume_ml,
            daily_max_mg=daily_max_mg,
            drug_id=request.drug_id,
            label=rule.label,
            mg_per_kg=rule.mg_per_kg,
            max_mg_per_dose=rule.max_mg_per_dose,
            concentration_mg_per_ml=concentration
        ))
