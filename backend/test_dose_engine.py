import math
import unittest
from types import MappingProxyType

from constants import DRUG_LIBRARY, DrugRule
from dose_engine import DoseEngine
from models import DoseRequest, DoseResult, ErrorCode


class TestDoseEngine(unittest.TestCase):

    def setUp(self):
        self.rules = DRUG_LIBRARY.SPECS

    def dose(self, weight, drug_id, concentration=None, rules=None):
        outcome = DoseEngine.compute_dose(
            DoseRequest(weight_kg=weight, drug_id=drug_id, concentration_mg_per_ml=concentration),
            self.rules if rules is None else rules
        )
        return outcome

    def test_01_paracetamol_10kg(self):
        """Scenario A: 10 kg paracetamol is below the cap."""
        outcome = self.dose(10, "paracetamol")
        self.assertTrue(outcome.success)
        res = outcome.result
        self.assertIsInstance(res, DoseResult)
        self.assertAlmostEqual(res.total_dose_mg, 150.0)
        self.assertFalse(res.was_capped)
        self.assertAlmostEqual(res.daily_max_mg, 750.0)
        self.assertIsNone(res.volume_ml)
        self.assertEqual(res.label, "Paracetamol")
        self.assertEqual(res.mg_per_kg, 15)

    def test_02_paracetamol_100kg_is_capped(self):
        """Scenario B: raw 1500 mg > 1000 mg cap."""
        res = self.dose(100, "paracetamol").result
        self.assertEqual(res.total_dose_mg, 1000.0)
        self.assertTrue(res.was_capped)
        # Daily ceiling is still per-kg, uncapped
        self.assertAlmostEqual(res.daily_max_mg, 7500.0)
        # Per-kg rate reported unchanged
        self.assertEqual(res.mg_per_kg, 15)

    def test_03_adrenaline_with_concentration(self):
        """Scenario C: 5 kg adrenaline at 1 mg/mL."""
        res = self.dose(5, "adrenaline", concentration=1).result
        self.assertAlmostEqual(res.total_dose_mg, 0.05)
        self.assertFalse(res.was_capped)
        self.assertAlmostEqual(res.volume_ml, 0.05)
        self.assertIsNone(res.daily_max_mg)
        self.assertEqual(res.concentration_mg_per_ml, 1.0)

    def test_04_uncapped_dose_is_linear(self):
        rules = MappingProxyType({"plain": DrugRule(label="Plain", mg_per_kg=2.5)})
        for weight in (0.3, 1, 7.25, 42, 180):
            res = self.dose(weight, "plain", rules=rules).result
            self.assertAlmostEqual(res.total_dose_mg, 2.5 * weight)
            self.assertFalse(res.was_capped)

    def test_05_dose_exactly_at_cap_is_not_capped(self):
        rules = MappingProxyType({"edge": DrugRule(label="Edge", mg_per_kg=10, max_mg_per_dose=400)})
        res = self.dose(40, "edge", rules=rules).result
        self.assertEqual(res.total_dose_mg, 400.0)
        self.assertFalse(res.was_capped)

        res = self.dose(40.5, "edge", rules=rules).result
        self.assertEqual(res.total_dose_mg, 400.0)
        self.assertTrue(res.was_capped)

    def test_06_volume_absent_without_usable_concentration(self):
        """Absent volume must stay None, never 0."""
        for conc in (None, 0, -5, math.nan, math.inf, "24"):
            res = self.dose(10, "ibuprofen", concentration=conc).result
            self.assertIsNone(res.volume_ml, f"volume computed for concentration={conc!r}")
            self.assertIsNone(res.concentration_mg_per_ml)

    def test_07_volume_uses_capped_total(self):
        res = self.dose(100, "ibuprofen", concentration=20).result
        self.assertTrue(res.was_capped)
        self.assertAlmostEqual(res.volume_ml, 400 / 20)

    def test_08_unknown_drug(self):
        for drug_id in ("aspirin", "", None):
            outcome = self.dose(10, drug_id)
            self.assertFalse(outcome.success)
            self.assertIsNone(outcome.result)
            self.assertEqual(outcome.error.code, ErrorCode.UNKNOWN_DRUG)
            self.assertEqual(outcome.error.field, "drug_id")

    def test_09_invalid_weight(self):
        for weight in (0, -3, math.nan, math.inf, "10", None, True):
            outcome = self.dose(weight, "paracetamol")
            self.assertFalse(outcome.success, f"weight={weight!r} accepted")
            self.assertIsNone(outcome.result)
            self.assertEqual(outcome.error.code, ErrorCode.INVALID_WEIGHT)
            self.assertEqual(outcome.error.field, "weight_kg")

    def test_10_weight_checked_before_drug(self):
        outcome = self.dose(0, "aspirin")
        self.assertEqual(outcome.error.code, ErrorCode.INVALID_WEIGHT)

    def test_11_injected_table_replaces_default(self):
        rules = MappingProxyType({"paracetamol": DrugRule(label="Test", mg_per_kg=1)})
        res = self.dose(10, "paracetamol", rules=rules).result
        self.assertAlmostEqual(res.total_dose_mg, 10.0)
        self.assertIsNone(res.daily_max_mg)

    def test_12_rule_invariants(self):
        for rule in DRUG_LIBRARY.SPECS.values():
            self.assertGreater(rule.mg_per_kg, 0)
            if rule.max_mg_per_dose is not None:
                self.assertGreater(rule.max_mg_per_dose, 0)
        with self.assertRaises(ValueError):
            DrugRule(label="Bad", mg_per_kg=0)
        with self.assertRaises(ValueError):
            DrugRule(label="Bad", mg_per_kg=1, max_mg_per_dose=-1)
        with self.assertRaises(ValueError):
            DrugRule(label="Bad", mg_per_kg=1, max_mg_per_day_per_kg=0)

    def test_13_default_table_is_read_only(self):
        with self.assertRaises(TypeError):
            DRUG_LIBRARY.SPECS["new"] = DrugRule(label="New", mg_per_kg=1)


if __name__ == '__main__':
    unittest.main()
