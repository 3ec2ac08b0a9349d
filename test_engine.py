import unittest

from clinicalc import MEDICAL_DISCLAIMER, __version__
from clinicalc.calculators import ALL_CALCULATORS, BMICalculator, Calculator
from clinicalc.formatting import fmt, plain
from clinicalc.models import (
    CalculationResult,
    CalculatorNotFoundError,
    ClinicalCalcError,
    InvalidInputError,
    Reference,
    ValidationResult,
)
from clinicalc.parsing import check_number, get_bool, get_text, is_blank, to_float, to_int
from clinicalc.safety import ALWAYS, compose, first_message, one_of, rule
from clinicalc.service import CalculatorService, build_default_service


class TestModels(unittest.TestCase):

    def test_01_validation_result_invariant(self):
        """is_valid is True exactly when there are no errors."""
        print("\nTEST 1: ValidationResult invariant")
        self.assertTrue(ValidationResult.from_errors([]).is_valid)
        self.assertFalse(ValidationResult.from_errors(["x"]).is_valid)
        with self.assertRaises(ValueError):
            ValidationResult(is_valid=True, errors=["contradiction"])

    def test_02_result_copies_inputs(self):
        """Later edits to the caller's map must not leak into the result."""
        inputs = {"height": "170"}
        result = CalculationResult("bmi_calculator", inputs, {"bmi": "24.2"})
        inputs["height"] = "999"
        self.assertEqual(result.input_values["height"], "170")
        self.assertGreater(result.timestamp, 1_600_000_000_000)  # ms, not s

    def test_03_exception_hierarchy(self):
        """Every engine error is a ValueError and carries a readable message."""
        err = InvalidInputError(["a es obligatorio", "b debe ser un número válido"])
        self.assertIsInstance(err, ClinicalCalcError)
        self.assertIsInstance(err, ValueError)
        self.assertEqual(str(err), "a es obligatorio; b debe ser un número válido")
        self.assertEqual(str(CalculatorNotFoundError("nope")), "Calculator not found: nope")

    def test_04_package_metadata(self):
        self.assertEqual(__version__, "1.0.0")
        self.assertIn("profesional", MEDICAL_DISCLAIMER)


class TestParsingAndFormatting(unittest.TestCase):

    def test_01_decimal_parsing(self):
        """Decimal literals only; NaN and infinities are malformed."""
        print("\nTEST: Decimal parsing")
        self.assertEqual(to_float("70"), 70.0)
        self.assertEqual(to_float(" 70.5 "), 70.5)
        self.assertEqual(to_float("-3"), -3.0)
        for garbage in ("abc", "", "NaN", "Infinity", "-inf", "1,5", "7 0"):
            self.assertIsNone(to_float(garbage), garbage)

    def test_02_integer_parsing(self):
        self.assertEqual(to_int("4"), 4)
        self.assertIsNone(to_int("4.0"))
        self.assertIsNone(to_int("cuatro"))

    def test_03_blank_and_flags(self):
        self.assertTrue(is_blank(None))
        self.assertTrue(is_blank("   "))
        self.assertFalse(is_blank("0"))
        self.assertTrue(get_bool({"f": "true"}, "f"))
        for value in ("True", "1", "yes", ""):
            self.assertFalse(get_bool({"f": value}, "f"))
        self.assertFalse(get_bool({}, "f"))

    def test_04_text_default_only_when_absent(self):
        self.assertEqual(get_text({}, "ctx", "Normal"), "Normal")
        self.assertEqual(get_text({"ctx": ""}, "ctx", "Normal"), "")

    def test_05_three_tier_messages(self):
        """missing / malformed / out-of-range each produce their own message."""
        def run(value):
            errors = []
            inputs = {} if value is None else {"w": value}
            check_number(inputs, "w", errors, missing="falta", invalid="inválido",
                         accept=lambda w: 1 <= w <= 10, out_of_range="rango")
            return errors

        self.assertEqual(run(None), ["falta"])
        self.assertEqual(run("x"), ["inválido"])
        self.assertEqual(run("11"), ["rango"])
        self.assertEqual(run("5"), [])

    def test_06_half_up_rendering(self):
        """Half-up on the shortest decimal representation."""
        print("\nTEST: Half-up rendering")
        self.assertEqual(fmt(65.05, 1), "65.1")
        self.assertEqual(fmt(2.5, 0), "3")
        self.assertEqual(fmt(93.33333, 1), "93.3")
        self.assertEqual(fmt(-0.01, 1), "0.0")
        self.assertEqual(fmt(5, 3), "5.000")

    def test_07_plain_rendering(self):
        self.assertEqual(plain(100.0), "100.0")
        self.assertEqual(plain(74.5), "74.5")
        self.assertEqual(plain(12345678.0), "1.2345678E7")

    def test_08_extreme_magnitudes(self):
        """Overflowed and very wide values render instead of raising."""
        print("\nTEST: Extreme magnitudes")
        self.assertEqual(fmt(float("inf"), 2), "Infinity")
        self.assertEqual(fmt(float("-inf"), 1), "-Infinity")
        self.assertEqual(fmt(float("nan"), 0), "NaN")
        self.assertEqual(fmt(1e31, 2), "1" + "0" * 31 + ".00")
        self.assertEqual(len(fmt(1e308, 0)), 309)
        self.assertEqual(fmt(1e-320, 3), "0.000")
        self.assertEqual(plain(float("inf")), "Infinity")


class TestAdvisoryRules(unittest.TestCase):

    def test_01_compose_keeps_table_order(self):
        table = (
            rule(lambda x: x > 0, "positivo"),
            rule(lambda x: x > 10, "grande", "muy grande"),
            rule(ALWAYS, "siempre"),
        )
        self.assertEqual(compose(table, 20), ["positivo", "grande", "muy grande", "siempre"])
        self.assertEqual(compose(table, -1), ["siempre"])

    def test_02_one_of_is_an_elif_chain(self):
        table = (one_of(rule(lambda x: x > 10, "alto"), rule(lambda x: x > 0, "medio")),)
        self.assertEqual(compose(table, 20), ["alto"])
        self.assertEqual(compose(table, 5), ["medio"])
        self.assertEqual(compose(table, -5), [])
        self.assertEqual(first_message(table, -5, default="nada"), "nada")


class TestRegistry(unittest.TestCase):

    def setUp(self):
        self.service = build_default_service()

    def test_01_all_calculators_registered(self):
        """Thirteen calculators, each under its own unique id."""
        print("\nTEST: Default registry")
        ids = self.service.get_all_calculator_ids()
        self.assertEqual(len(ids), 13)
        self.assertEqual(len(set(ids)), 13)
        for expected in ("medication_dosage", "heparin_dosage", "unit_converter", "iv_drip_rate",
                         "fluid_balance", "electrolyte_management", "bmi_calculator", "map_calculator",
                         "minute_ventilation", "pediatric_dosage", "braden_scale",
                         "glasgow_coma_scale", "apgar_score"):
            self.assertIn(expected, self.service)

    def test_02_every_calculator_is_described(self):
        for cls in ALL_CALCULATORS:
            calculator = cls()
            self.assertIsInstance(calculator, Calculator)
            self.assertTrue(calculator.name)
            self.assertTrue(calculator.category)
            references = calculator.get_references()
            self.assertGreater(len(references), 0, calculator.calculator_id)
            self.assertTrue(all(isinstance(r, Reference) and r.title and r.source for r in references))

    def test_03_unknown_id(self):
        """Unknown ids raise, except validate_inputs which reports."""
        with self.assertRaises(CalculatorNotFoundError):
            self.service.resolve("nope")
        with self.assertRaises(CalculatorNotFoundError):
            self.service.perform_calculation("nope", {})
        with self.assertRaises(CalculatorNotFoundError):
            self.service.get_references("nope")
        self.assertIsNone(self.service.get_calculator("nope"))

        validation = self.service.validate_inputs("nope", {})
        self.assertFalse(validation.is_valid)
        self.assertEqual(validation.errors, ["Calculator not found: nope"])

    def test_04_dispatch_round_trip(self):
        """validate -> calculate -> interpret through the service."""
        inputs = {"height": "170", "weight": "70"}
        self.assertTrue(self.service.validate_inputs("bmi_calculator", inputs).is_valid)
        result = self.service.perform_calculation("bmi_calculator", inputs)
        self.assertEqual(result.calculator_id, "bmi_calculator")
        text = self.service.get_interpretation("bmi_calculator", result)
        self.assertIn("IMC CALCULADO: 24.2 kg/m²", text)

    def test_05_register_replaces(self):
        service = CalculatorService()
        first, second = BMICalculator(), BMICalculator()
        service.register(first)
        service.register(second)
        self.assertEqual(len(service), 1)
        self.assertIs(service.resolve("bmi_calculator"), second)
        self.assertEqual(service.list_calculators(),
                         [{"id": "bmi_calculator", "name": "Índice de Masa Corporal (IMC)",
                           "category": "anthropometry"}])


if __name__ == "__main__":
    unittest.main()
