import unittest

from clinicalc.calculators import (
    ALL_CALCULATORS,
    ApgarScoreCalculator,
    BMICalculator,
    BradenScaleCalculator,
    ElectrolyteManagementCalculator,
    FluidBalanceCalculator,
    GlasgowComaScaleCalculator,
    HeparinDosageCalculator,
    IVDripRateCalculator,
    MAPCalculator,
    MedicationDosageCalculator,
    MinuteVentilationCalculator,
    PediatricDosageCalculator,
    UnitConverterCalculator,
)
from clinicalc.models import InvalidInputError

# A minimal valid input map per calculator
VALID_INPUTS = {
    "medication_dosage": {"patient_weight": "70", "dose_per_kg": "5", "concentration": "50"},
    "heparin_dosage": {"patient_weight": "70", "treatment_type": "Profiláctico"},
    "unit_converter": {"conversion_type": "mcg → mg", "input_value": "250"},
    "iv_drip_rate": {"total_volume": "500", "infusion_time_hours": "4", "drop_factor": "60 gtt/mL (microgotero)"},
    "fluid_balance": {"patient_weight": "70"},
    "electrolyte_management": {"patient_weight": "70", "current_sodium": "138", "target_sodium": "140",
                               "current_potassium": "4.0", "target_potassium": "4.0"},
    "bmi_calculator": {"height": "170", "weight": "70"},
    "map_calculator": {"systolic_bp": "120", "diastolic_bp": "80"},
    "minute_ventilation": {"respiratory_rate": "14", "tidal_volume": "450"},
    "pediatric_dosage": {"patient_weight": "12", "patient_age_months": "30", "medication": "Paracetamol"},
    "braden_scale": {"sensory_perception": "3", "moisture": "3", "activity": "3",
                     "mobility": "3", "nutrition": "3", "friction_shear": "2"},
    "glasgow_coma_scale": {"eye_response": "3", "verbal_response": "4", "motor_response": "5"},
    "apgar_score": {"appearance_color": "2", "pulse_heart_rate": "2", "grimace_reflex": "2",
                    "activity_muscle_tone": "2", "respiratory_effort": "2", "evaluation_time": "5 minutos"},
}

# Required fields per calculator: an empty map yields one error for each
REQUIRED_FIELD_COUNTS = {
    "medication_dosage": 3,       # weight, dose/kg, concentration
    "heparin_dosage": 2,          # weight, treatment type
    "unit_converter": 2,          # conversion type, value
    "iv_drip_rate": 3,            # volume, hours, drop factor
    "fluid_balance": 1,           # weight
    "electrolyte_management": 5,  # weight, Na current/target, K current/target
    "bmi_calculator": 2,
    "map_calculator": 2,
    "minute_ventilation": 2,
    "pediatric_dosage": 3,        # weight, age, medication
    "braden_scale": 6,
    "glasgow_coma_scale": 3,
    "apgar_score": 6,             # five signs plus evaluation time
}


class TestStressLimits(unittest.TestCase):

    def test_01_every_calculator_has_a_valid_baseline(self):
        """Sanity: the fixtures above must calculate cleanly."""
        print("\nSTRESS TEST 1: Valid baselines")
        self.assertEqual({cls.calculator_id for cls in ALL_CALCULATORS}, set(VALID_INPUTS))
        for cls in ALL_CALCULATORS:
            calc = cls()
            inputs = VALID_INPUTS[calc.calculator_id]
            self.assertTrue(calc.validate(inputs).is_valid, calc.calculator_id)
            result = calc.calculate(inputs)
            self.assertTrue(result.result_values, calc.calculator_id)
            self.assertTrue(all(isinstance(v, str) for v in result.result_values.values()))
            self.assertTrue(calc.get_interpretation(result).strip(), calc.calculator_id)

    def test_02_empty_map_never_calculates(self):
        """
        An empty map must fail validation (fluid balance only needs weight)
        and calculate() must raise with the same aggregated errors.
        """
        print("\nSTRESS TEST 2: Empty input")
        for cls in ALL_CALCULATORS:
            calc = cls()
            validation = calc.validate({})
            self.assertFalse(validation.is_valid, calc.calculator_id)
            self.assertEqual(len(validation.errors), REQUIRED_FIELD_COUNTS[calc.calculator_id],
                             calc.calculator_id)
            with self.assertRaises(InvalidInputError) as ctx:
                calc.calculate({})
            self.assertEqual(ctx.exception.errors, validation.errors)
            self.assertEqual(str(ctx.exception), "; ".join(validation.errors))

    def test_03_errors_are_aggregated(self):
        """Every problem is reported, not only the first."""
        errors = MedicationDosageCalculator().validate({}).errors
        self.assertEqual(errors, [
            "El peso del paciente es obligatorio",
            "La dosis por kg es obligatoria",
            "La concentración es obligatoria",
        ])

        errors = GlasgowComaScaleCalculator().validate({}).errors
        self.assertEqual(errors, [
            "La respuesta ocular es obligatoria",
            "La respuesta verbal es obligatoria",
            "La respuesta motora es obligatoria",
        ])

    def test_04_malformed_numbers(self):
        calc = MedicationDosageCalculator()
        errors = calc.validate({"patient_weight": "setenta", "dose_per_kg": "NaN",
                                "concentration": "Infinity"}).errors
        self.assertEqual(errors, [
            "El peso debe ser un número válido",
            "La dosis debe ser un número válido",
            "La concentración debe ser un número válido",
        ])

    def test_05_boundaries_are_inclusive(self):
        """Declared limits are accepted, one step past is not."""
        print("\nSTRESS TEST 5: Range boundaries")
        bmi = BMICalculator()
        self.assertTrue(bmi.validate({"height": "50", "weight": "3"}).is_valid)
        self.assertTrue(bmi.validate({"height": "250", "weight": "300"}).is_valid)
        self.assertEqual(bmi.validate({"height": "49.9", "weight": "300.1"}).errors, [
            "La estatura debe estar entre 50-250 cm",
            "El peso debe estar entre 3-300 kg",
        ])

        iv = IVDripRateCalculator()
        base = VALID_INPUTS["iv_drip_rate"]
        self.assertTrue(iv.validate(dict(base, total_volume="5000", infusion_time_hours="48")).is_valid)
        self.assertEqual(iv.validate(dict(base, total_volume="0")).errors,
                         ["El volumen debe ser mayor que cero"])
        self.assertEqual(iv.validate(dict(base, infusion_time_hours="48.5")).errors,
                         ["El tiempo excede el límite máximo (48 horas)"])
        self.assertEqual(iv.validate(dict(base, drop_factor="25 gtt/mL")).errors,
                         ["Factor de goteo inválido"])

    def test_06_map_cross_field_check(self):
        """Systolic must exceed diastolic, even when one is out of range."""
        calc = MAPCalculator()
        self.assertEqual(calc.validate({"systolic_bp": "80", "diastolic_bp": "80"}).errors,
                         ["La presión sistólica debe ser mayor que la diastólica"])
        errors = calc.validate({"systolic_bp": "60", "diastolic_bp": "160"}).errors
        self.assertIn("La presión diastólica debe estar entre 30-150 mmHg", errors)
        self.assertIn("La presión sistólica debe ser mayor que la diastólica", errors)

    def test_07_conditional_requirements(self):
        """Fields that only become required once a selector is chosen."""
        heparin = HeparinDosageCalculator()
        self.assertEqual(
            heparin.validate({"patient_weight": "70", "treatment_type": "Terapéutico"}).errors,
            ["El esquema de dosificación es obligatorio para tratamiento terapéutico"])

        converter = UnitConverterCalculator()
        self.assertEqual(
            converter.validate({"conversion_type": "mg → mL", "input_value": "10"}).errors,
            ["La concentración es obligatoria para conversiones mg/mL"])
        self.assertEqual(
            converter.validate({"conversion_type": "mg → mEq", "input_value": "10",
                                "substance_for_meq": "Glucosa"}).errors,
            ["Sustancia no reconocida para conversión mEq"])

        pediatric = PediatricDosageCalculator()
        self.assertEqual(
            pediatric.validate({"patient_weight": "12", "patient_age_months": "30",
                                "medication": "Otro medicamento", "custom_doses_per_day": "2.5"}).errors,
            ["Debe especificar la dosis personalizada para 'Otro medicamento'",
             "El número de dosis debe estar entre 1-6 por día"])

    def test_08_integer_scores(self):
        """Ordinal items accept whole numbers only."""
        braden = BradenScaleCalculator()
        inputs = dict(VALID_INPUTS["braden_scale"], moisture="2.5", friction_shear="4")
        self.assertEqual(braden.validate(inputs).errors, [
            "Exposición a la humedad debe ser un número válido",
            "Fricción y deslizamiento debe estar entre 1-3",
        ])

        glasgow = GlasgowComaScaleCalculator()
        self.assertEqual(
            glasgow.validate({"eye_response": "5", "verbal_response": "4", "motor_response": "6"}).errors,
            ["La respuesta ocular debe estar entre 1-4"])

    def test_09_apgar_option_labels(self):
        calc = ApgarScoreCalculator()
        inputs = dict(VALID_INPUTS["apgar_score"], pulse_heart_rate="3 - Taquicardia",
                      grimace_reflex="Llanto", evaluation_time=" ", gestational_age="45")
        self.assertEqual(calc.validate(inputs).errors, [
            "Pulso debe tener una puntuación válida (0-2)",
            "Gesticulación debe tener una puntuación válida (0-2)",
            "El tiempo de evaluación es obligatorio",
            "La edad gestacional debe estar entre 20-44 semanas",
        ])

    def test_10_optional_fields_blank_is_fine(self):
        """Blank optional fields are treated as not provided."""
        inputs = dict(VALID_INPUTS["minute_ventilation"], patient_weight="  ")
        calc = MinuteVentilationCalculator()
        self.assertTrue(calc.validate(inputs).is_valid)
        # Falls back to the 70 kg reference adult
        self.assertEqual(calc.calculate(inputs).result_values["ventilation_per_kg"], "90.0")

    def test_11_negative_fluid_entries(self):
        calc = FluidBalanceCalculator()
        errors = calc.validate({"patient_weight": "70", "oral_intake": "-5", "vomit": "-1",
                                "temperature": "43"}).errors
        self.assertEqual(errors, [
            "La temperatura debe estar entre 35-42°C",
            "Los ingresos deben ser números no negativos",
            "Los egresos deben ser números no negativos",
        ])

    def test_12_electrolyte_ranges(self):
        calc = ElectrolyteManagementCalculator()
        inputs = dict(VALID_INPUTS["electrolyte_management"], target_sodium="150",
                      current_potassium="7", correction_time_hours="3")
        self.assertEqual(calc.validate(inputs).errors, [
            "Sodio deseado debe estar entre 135-145 mEq/L",
            "Potasio actual debe estar entre 1.5-6.0 mEq/L",
            "Tiempo de corrección debe estar entre 6-48 horas",
        ])

    def test_13_glasgow_fallback_alert(self):
        """Moderate scores with no specific trigger get the generic line."""
        result = GlasgowComaScaleCalculator().calculate(VALID_INPUTS["glasgow_coma_scale"])
        self.assertEqual(result.result_values["total_score"], "12")
        self.assertEqual(result.result_values["emergency_alerts"],
                         "📊 Estado evaluado - Ver recomendaciones específicas")

    def test_14_extreme_concentrations(self):
        """
        CRITIQUE: a concentration only has to be > 0, so 1e-320 is valid input.
        The volume overflows to infinity and must still render, not crash.
        """
        print("\nSTRESS TEST 14: Extreme concentrations")
        tiny = MedicationDosageCalculator().calculate(
            dict(VALID_INPUTS["medication_dosage"], concentration="1e-320")).result_values
        self.assertEqual(tiny["total_dose"], "350.00")
        self.assertEqual(tiny["volume_to_administer"], "Infinity")
        self.assertEqual(tiny["safety_check"], "⚠️ Volumen alto - Verificar cálculo")

        huge = MedicationDosageCalculator().calculate(
            dict(VALID_INPUTS["medication_dosage"], concentration="1e25")).result_values
        self.assertEqual(huge["volume_to_administer"], "0.00")
        self.assertEqual(huge["safety_check"], "⚠️ Volumen muy pequeño - Verificar precisión")

        heparin = HeparinDosageCalculator().calculate(
            dict(VALID_INPUTS["heparin_dosage"], drug_concentration="1e-320")).result_values
        self.assertEqual(heparin["volume_to_administer"], "Infinity")

    def test_15_huge_converted_values(self):
        """Finite results wider than 28 digits keep every integer digit."""
        calc = UnitConverterCalculator()
        wide = calc.calculate({"conversion_type": "mL → mg", "input_value": "999999",
                               "concentration": "1e25"}).result_values
        self.assertTrue(wide["converted_value"].endswith(".00"))
        self.assertEqual(float(wide["converted_value"]), 999999.0 * 1e25)

        overflow = calc.calculate({"conversion_type": "mL → mg", "input_value": "999999",
                                   "concentration": "1e308"}).result_values
        self.assertEqual(overflow["converted_value"], "Infinity")

    def test_16_fluid_totals_overflow(self):
        values = FluidBalanceCalculator().calculate(
            {"patient_weight": "70", "oral_intake": "1e308", "iv_fluids": "1e308"}).result_values
        self.assertEqual(values["total_intake"], "Infinity")
        self.assertEqual(values["fluid_balance"], "Infinity")
        self.assertIn("BALANCE MUY POSITIVO", values["balance_interpretation"])


if __name__ == "__main__":
    unittest.main()
