import unittest

from clinicalc.calculators import (
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
from clinicalc.calculators.electrolyte_management import plan_potassium, plan_sodium, sodium_safety_cap
from clinicalc.calculators.iv_drip_rate import format_duration
from clinicalc.calculators.pediatric_dosage import adjust_for_age
from clinicalc.models import UnsupportedSelectorError


class TestClinicalScenarios(unittest.TestCase):
    """
    Bedside cases with hand-checked expected outputs.
    Run with: python -m unittest test_clinical_scenarios.py
    """

    # --- DOSING ---

    def test_01_weight_based_dose(self):
        """70 kg x 5 mg/kg at 50 mg/mL -> 350 mg in 7 mL."""
        print("\nTEST 1: Weight-based dose")
        result = MedicationDosageCalculator().calculate(
            {"patient_weight": "70", "dose_per_kg": "5", "concentration": "50"})
        self.assertEqual(result.result_values["total_dose"], "350.00")
        self.assertEqual(result.result_values["volume_to_administer"], "7.00")
        self.assertEqual(result.result_values["safety_check"], "✅ Cálculo dentro de rangos normales")

    def test_02_large_volume_flagged_first(self):
        """Volume > 20 mL wins over every other check."""
        result = MedicationDosageCalculator().calculate(
            {"patient_weight": "100", "dose_per_kg": "60", "concentration": "10"})
        self.assertEqual(result.result_values["safety_check"], "⚠️ Volumen alto - Verificar cálculo")

    def test_03_heparin_syringe_rounding(self):
        """66 kg at 1 mg/kg snaps to 65.0 mg; renal reduction gives 50.0 mg."""
        print("\nTEST 3: Enoxaparin 2.5 mg graduation")
        calc = HeparinDosageCalculator()
        base = {"patient_weight": "66", "treatment_type": "Terapéutico",
                "dosing_schedule": "1 mg/kg cada 12h"}

        result = calc.calculate(base)
        self.assertEqual(result.result_values["recommended_dose"], "65.0")
        self.assertEqual(result.result_values["administration_frequency"], "cada 12 horas")
        self.assertEqual(result.result_values["volume_to_administer"],
                         "No calculado (concentración no proporcionada)")

        renal = calc.calculate(dict(base, renal_insufficiency="true", drug_concentration="100"))
        self.assertEqual(renal.result_values["recommended_dose"], "50.0")
        self.assertEqual(renal.result_values["volume_to_administer"], "0.50")
        self.assertIn("⚠️ INSUFICIENCIA RENAL - Dosis ajustada", renal.result_values["safety_warnings"])

    def test_04_heparin_prophylaxis_tiers(self):
        calc = HeparinDosageCalculator()
        base = {"patient_weight": "80", "treatment_type": "Profiláctico"}
        self.assertEqual(calc.calculate(base).result_values["recommended_dose"], "40.0")
        self.assertEqual(calc.calculate(dict(base, elderly_patient="true"))
                         .result_values["recommended_dose"], "30.0")
        # Bleeding risk outranks age
        self.assertEqual(calc.calculate(dict(base, elderly_patient="true", high_bleeding_risk="true"))
                         .result_values["recommended_dose"], "20.0")

    def test_05_pediatric_standard_dose(self):
        """Amoxicillin 20 kg, 5 years: 50 mg/kg/day split twice."""
        print("\nTEST 5: Pediatric amoxicillin")
        result = PediatricDosageCalculator().calculate({
            "patient_weight": "20", "patient_age_months": "60",
            "medication": "Amoxicilina", "medication_concentration": "50"})
        values = result.result_values
        self.assertEqual(values["recommended_dose_per_kg"], "50.0")
        self.assertEqual(values["total_daily_dose"], "1000.0")
        self.assertEqual(values["dose_per_administration"], "500.0")
        self.assertEqual(values["volume_per_dose"], "10.00")
        self.assertEqual(values["doses_per_day"], "2")
        self.assertEqual(values["dosing_schedule"], "Cada 12 horas (8:00 AM y 8:00 PM)")
        self.assertIn("penicilina", values["safety_warnings"])

    def test_06_ibuprofen_contraindicated_under_six_months(self):
        """Age contraindication zeroes the dose and says why."""
        result = PediatricDosageCalculator().calculate({
            "patient_weight": "6", "patient_age_months": "4", "medication": "Ibuprofeno"})
        self.assertEqual(result.result_values["recommended_dose_per_kg"], "0.0")
        self.assertEqual(result.result_values["total_daily_dose"], "0.0")
        self.assertEqual(result.result_values["volume_per_dose"], "No calculado")
        self.assertIn("🚫 CONTRAINDICADO en menores de 6 meses", result.result_values["safety_warnings"])

    def test_07_pediatric_adjustment_chain(self):
        """Neonate x premature x renal factors multiply."""
        self.assertAlmostEqual(adjust_for_age(10.0, 0.5, True, "Paracetamol"), 10.0 * 0.5 * 0.7)
        self.assertAlmostEqual(adjust_for_age(10.0, 6, False, "Paracetamol"), 8.0)
        self.assertEqual(adjust_for_age(10.0, 11, False, "Loratadina"), 0.0)

        result = PediatricDosageCalculator().calculate({
            "patient_weight": "15", "patient_age_months": "36", "medication": "Paracetamol",
            "severity": "Severa", "renal_function": "Insuficiencia Moderada"})
        # 60 x 1.2 x 0.6
        self.assertEqual(result.result_values["recommended_dose_per_kg"], "43.2")

    def test_08_custom_medication(self):
        result = PediatricDosageCalculator().calculate({
            "patient_weight": "10", "patient_age_months": "24", "medication": "Otro medicamento",
            "custom_dose_per_kg": "10", "custom_doses_per_day": "2"})
        self.assertEqual(result.result_values["total_daily_dose"], "100.0")
        self.assertEqual(result.result_values["dose_per_administration"], "50.0")

    def test_09_unknown_medication(self):
        """Passes validation, fails at computation time."""
        calc = PediatricDosageCalculator()
        inputs = {"patient_weight": "10", "patient_age_months": "24", "medication": "Aspirina"}
        self.assertTrue(calc.validate(inputs).is_valid)
        with self.assertRaises(UnsupportedSelectorError) as ctx:
            calc.calculate(inputs)
        self.assertEqual(str(ctx.exception), "Medicamento no encontrado: Aspirina")

    # --- CONVERSIONS & INFUSIONS ---

    def test_10_unit_conversions(self):
        print("\nTEST 10: Unit conversions")
        calc = UnitConverterCalculator()
        mg_ml = calc.calculate({"conversion_type": "mg → mL", "input_value": "500", "concentration": "100"})
        self.assertEqual(mg_ml.result_values["converted_value"], "5.000")
        self.assertEqual(mg_ml.result_values["output_unit"], "mL")

        meq = calc.calculate({"conversion_type": "mEq → mg", "input_value": "40",
                              "substance_for_meq": "KCl (Cloruro de Potasio)"})
        self.assertEqual(meq.result_values["converted_value"], "2980.00")
        self.assertIn("⚡ POTASIO", meq.result_values["clinical_notes"])

        insulin = calc.calculate({"conversion_type": "Unidades → mL", "input_value": "10",
                                  "insulin_type": "Insulina Lenta (40 U/mL)"})
        self.assertEqual(insulin.result_values["converted_value"], "0.25")
        self.assertIn("U-40", insulin.result_values["clinical_notes"])

    def test_11_conversion_inversion(self):
        """mcg -> mg -> mcg returns the starting value."""
        calc = UnitConverterCalculator()
        mg = calc.calculate({"conversion_type": "mcg → mg", "input_value": "2500"})
        back = calc.calculate({"conversion_type": "mg → mcg",
                               "input_value": mg.result_values["converted_value"]})
        self.assertEqual(mg.result_values["converted_value"], "2.500")
        self.assertEqual(back.result_values["converted_value"], "2500.0")

        # mg -> mL -> mg at the same concentration, within the 3-decimal mL rounding
        for dose_mg, concentration in ((7, 3), (1000, 7), (500, 100), (12.5, 0.4), (0.25, 2)):
            ml = calc.calculate({"conversion_type": "mg → mL", "input_value": str(dose_mg),
                                 "concentration": str(concentration)})
            back = calc.calculate({"conversion_type": "mL → mg",
                                   "input_value": ml.result_values["converted_value"],
                                   "concentration": str(concentration)})
            self.assertAlmostEqual(float(back.result_values["converted_value"]), dose_mg,
                                   delta=0.0005 * concentration + 0.005,
                                   msg=f"{dose_mg} mg at {concentration} mg/mL")

    def test_12_unsupported_conversion(self):
        calc = UnitConverterCalculator()
        with self.assertRaises(UnsupportedSelectorError):
            calc.calculate({"conversion_type": "libras → kg", "input_value": "10"})

    def test_13_drip_rate(self):
        """1000 mL over 8 h with a 20 gtt/mL set."""
        print("\nTEST 13: IV drip rate")
        result = IVDripRateCalculator().calculate(
            {"total_volume": "1000", "infusion_time_hours": "8", "drop_factor": "20 gtt/mL"})
        values = result.result_values
        self.assertEqual(values["flow_rate"], "125.0")
        self.assertEqual(values["drip_rate"], "41.7")
        self.assertEqual(values["drops_per_15_seconds"], "10.4")
        self.assertEqual(values["infusion_duration"], "8 horas")
        self.assertIn("✅ Parámetros dentro de rangos seguros", values["safety_warnings"])

    def test_14_duration_text(self):
        self.assertEqual(format_duration(2.5), "2h 30min")
        self.assertEqual(format_duration(0.75), "45 minutos")
        self.assertEqual(format_duration(1.0), "1 hora")

    # --- FLUIDS & ELECTROLYTES ---

    def test_15_fluid_balance(self):
        """70 kg adult: insensible 1050 mL, near-neutral balance."""
        print("\nTEST 15: Fluid balance")
        result = FluidBalanceCalculator().calculate({
            "patient_weight": "70", "oral_intake": "1500", "iv_fluids": "1000",
            "urine_output": "1500"})
        values = result.result_values
        self.assertEqual(values["total_intake"], "2500")
        self.assertEqual(values["insensible_losses"], "1050")
        self.assertEqual(values["total_output"], "2550")
        self.assertEqual(values["fluid_balance"], "-50")
        self.assertTrue(values["balance_interpretation"].startswith("✅ BALANCE EQUILIBRADO"))

    def test_16_fever_increases_insensible_losses(self):
        calc = FluidBalanceCalculator()
        base = {"patient_weight": "70"}
        afebrile = calc.calculate(base).result_values["insensible_losses"]
        febrile = calc.calculate(dict(base, has_fever="true", temperature="39")).result_values
        self.assertEqual(afebrile, "1050")
        # 1050 x 1.26
        self.assertEqual(febrile["insensible_losses"], "1323")

    def test_17_sodium_safety_cap(self):
        """Correction never exceeds 12 mEq/L per 24 h."""
        print("\nTEST 17: Sodium correction cap")
        plan = plan_sodium(120, 140, 70, 24, neurological_symptoms=False)
        self.assertAlmostEqual(plan.deficit, 840.0)
        self.assertAlmostEqual(plan.corrected_amount, sodium_safety_cap(70, 24))
        self.assertAlmostEqual(plan.rate, 21.0)

        # Symptomatic patients get 25% more, but only over a full day
        symptomatic = plan_sodium(120, 140, 70, 24, neurological_symptoms=True)
        self.assertAlmostEqual(symptomatic.rate, 26.25)
        short = plan_sodium(120, 140, 70, 12, neurological_symptoms=True)
        self.assertAlmostEqual(short.corrected_amount, sodium_safety_cap(70, 12))

    def test_18_potassium_limits(self):
        iv = plan_potassium(3.0, 4.0, 70, "Vía Intravenosa", "Normal", "Normal")
        self.assertAlmostEqual(iv.deficit, 280.0)
        self.assertAlmostEqual(iv.dose, 40.0)
        self.assertAlmostEqual(iv.infusion_rate, 20.0)

        renal = plan_potassium(3.0, 4.0, 70, "Vía Intravenosa", "Insuficiencia Severa", "Arritmias")
        self.assertAlmostEqual(renal.dose, 20.0)
        self.assertAlmostEqual(renal.infusion_rate, 10.0)

        oral = plan_potassium(3.0, 4.0, 70, "Vía Oral", "Normal", "Normal")
        self.assertAlmostEqual(oral.dose, 80.0)
        self.assertEqual(oral.infusion_rate, 0.0)

    def test_19_electrolyte_report(self):
        result = ElectrolyteManagementCalculator().calculate({
            "patient_weight": "70", "current_sodium": "120", "target_sodium": "140",
            "current_potassium": "3.0", "target_potassium": "4.0"})
        values = result.result_values
        self.assertEqual(values["sodium_deficit"], "840.0")
        self.assertEqual(values["sodium_replacement_rate"], "21.00")
        self.assertEqual(values["sodium_solution_volume"], "3273")
        self.assertEqual(values["potassium_dose"], "40.0")
        self.assertIn("⚠️ HIPONATREMIA GRAVE", values["safety_warnings"])

    # --- VITALS & ANTHROPOMETRY ---

    def test_20_bmi(self):
        """170 cm / 70 kg -> 24.2, normal weight."""
        print("\nTEST 20: BMI")
        result = BMICalculator().calculate({"height": "170", "weight": "70"})
        self.assertEqual(result.result_values["bmi"], "24.2")
        self.assertEqual(result.result_values["category"], "Peso normal")
        self.assertEqual(result.result_values["weight_range"], "53.5 - 72.0 kg")

    def test_21_bmi_bands(self):
        calc = BMICalculator()
        cases = [("50", "Bajo peso"), ("80", "Sobrepeso"), ("100", "Obesidad grado I"),
                 ("130", "Obesidad grado III")]
        for weight, category in cases:
            result = calc.calculate({"height": "170", "weight": weight})
            self.assertEqual(result.result_values["category"], category, weight)

    def test_22_map(self):
        """120/80 -> 93.3 mmHg."""
        result = MAPCalculator().calculate({"systolic_bp": "120", "diastolic_bp": "80"})
        self.assertEqual(result.result_values["map"], "93.3")
        self.assertEqual(result.result_values["map_interpretation"],
                         "PAM ALTA - Considerar tratamiento antihipertensivo")

        shock = MAPCalculator().calculate(
            {"systolic_bp": "70", "diastolic_bp": "40", "clinical_context": "Choque"})
        self.assertEqual(shock.result_values["map"], "50.0")
        self.assertTrue(shock.result_values["perfusion_status"].endswith("(Choque: objetivo PAM >65-70 mmHg)"))

    def test_23_minute_ventilation(self):
        result = MinuteVentilationCalculator().calculate({"respiratory_rate": "12", "tidal_volume": "500"})
        self.assertEqual(result.result_values["minute_ventilation"], "6.00")
        # Default 70 kg
        self.assertEqual(result.result_values["ventilation_per_kg"], "85.7")
        self.assertTrue(result.result_values["ventilation_assessment"].startswith("VENTILACIÓN NORMAL"))

    # --- SCORES ---

    def test_24_braden(self):
        """All items at their maximum is the no-risk ceiling of 23."""
        print("\nTEST 24: Braden scale")
        calc = BradenScaleCalculator()
        best = {"sensory_perception": "4", "moisture": "4", "activity": "4",
                "mobility": "4", "nutrition": "4", "friction_shear": "3"}
        result = calc.calculate(best)
        self.assertEqual(result.result_values["total_score"], "23")
        self.assertEqual(result.result_values["risk_level"], "Sin riesgo")

        worst = {key: "1" for key in best}
        result = calc.calculate(worst)
        self.assertEqual(result.result_values["total_score"], "6")
        self.assertEqual(result.result_values["risk_level"], "Riesgo muy alto")
        self.assertIn("🚨 FACTORES DE ALTO RIESGO:", result.result_values["risk_factors_analysis"])

    def test_25_glasgow(self):
        """4/5/6 is full consciousness; 1/1/1 raises the critical alerts."""
        calc = GlasgowComaScaleCalculator()
        full = calc.calculate({"eye_response": "4", "verbal_response": "5", "motor_response": "6"})
        self.assertEqual(full.result_values["total_score"], "15")
        self.assertEqual(full.result_values["consciousness_level"], "Conciencia plena")
        self.assertTrue(full.result_values["emergency_alerts"].startswith("✅ SIN ALERTAS CRÍTICAS"))

        coma = calc.calculate({"eye_response": "1", "verbal_response": "1", "motor_response": "1"})
        self.assertEqual(coma.result_values["total_score"], "3")
        self.assertEqual(coma.result_values["consciousness_level"], "Estado grave / Coma")
        self.assertIn("🚨 ALERTA CRÍTICA: Glasgow ≤8", coma.result_values["emergency_alerts"])
        self.assertIn("🚨 ALERTA MÁXIMA: Glasgow ≤5", coma.result_values["emergency_alerts"])

        text = calc.get_interpretation(coma)
        self.assertIn("PUNTUACIÓN TOTAL: 3/15 puntos", text)

    def test_26_apgar(self):
        """Scores come from the option label prefix."""
        print("\nTEST 26: Apgar score")
        calc = ApgarScoreCalculator()
        vigorous = {
            "appearance_color": "1 - Extremidades cianóticas, cuerpo rosado",
            "pulse_heart_rate": "2 - Más de 100 lpm",
            "grimace_reflex": "2 - Llanto vigoroso",
            "activity_muscle_tone": "2 - Movimientos activos",
            "respiratory_effort": "2 - Llanto fuerte",
            "evaluation_time": "1 minuto",
            "gestational_age": "39",
        }
        result = calc.calculate(vigorous)
        values = result.result_values
        self.assertEqual(values["total_score"], "9")
        self.assertEqual(values["clinical_status"], "Buen estado")
        self.assertTrue(values["clinical_interpretation"].endswith("(A término - expectativas normales)"))
        self.assertIn("👨‍👩‍👧‍👦 APOYO FAMILIAR:", values["follow_up_recommendations"])
        self.assertIn("- Apariencia (Color): 1/2 puntos", calc.get_interpretation(result))

        depressed = {key: "0" for key in ("appearance_color", "pulse_heart_rate", "grimace_reflex",
                                          "activity_muscle_tone", "respiratory_effort")}
        depressed.update(evaluation_time="5 minutos", resuscitation_needed="true", birth_weight="1200")
        values = calc.calculate(depressed).result_values
        self.assertEqual(values["clinical_status"], "Asistencia inmediata")
        self.assertIn("⏰ CONSIDERACIONES A LOS 5 MINUTOS:", values["immediate_actions"])
        self.assertIn("📋 PROTOCOLO POST-REANIMACIÓN:", values["immediate_actions"])
        self.assertIn("⚖️ MONITOREO MUY BAJO PESO:", values["monitoring_protocol"])

    # --- CROSS-CUTTING ---

    def test_27_idempotence(self):
        """Same inputs, same result values."""
        inputs = {"patient_weight": "70", "current_sodium": "130", "target_sodium": "138",
                  "current_potassium": "3.2", "target_potassium": "4.0", "neurological_symptoms": "true"}
        calc = ElectrolyteManagementCalculator()
        self.assertEqual(calc.calculate(inputs).result_values, calc.calculate(inputs).result_values)

    def test_28_inputs_echoed(self):
        inputs = {"height": "170", "weight": "70", "extra": "ignored"}
        result = BMICalculator().calculate(inputs)
        self.assertEqual(result.input_values, inputs)

    def test_29_bmi_rises_with_weight(self):
        """
        SCENARIO: same 170 cm patient weighed repeatedly while gaining.
        1 kg moves the BMI by ~0.35, so each step shows up at one decimal.
        """
        print("\nTEST 29: BMI monotonic in weight")
        calc = BMICalculator()
        readings = [float(calc.calculate({"height": "170", "weight": str(kg)}).result_values["bmi"])
                    for kg in range(40, 151)]
        for lighter, heavier in zip(readings, readings[1:]):
            self.assertGreater(heavier, lighter)

        # Finer steps may round to the same value but never go backwards
        fine = [float(calc.calculate({"height": "170", "weight": f"{70 + i / 10:.1f}"}).result_values["bmi"])
                for i in range(30)]
        self.assertEqual(fine, sorted(fine))


if __name__ == "__main__":
    unittest.main()
