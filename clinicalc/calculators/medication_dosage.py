from dataclasses import dataclass
from textwrap import dedent

from clinicalc.calculators.base import Calculator
from clinicalc.formatting import fmt
from clinicalc.models import Reference
from clinicalc.parsing import check_number, get_float
from clinicalc.safety import ALWAYS, first_message, rule


@dataclass(frozen=True)
class DosageCase:
    weight: float
    dose_per_kg: float
    concentration: float
    total_dose: float = 0.0
    volume: float = 0.0


# Evaluated top to bottom, first hit wins
SAFETY_CHECKS = (
    rule(lambda c: c.volume > 20.0, "⚠️ Volumen alto - Verificar cálculo"),
    rule(lambda c: c.volume < 0.1, "⚠️ Volumen muy pequeño - Verificar precisión"),
    rule(lambda c: c.total_dose > c.weight * 50, "⚠️ Dosis alta - Consultar con médico"),
    rule(ALWAYS, "✅ Cálculo dentro de rangos normales"),
)

_INTERPRETATION = dedent("""
    **Interpretación Clínica:**

    📋 **Dosis Calculada:** {total_dose} mg
    💉 **Volumen a Administrar:** {volume} mL

    🔍 **Verificación:** {safety_check}

    **⚠️ IMPORTANTE:**
    • Siempre verificar la dosis con un profesional médico
    • Confirmar la concentración del medicamento antes de administrar
    • Considerar factores individuales del paciente (edad, función renal/hepática)
    • Para medicamentos de alto riesgo, usar el principio de doble verificación

    **Fórmulas utilizadas:**
    • Dosis total = Dosis (mg/kg) × Peso (kg)
    • Volumen = Dosis total (mg) ÷ Concentración (mg/mL)
""").strip("\n")


class MedicationDosageCalculator(Calculator):
    """Weight-based dose and the volume of stock solution that delivers it."""
    calculator_id = "medication_dosage"
    name = "Dosificación de Medicamentos"
    category = "pharmacology"

    def _collect_errors(self, inputs, errors):
        check_number(inputs, "patient_weight", errors,
                     missing="El peso del paciente es obligatorio",
                     invalid="El peso debe ser un número válido",
                     accept=lambda w: 0.5 <= w <= 250.0,
                     out_of_range="El peso debe estar entre 0.5 kg y 250 kg")
        check_number(inputs, "dose_per_kg", errors,
                     missing="La dosis por kg es obligatoria",
                     invalid="La dosis debe ser un número válido",
                     accept=lambda d: 0 < d <= 100.0,
                     out_of_range="La dosis debe ser mayor a 0 y típicamente menor a 100 mg/kg")
        check_number(inputs, "concentration", errors,
                     missing="La concentración es obligatoria",
                     invalid="La concentración debe ser un número válido",
                     accept=lambda c: c > 0,
                     out_of_range="La concentración debe ser mayor a 0")

    def _parse(self, inputs) -> DosageCase:
        weight = get_float(inputs, "patient_weight")
        dose_per_kg = get_float(inputs, "dose_per_kg")
        concentration = get_float(inputs, "concentration")

        # Total dose (mg) = dose (mg/kg) x weight (kg); volume (mL) = total / (mg/mL)
        total_dose = dose_per_kg * weight
        return DosageCase(weight, dose_per_kg, concentration,
                          total_dose=total_dose,
                          volume=total_dose / concentration)

    def _compute(self, case: DosageCase):
        return {
            "total_dose": fmt(case.total_dose, 2),
            "volume_to_administer": fmt(case.volume, 2),
            "safety_check": first_message(SAFETY_CHECKS, case),
        }

    def interpret(self, result):
        values = result.result_values
        return _INTERPRETATION.format(
            total_dose=values.get("total_dose", ""),
            volume=values.get("volume_to_administer", ""),
            safety_check=values.get("safety_check", ""),
        )

    def references(self):
        return [
            Reference("Cálculo de Dosis de Medicamentos en Enfermería",
                      "Elsevier - Enfermería Clínica (España)", year=2023),
            Reference("Medication Dosage Calculations", "WTCS Pressbooks",
                      url="https://wtcs.pressbooks.pub/dosagecalculations/"),
            Reference("Safe Medication Administration", "World Health Organization", year=2022),
        ]
