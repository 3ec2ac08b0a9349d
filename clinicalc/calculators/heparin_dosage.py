from dataclasses import dataclass
from textwrap import dedent
from typing import Optional

from clinicalc.calculators.base import Calculator
from clinicalc.constants import HEPARIN_CONSTANTS as HEP
from clinicalc.formatting import fmt
from clinicalc.models import Reference
from clinicalc.parsing import check_choice, check_number, get_bool, get_float, get_text
from clinicalc.safety import ALWAYS, bulleted, compose, rule


@dataclass(frozen=True)
class HeparinCase:
    weight: float
    treatment_type: str
    dosing_schedule: str
    high_bleeding_risk: bool
    renal_insufficiency: bool
    elderly_patient: bool
    concentration: Optional[float]
    dose: float = 0.0
    frequency: str = ""

    @property
    def therapeutic(self) -> bool:
        return self.treatment_type == HEP.THERAPEUTIC


SAFETY_WARNINGS = (
    rule(lambda c: c.high_bleeding_risk, "⚠️ ALTO RIESGO HEMORRÁGICO - Monitoreo estrecho"),
    rule(lambda c: c.renal_insufficiency, "⚠️ INSUFICIENCIA RENAL - Dosis ajustada"),
    rule(lambda c: c.elderly_patient, "⚠️ PACIENTE GERIÁTRICO - Considerar factores adicionales"),
    rule(lambda c: c.therapeutic and c.dose > HEP.HIGH_THERAPEUTIC_DOSE_MG,
         "⚠️ DOSIS ALTA - Verificar peso y esquema"),
    rule(ALWAYS, "⚠️ Verificar contraindicaciones antes de administrar",
         "⚠️ Monitorear signos de sangrado"),
)

MONITORING = (
    rule(lambda c: c.treatment_type == HEP.PROPHYLACTIC,
         "📊 Conteo plaquetario cada 2-3 días",
         "📊 Vigilancia de signos de sangrado"),
    rule(lambda c: c.therapeutic,
         "📊 Anti-Xa a las 4h post-dosis (objetivo: 0.5-1.0 U/mL)",
         "📊 Conteo plaquetario cada 2-3 días",
         "📊 Creatinina sérica periódica"),
    rule(lambda c: c.renal_insufficiency,
         "📊 Monitoreo de función renal más frecuente",
         "📊 Considerar anti-Xa si disponible"),
    rule(lambda c: c.elderly_patient, "📊 Evaluación de caídas y sangrado"),
    rule(ALWAYS, "📊 Educar al paciente sobre signos de sangrado"),
)

_INTERPRETATION = dedent("""
    **Interpretación Clínica - Heparina de Bajo Peso Molecular:**

    💉 **Dosis Recomendada:** {dose} mg {frequency}
    📏 **Volumen:** {volume}
    🎯 **Tipo:** {treatment_type}

    **📋 Protocolo Basado en:**
    • Hospital Universitario de Navarra (España)
    • Guías Europeas de Anticoagulación
    • Ajustes por función renal y factores de riesgo

    **⚠️ RECORDATORIO CRÍTICO:**
    • Esta calculadora es para ENOXAPARINA (Clexane®)
    • Verificar contraindicaciones antes de administrar
    • Monitoreo obligatorio según tipo de tratamiento
    • Ajustar dosis según respuesta clínica
    • En caso de sangrado, suspender inmediatamente

    **🔬 Fórmulas Utilizadas:**
    • Profiláctico: 40 mg/24h (20 mg si alto riesgo)
    • Terapéutico: 1 mg/kg/12h o 1.5 mg/kg/24h
    • Ajustes: -25% en insuficiencia renal
""").strip("\n")


def prophylactic_dose(high_bleeding_risk: bool, renal_insufficiency: bool, elderly: bool) -> float:
    dose = HEP.PROPHYLACTIC_DOSE
    if high_bleeding_risk or renal_insufficiency:
        dose = HEP.PROPHYLACTIC_REDUCED_DOSE
    elif elderly:
        dose = HEP.PROPHYLACTIC_ELDERLY_DOSE
    return dose


def therapeutic_dose(weight: float, schedule: str, renal_insufficiency: bool):
    """Returns (dose mg, frequency). Dose is snapped to the 2.5 mg syringe graduation."""
    dose_per_kg, frequency = HEP.THERAPEUTIC_SCHEDULES.get(
        schedule, HEP.THERAPEUTIC_SCHEDULES["1 mg/kg cada 12h"])
    dose = dose_per_kg * weight
    if renal_insufficiency:
        dose *= HEP.RENAL_FACTOR
    # round() is half-to-even: 66 mg -> 65.0, 49.5 mg -> 50.0
    dose = round(dose / HEP.SYRINGE_STEP_MG) * HEP.SYRINGE_STEP_MG
    return float(dose), frequency


class HeparinDosageCalculator(Calculator):
    """
    Enoxaparin (LMWH) dosing: fixed prophylactic tiers or weight-based
    therapeutic schedules, with renal and bleeding-risk adjustments.
    """
    calculator_id = "heparin_dosage"
    name = "Dosificación de Heparina (HBPM)"
    category = "pharmacology"

    def _collect_errors(self, inputs, errors):
        check_number(inputs, "patient_weight", errors,
                     missing="El peso del paciente es obligatorio",
                     invalid="El peso debe ser un número válido",
                     accept=lambda w: 3.0 <= w <= 200.0,
                     out_of_range="El peso debe estar entre 3 kg y 200 kg")
        treatment = check_choice(inputs, "treatment_type", errors,
                                 missing="El tipo de tratamiento es obligatorio",
                                 invalid="Tipo de tratamiento inválido",
                                 choices=HEP.TREATMENT_TYPES)
        # Schedule is only required once the therapeutic branch is chosen
        if treatment == HEP.THERAPEUTIC:
            check_choice(inputs, "dosing_schedule", errors,
                         missing="El esquema de dosificación es obligatorio para tratamiento terapéutico",
                         invalid="Esquema de dosificación inválido",
                         choices=HEP.THERAPEUTIC_SCHEDULES)
        check_number(inputs, "drug_concentration", errors,
                     missing=None,
                     invalid="La concentración debe ser un número válido mayor a 0",
                     accept=lambda c: c > 0)

    def _parse(self, inputs) -> HeparinCase:
        weight = get_float(inputs, "patient_weight")
        treatment = inputs["treatment_type"]
        schedule = get_text(inputs, "dosing_schedule", "")
        bleeding = get_bool(inputs, "high_bleeding_risk")
        renal = get_bool(inputs, "renal_insufficiency")
        elderly = get_bool(inputs, "elderly_patient")

        if treatment == HEP.THERAPEUTIC:
            dose, frequency = therapeutic_dose(weight, schedule, renal)
        else:
            dose, frequency = prophylactic_dose(bleeding, renal, elderly), HEP.PROPHYLACTIC_FREQUENCY

        return HeparinCase(
            weight=weight, treatment_type=treatment, dosing_schedule=schedule,
            high_bleeding_risk=bleeding, renal_insufficiency=renal, elderly_patient=elderly,
            concentration=get_float(inputs, "drug_concentration"),
            dose=dose, frequency=frequency,
        )

    def _compute(self, case: HeparinCase):
        if case.concentration is not None:
            volume = fmt(case.dose / case.concentration, 2)
        else:
            volume = "No calculado (concentración no proporcionada)"

        return {
            "recommended_dose": fmt(case.dose, 1),
            "administration_frequency": case.frequency,
            "safety_warnings": bulleted(compose(SAFETY_WARNINGS, case)),
            "monitoring_recommendations": bulleted(compose(MONITORING, case)),
            "volume_to_administer": volume,
        }

    def interpret(self, result):
        return _INTERPRETATION.format(
            dose=result.result_values.get("recommended_dose", ""),
            frequency=result.result_values.get("administration_frequency", ""),
            volume=result.result_values.get("volume_to_administer", ""),
            treatment_type=result.input_values.get("treatment_type", ""),
        )

    def references(self):
        return [
            Reference("Protocolo de Anticoagulación con HBPM",
                      "Hospital Universitario de Navarra, España", year=2023),
            Reference("Guía ESC para el Diagnóstico y Manejo del Tromboembolismo Pulmonar",
                      "European Society of Cardiology", year=2022),
            Reference("Low-Molecular-Weight Heparin Dosing Guidelines",
                      "American College of Chest Physicians", year=2021),
            Reference("Anticoagulación en Insuficiencia Renal",
                      "Sociedad Española de Nefrología", year=2023),
        ]
