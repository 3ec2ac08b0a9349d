from dataclasses import dataclass
from textwrap import dedent

from clinicalc.calculators.base import Calculator
from clinicalc.formatting import fmt
from clinicalc.models import Reference
from clinicalc.parsing import check_number, get_float, get_text
from clinicalc.safety import ALWAYS, compose, first_message, join_lines, one_of, rule

DEFAULT_CONTEXT = "Paciente Estable"
DEFAULT_AGE = 45.0

PRESSURE_BANDS = (
    rule(lambda c: c.map >= 100, "PAM ELEVADA - Riesgo de daño vascular"),
    rule(lambda c: c.map >= 90, "PAM ALTA - Considerar tratamiento antihipertensivo"),
    rule(lambda c: c.map >= 70, "PAM NORMAL - Perfusión orgánica adecuada"),
    rule(lambda c: c.map >= 60, "PAM LÍMITE - Monitoreo estrecho requerido"),
    rule(lambda c: c.map >= 50, "PAM BAJA - Riesgo de hipoperfusión orgánica"),
    rule(ALWAYS, "PAM CRÍTICA - Hipoperfusión severa"),
)

PERFUSION_BANDS = (
    rule(lambda c: c.map >= 65, "PERFUSIÓN ADECUADA para la mayoría de órganos"),
    rule(lambda c: c.map >= 60, "PERFUSIÓN LÍMITE - Vigilar función renal y cerebral"),
    rule(ALWAYS, "HIPOPERFUSIÓN - Riesgo de falla orgánica"),
)

PERFUSION_TARGETS = {
    "Cuidados Intensivos": " (UCI: objetivo PAM >65 mmHg)",
    "Choque": " (Choque: objetivo PAM >65-70 mmHg)",
    "Postoperatorio": " (Post-Qx: mantener PAM >60 mmHg)",
}

RECOMMENDATIONS = (
    one_of(
        rule(lambda c: c.map < 50,
             "EMERGENCIA: Soporte vasopressor inmediato",
             "Evaluar causa de hipotensión (choque, sangrado)",
             "Monitoreo hemodinámico invasivo",
             "Acceso vascular central"),
        rule(lambda c: c.map < 60,
             "URGENTE: Reposición de volumen",
             "Considerar vasopresores si no responde",
             "Monitoreo de diuresis cada hora",
             "Evaluar perfusión periférica"),
        rule(lambda c: c.map < 70,
             "Monitoreo frecuente de signos vitales",
             "Evaluar estado de hidratación",
             "Vigilar función renal",
             "Considerar causas subyacentes"),
        rule(lambda c: c.map > 100,
             "Evaluar hipertensión arterial",
             "Considerar tratamiento antihipertensivo",
             "Investigar daño a órgano blanco",
             "Control cada 4-6 horas"),
        rule(ALWAYS,
             "Mantener monitoreo de rutina",
             "Controles según protocolo institucional",
             "Vigilar tendencias y cambios"),
    ),
    one_of(
        rule(lambda c: c.context == "Cuidados Intensivos",
             "Objetivo PAM >65 mmHg en UCI",
             "Considerar noradrenalina si PAM <60"),
        rule(lambda c: c.context == "Choque",
             "Protocolo de choque séptico/cardiogénico",
             "Lactato sérico para evaluar perfusión"),
        rule(lambda c: c.context == "Postoperatorio",
             "Evaluar pérdidas sanguíneas",
             "Analgesia adecuada para controlar TA"),
    ),
)

_INTERPRETATION = dedent("""
    INTERPRETACIÓN CLÍNICA - PRESIÓN ARTERIAL MEDIA

    PAM CALCULADA: {map} mmHg
    PRESIÓN SISTÓLICA: {systolic} mmHg
    PRESIÓN DIASTÓLICA: {diastolic} mmHg
    EVALUACIÓN: {interpretation}

    FÓRMULA UTILIZADA:
    PAM = (PAS + 2×PAD) ÷ 3
    PAM = ({systolic} + 2×{diastolic}) ÷ 3 = {map} mmHg

    VALORES DE REFERENCIA:
    • PAM ≥65 mmHg: Perfusión orgánica adecuada
    • PAM 60-64 mmHg: Perfusión límite - monitoreo
    • PAM <60 mmHg: Riesgo de hipoperfusión
    • PAM <50 mmHg: Hipoperfusión crítica

    SIGNIFICADO CLÍNICO:
    La PAM representa la presión promedio durante el ciclo cardíaco y es el principal determinante de la perfusión orgánica. Es más confiable que la presión sistólica para evaluar la perfusión renal, cerebral y coronaria.

    LIMITACIONES:
    Valores pueden verse afectados por arritmias, edad del paciente, medicamentos vasoactivos y estados patológicos específicos.
""").strip("\n")


@dataclass(frozen=True)
class PressureCase:
    systolic: float
    diastolic: float
    age: float
    context: str

    @property
    def map(self) -> float:
        return (self.systolic + 2 * self.diastolic) / 3


class MAPCalculator(Calculator):
    """Mean arterial pressure, (SBP + 2 x DBP) / 3."""
    calculator_id = "map_calculator"
    name = "Presión Arterial Media (PAM)"
    category = "cardiovascular"

    def _collect_errors(self, inputs, errors):
        check_number(inputs, "systolic_bp", errors,
                     missing="La presión sistólica es obligatoria",
                     invalid="La presión sistólica debe ser un número válido",
                     accept=lambda p: 50.0 <= p <= 250.0,
                     out_of_range="La presión sistólica debe estar entre 50-250 mmHg")
        check_number(inputs, "diastolic_bp", errors,
                     missing="La presión diastólica es obligatoria",
                     invalid="La presión diastólica debe ser un número válido",
                     accept=lambda p: 30.0 <= p <= 150.0,
                     out_of_range="La presión diastólica debe estar entre 30-150 mmHg")

        # Compared whenever both parse, even if one of them is out of range
        systolic = get_float(inputs, "systolic_bp")
        diastolic = get_float(inputs, "diastolic_bp")
        if systolic is not None and diastolic is not None and systolic <= diastolic:
            errors.append("La presión sistólica debe ser mayor que la diastólica")

        check_number(inputs, "patient_age", errors,
                     missing=None,
                     invalid="La edad debe estar entre 1-120 años",
                     accept=lambda a: 1.0 <= a <= 120.0)

    def _parse(self, inputs) -> PressureCase:
        age = get_float(inputs, "patient_age")
        return PressureCase(
            systolic=get_float(inputs, "systolic_bp"),
            diastolic=get_float(inputs, "diastolic_bp"),
            age=DEFAULT_AGE if age is None else age,
            context=get_text(inputs, "clinical_context", DEFAULT_CONTEXT),
        )

    def _compute(self, case: PressureCase):
        perfusion = first_message(PERFUSION_BANDS, case) + PERFUSION_TARGETS.get(case.context, "")
        return {
            "map": fmt(case.map, 1),
            "map_interpretation": first_message(PRESSURE_BANDS, case),
            "clinical_recommendations": join_lines(compose(RECOMMENDATIONS, case)),
            "perfusion_status": perfusion,
        }

    def interpret(self, result):
        return _INTERPRETATION.format(
            map=result.result_values.get("map", ""),
            systolic=result.input_values.get("systolic_bp", ""),
            diastolic=result.input_values.get("diastolic_bp", ""),
            interpretation=result.result_values.get("map_interpretation", ""),
        )

    def references(self):
        return [
            Reference("Calculadora de Presión Arterial Media", "Omni Calculator en Español",
                      url="https://www.omnicalculator.com/es"),
            Reference("Manejo de la Hipertensión Arterial",
                      "Instituto Mexicano del Seguro Social (IMSS)", year=2023),
            Reference("Presión Arterial y Perfusión Orgánica", "SciELO México - Medicina Crítica", year=2022),
            Reference("Guías de Hipertensión Arterial", "Sociedad Mexicana de Cardiología", year=2023),
            Reference("Mean Arterial Pressure in Critical Care", "Revista de Reumatología Clínica", year=2022),
        ]
