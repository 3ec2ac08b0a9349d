from dataclasses import dataclass
from textwrap import dedent

from clinicalc.calculators.base import Calculator
from clinicalc.formatting import fmt
from clinicalc.models import Reference
from clinicalc.parsing import check_number, get_float, get_text
from clinicalc.safety import ALWAYS, compose, first_message, join_lines, one_of, rule

DEFAULT_WEIGHT_KG = 70.0
DEFAULT_SETTING = "Reposo"

VENTILATION_BANDS = (
    rule(lambda c: c.minute_ventilation < 4.0, "HIPOVENTILACIÓN - Ventilación inadecuada"),
    rule(lambda c: c.minute_ventilation <= 5.0, "VENTILACIÓN BAJA - Monitoreo estrecho"),
    rule(lambda c: c.minute_ventilation <= 8.0, "VENTILACIÓN NORMAL - Parámetros adecuados"),
    rule(lambda c: c.minute_ventilation <= 10.0, "VENTILACIÓN ELEVADA - Evaluar causa"),
    rule(ALWAYS, "HIPERVENTILACIÓN - Intervención requerida"),
)

SETTING_NOTES = {
    "Ventilación Mecánica": " (VM: ajustar parámetros)",
    "Cuidados Intensivos": " (UCI: objetivo 6-8 L/min)",
    "Postoperatorio": " (Post-Qx: vigilar depresión respiratoria)",
    "Ejercicio": " (esperado aumento durante actividad)",
}

RECOMMENDATIONS = (
    one_of(
        rule(lambda c: c.minute_ventilation < 4.0,
             "URGENTE: Evaluar insuficiencia respiratoria",
             "Considerar ventilación mecánica",
             "Gasometría arterial inmediata",
             "Monitoreo continuo de saturación"),
        rule(lambda c: c.minute_ventilation < 5.0,
             "Aumentar frecuencia de monitoreo",
             "Evaluar función pulmonar",
             "Considerar oxigenoterapia",
             "Vigilar signos de fatiga respiratoria"),
        rule(lambda c: c.minute_ventilation > 10.0,
             "Evaluar causa de hiperventilación",
             "Descartar dolor, ansiedad, acidosis",
             "Considerar sedación si apropiado",
             "Monitorear pH y CO2"),
        rule(ALWAYS,
             "Mantener monitoreo de rutina",
             "Controles según protocolo"),
    ),
    one_of(
        rule(lambda c: c.respiratory_rate < 12, "BRADIAPNEA: Evaluar depresión del SNC"),
        rule(lambda c: c.respiratory_rate > 20, "TAQUIPNEA: Investigar causa subyacente"),
    ),
    one_of(
        rule(lambda c: c.tidal_volume_l < 0.4, "VOLUMEN BAJO: Riesgo de atelectasias"),
        rule(lambda c: c.tidal_volume_l > 0.6, "VOLUMEN ALTO: Riesgo de barotrauma"),
    ),
    one_of(
        rule(lambda c: c.setting == "Ventilación Mecánica",
             "Ajustar parámetros del ventilador",
             "Objetivo: 6-8 mL/kg peso ideal"),
        rule(lambda c: c.setting == "Cuidados Intensivos",
             "Protocolo de destete si apropiado",
             "Evaluación diaria de sedación"),
        rule(lambda c: c.setting == "Postoperatorio",
             "Vigilar efectos de anestesia",
             "Fisioterapia respiratoria"),
    ),
)

ALARMS = (
    rule(ALWAYS, "PARÁMETROS DE ALARMA SUGERIDOS:"),
    one_of(
        rule(lambda c: c.respiratory_rate < 8, "⚠️ FR CRÍTICA: <8 resp/min"),
        rule(lambda c: c.respiratory_rate < 12, "⚠️ BRADIAPNEA: <12 resp/min"),
        rule(lambda c: c.respiratory_rate > 30, "⚠️ TAQUIPNEA SEVERA: >30 resp/min"),
        rule(lambda c: c.respiratory_rate > 24, "⚠️ TAQUIPNEA: >24 resp/min"),
    ),
    one_of(
        rule(lambda c: c.tidal_volume_ml < 300, "⚠️ VT BAJO: <300 mL"),
        rule(lambda c: c.tidal_volume_ml > 800, "⚠️ VT ALTO: >800 mL"),
    ),
    one_of(
        rule(lambda c: c.minute_ventilation < 4.0, "⚠️ VE CRÍTICA: <4 L/min"),
        rule(lambda c: c.minute_ventilation > 12.0, "⚠️ VE ALTA: >12 L/min"),
    ),
    rule(ALWAYS,
         "",
         "LÍMITES RECOMENDADOS:",
         "• FR: 8-30 resp/min",
         "• VT: 300-800 mL",
         "• VE: 4-12 L/min"),
)

_INTERPRETATION = dedent("""
    INTERPRETACIÓN CLÍNICA - VENTILACIÓN MINUTO

    VENTILACIÓN MINUTO: {ve} L/min
    VENTILACIÓN/PESO: {ve_per_kg} mL/kg/min
    FRECUENCIA RESPIRATORIA: {rr} resp/min
    VOLUMEN CORRIENTE: {tv} mL
    EVALUACIÓN: {assessment}

    FÓRMULA UTILIZADA:
    VE = FR × VT
    VE = {rr} × {tv_l} = {ve} L/min

    VALORES DE REFERENCIA:
    • VE normal en reposo: 5-8 L/min
    • FR normal adultos: 12-20 resp/min
    • VT normal adultos: 400-600 mL
    • VE/kg normal: 80-120 mL/kg/min

    SIGNIFICADO CLÍNICO:
    La ventilación minuto representa el volumen total de aire movilizado por los pulmones en un minuto. Es fundamental para evaluar la eficacia ventilatoria y guiar ajustes en ventilación mecánica.

    APLICACIONES:
    • Monitoreo de pacientes críticos
    • Ajuste de parámetros ventilatorios
    • Evaluación de función pulmonar
    • Detección de fatiga respiratoria
""").strip("\n")


@dataclass(frozen=True)
class VentilationCase:
    respiratory_rate: float
    tidal_volume_ml: float
    weight: float
    setting: str

    @property
    def tidal_volume_l(self) -> float:
        return self.tidal_volume_ml / 1000.0

    @property
    def minute_ventilation(self) -> float:
        """L/min."""
        return self.respiratory_rate * self.tidal_volume_l

    @property
    def per_kg(self) -> float:
        """mL/kg/min."""
        return (self.minute_ventilation * 1000) / self.weight


class MinuteVentilationCalculator(Calculator):
    calculator_id = "minute_ventilation"
    name = "Ventilación Minuto"
    category = "respiratory"

    def _collect_errors(self, inputs, errors):
        check_number(inputs, "respiratory_rate", errors,
                     missing="La frecuencia respiratoria es obligatoria",
                     invalid="La frecuencia respiratoria debe ser un número válido",
                     accept=lambda rr: 5.0 <= rr <= 60.0,
                     out_of_range="La frecuencia respiratoria debe estar entre 5-60 resp/min")
        check_number(inputs, "tidal_volume", errors,
                     missing="El volumen corriente es obligatorio",
                     invalid="El volumen corriente debe ser un número válido",
                     accept=lambda tv: 200.0 <= tv <= 1000.0,
                     out_of_range="El volumen corriente debe estar entre 200-1000 mL")
        check_number(inputs, "patient_weight", errors,
                     missing=None,
                     invalid="El peso debe estar entre 10-200 kg",
                     accept=lambda w: 10.0 <= w <= 200.0)

    def _parse(self, inputs) -> VentilationCase:
        weight = get_float(inputs, "patient_weight")
        return VentilationCase(
            respiratory_rate=get_float(inputs, "respiratory_rate"),
            tidal_volume_ml=get_float(inputs, "tidal_volume"),
            weight=DEFAULT_WEIGHT_KG if weight is None else weight,
            setting=get_text(inputs, "clinical_setting", DEFAULT_SETTING),
        )

    def _compute(self, case: VentilationCase):
        assessment = first_message(VENTILATION_BANDS, case) + SETTING_NOTES.get(case.setting, "")
        return {
            "minute_ventilation": fmt(case.minute_ventilation, 2),
            "ventilation_per_kg": fmt(case.per_kg, 1),
            "ventilation_assessment": assessment,
            "clinical_recommendations": join_lines(compose(RECOMMENDATIONS, case)),
            "alarm_parameters": join_lines(compose(ALARMS, case)),
        }

    def interpret(self, result):
        values = result.result_values
        tidal_ml = get_float(result.input_values, "tidal_volume")
        return _INTERPRETATION.format(
            ve=values.get("minute_ventilation", ""),
            ve_per_kg=values.get("ventilation_per_kg", ""),
            rr=result.input_values.get("respiratory_rate", ""),
            tv=result.input_values.get("tidal_volume", ""),
            tv_l=fmt(tidal_ml / 1000.0, 3) if tidal_ml is not None else "",
            assessment=values.get("ventilation_assessment", ""),
        )

    def references(self):
        return [
            Reference("MediCalculator - Ventilación Minuto", "ScyMed Medical Calculators",
                      url="https://scymed.com"),
            Reference("Parámetros Ventilatorios", "Philips Healthcare México", url="https://philips.com.mx"),
            Reference("Ventilación Mecánica en UCI", "Educación en Salud IMSS", year=2023),
            Reference("Calculadora de Ventilación", "Omni Calculator en Español",
                      url="https://www.omnicalculator.com/es"),
            Reference("Fisiología Respiratoria Aplicada", "Universidad de Los Lagos Chile", year=2022),
        ]
