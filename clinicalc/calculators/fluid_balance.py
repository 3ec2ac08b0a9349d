from dataclasses import dataclass
from textwrap import dedent
from typing import Tuple

from clinicalc.calculators.base import Calculator
from clinicalc.constants import FLUID_BALANCE_CONSTANTS as FB
from clinicalc.formatting import fmt
from clinicalc.models import Reference
from clinicalc.parsing import check_number, get_bool, get_float, get_text, is_blank, to_float
from clinicalc.safety import ALWAYS, compose, first_message, join_lines, one_of, rule


@dataclass(frozen=True)
class BalanceCase:
    weight: float
    temperature: float
    has_fever: bool
    mechanical_ventilation: bool
    hyperventilation: bool
    environment: str
    intake: Tuple[Tuple[str, float], ...]    # (label, mL)
    output: Tuple[Tuple[str, float], ...]
    urine_output: float = 0.0
    insensible_losses: float = 0.0

    @property
    def total_intake(self) -> float:
        return sum(value for _, value in self.intake)

    @property
    def measured_output(self) -> float:
        return sum(value for _, value in self.output)

    @property
    def total_output(self) -> float:
        return self.measured_output + self.insensible_losses

    @property
    def balance(self) -> float:
        return self.total_intake - self.total_output

    @property
    def urine_ml_kg_h(self) -> float:
        return (self.urine_output / 24.0) / self.weight


def insensible_losses(weight: float, temperature: float, has_fever: bool,
                      mechanical_ventilation: bool, hyperventilation: bool,
                      environment: str) -> float:
    """24 h insensible water loss (mL), rounded half-to-even to a whole mL."""
    if weight < FB.PEDIATRIC_WEIGHT_LIMIT_KG:
        loss = weight * FB.PEDIATRIC_INSENSIBLE_ML_PER_KG
    else:
        loss = weight * FB.ADULT_INSENSIBLE_ML_PER_KG

    if has_fever and temperature > FB.FEVER_THRESHOLD_C:
        degrees_above = temperature - FB.FEVER_THRESHOLD_C
        loss *= 1.0 + (degrees_above * FB.FEVER_PERCENT_PER_DEGREE / 100.0)

    if mechanical_ventilation:
        loss *= FB.VENTILATION_FACTOR
    elif hyperventilation:
        loss *= FB.HYPERVENTILATION_FACTOR

    loss *= FB.ENVIRONMENT_FACTORS.get(environment, 1.0)
    return float(round(loss))


BALANCE_BANDS = (
    rule(lambda c: c.balance > 1000, "⚠️ BALANCE MUY POSITIVO - Riesgo de sobrecarga circulatoria"),
    rule(lambda c: c.balance > 500, "⚠️ BALANCE POSITIVO - Monitoreo cardiaco recomendado"),
    rule(lambda c: -500.0 <= c.balance <= 500.0, "✅ BALANCE EQUILIBRADO - Dentro de rangos normales"),
    rule(lambda c: c.balance < -1000, "⚠️ BALANCE MUY NEGATIVO - Riesgo de deshidratación severa"),
    rule(lambda c: c.balance < -500, "⚠️ BALANCE NEGATIVO - Considerar reposición hídrica"),
    rule(ALWAYS, "📊 BALANCE NEUTRAL"),
)

RECOMMENDATIONS = (
    one_of(
        rule(lambda c: c.balance > 1000,
             "🚨 ACCIONES INMEDIATAS:",
             "• Suspender fluidos no esenciales",
             "• Administrar diuréticos si indicado",
             "• Monitoreo cardiaco continuo",
             "• Evaluar signos de sobrecarga"),
        rule(lambda c: c.balance > 500,
             "⚠️ PRECAUCIONES:",
             "• Reducir velocidad de infusión",
             "• Monitorear signos vitales c/2h",
             "• Vigilar edema y distensión yugular"),
        rule(lambda c: c.balance < -1000,
             "🚨 ACCIONES INMEDIATAS:",
             "• Reposición hídrica urgente",
             "• Evaluar causa de pérdidas",
             "• Monitoreo hemodinámico",
             "• Considerar soluciones isotónicas"),
        rule(lambda c: c.balance < -500,
             "⚠️ PRECAUCIONES:",
             "• Incrementar ingesta hídrica",
             "• Investigar pérdidas ocultas",
             "• Vigilar signos de deshidratación"),
    ),
    one_of(
        rule(lambda c: c.urine_ml_kg_h < 0.5,
             "🚨 OLIGURIA SEVERA:",
             "• Evaluar función renal inmediatamente",
             "• Considerar causas prererenales",
             "• Vigilar electrolitos séricos"),
        rule(lambda c: c.urine_ml_kg_h < 1.0,
             "⚠️ OLIGURIA:",
             "• Monitorear función renal",
             "• Evaluar estado de hidratación"),
        rule(lambda c: c.urine_ml_kg_h > 3.0,
             "⚠️ POLIURIA:",
             "• Descartar diabetes insípida",
             "• Evaluar medicamentos diuréticos"),
    ),
    rule(lambda c: c.has_fever,
         "🔥 MANEJO DE FIEBRE:",
         "• Incrementar fluidos 500mL por grado >37°C",
         "• Monitorear pérdidas insensibles",
         "• Considerar medios físicos de enfriamiento"),
    rule(ALWAYS,
         "📊 MONITOREO CONTINUO:",
         "• Balance hídrico cada 8 horas",
         "• Peso diario a la misma hora",
         "• Signos vitales cada 4 horas",
         "• Electrolitos séricos diarios"),
)

_INTERPRETATION = dedent("""
    INTERPRETACIÓN CLÍNICA - BALANCE HÍDRICO 24 HORAS

    💧 RESULTADOS PRINCIPALES:
    • Ingresos totales: {total_intake} mL
    • Egresos totales: {total_output} mL
    • Balance neto: {fluid_balance} mL

    📊 INTERPRETACIÓN:
    {balance_interpretation}

    🔬 METODOLOGÍA UNAM/IMSS:
    • Pérdidas insensibles: 15 mL/kg/día (adultos)
    • Ajuste por fiebre: +13% por grado >37°C
    • Factores ambientales considerados
    • Ajustes por ventilación mecánica

    ⚠️ VALORES DE REFERENCIA:
    • Balance normal: -500 a +500 mL/24h
    • Diuresis normal: 0.5-3.0 mL/kg/h
    • Pérdidas insensibles: 800-1200 mL/día (adulto 70kg)

    📋 FACTORES INFLUYENTES:
    • Temperatura corporal y fiebre
    • Estado de ventilación
    • Factores ambientales
    • Peso corporal y edad
    • Medicamentos diuréticos

    🏥 PROTOCOLO MEXICANO:
    • Basado en estándares UNAM
    • Validado por IMSS
    • Ajustado para población mexicana
    • Incluye factores de altura y clima
""").strip("\n")


def _breakdown(title: str, entries, tail) -> str:
    lines = [title]
    lines.extend(f"• {label}: {fmt(value, 0)} mL" for label, value in entries if value > 0)
    lines.extend(f"• {label}: {fmt(value, 0)} mL" for label, value in tail)
    return join_lines(lines)


class FluidBalanceCalculator(Calculator):
    """24 h intake versus measured plus insensible output."""
    calculator_id = "fluid_balance"
    name = "Balance Hídrico 24h"
    category = "fluids"

    def _collect_errors(self, inputs, errors):
        check_number(inputs, "patient_weight", errors,
                     missing="El peso del paciente es obligatorio",
                     invalid="El peso debe ser un número válido",
                     accept=lambda w: 0 < w <= 200.0,
                     out_of_range="El peso debe estar entre 1-200 kg")
        check_number(inputs, "temperature", errors,
                     missing=None,
                     invalid="La temperatura debe estar entre 35-42°C",
                     accept=lambda t: 35.0 <= t <= 42.0)

        # One message per offending field, same wording for the whole group
        for key, _ in FB.INTAKE_FIELDS:
            if not _non_negative_or_blank(inputs.get(key)):
                errors.append("Los ingresos deben ser números no negativos")
        for key, _ in FB.OUTPUT_FIELDS:
            if not _non_negative_or_blank(inputs.get(key)):
                errors.append("Los egresos deben ser números no negativos")

    def _parse(self, inputs) -> BalanceCase:
        weight = get_float(inputs, "patient_weight")
        temperature = get_float(inputs, "temperature")
        if temperature is None:
            temperature = FB.DEFAULT_TEMPERATURE_C
        has_fever = get_bool(inputs, "has_fever")
        ventilation = get_bool(inputs, "on_mechanical_ventilation")
        hyperventilation = get_bool(inputs, "hyperventilation")
        environment = get_text(inputs, "environmental_factors", FB.DEFAULT_ENVIRONMENT)

        intake = tuple((label, get_float(inputs, key) or 0.0) for key, label in FB.INTAKE_FIELDS)
        output = tuple((label, get_float(inputs, key) or 0.0) for key, label in FB.OUTPUT_FIELDS)

        return BalanceCase(
            weight=weight, temperature=temperature, has_fever=has_fever,
            mechanical_ventilation=ventilation, hyperventilation=hyperventilation,
            environment=environment, intake=intake, output=output,
            urine_output=get_float(inputs, "urine_output") or 0.0,
            insensible_losses=insensible_losses(weight, temperature, has_fever,
                                                ventilation, hyperventilation, environment),
        )

    def _compute(self, case: BalanceCase):
        intake_breakdown = _breakdown(
            "📊 DESGLOSE DE INGRESOS (24h):", case.intake,
            [("TOTAL INGRESOS", case.total_intake)])
        output_breakdown = _breakdown(
            "📊 DESGLOSE DE EGRESOS (24h):", case.output,
            [("Pérdidas insensibles", case.insensible_losses), ("TOTAL EGRESOS", case.total_output)])

        return {
            "total_intake": fmt(case.total_intake, 0),
            "total_output": fmt(case.total_output, 0),
            "insensible_losses": fmt(case.insensible_losses, 0),
            "fluid_balance": fmt(case.balance, 0),
            "balance_interpretation": first_message(BALANCE_BANDS, case),
            "intake_breakdown": intake_breakdown,
            "output_breakdown": output_breakdown,
            "clinical_recommendations": join_lines(compose(RECOMMENDATIONS, case)),
        }

    def interpret(self, result):
        values = result.result_values
        return _INTERPRETATION.format(
            total_intake=values.get("total_intake", ""),
            total_output=values.get("total_output", ""),
            fluid_balance=values.get("fluid_balance", ""),
            balance_interpretation=values.get("balance_interpretation", ""),
        )

    def references(self):
        return [
            Reference("Balance Hidroelectrolítico",
                      "Universidad Nacional Autónoma de México (UNAM)", url="https://studocu.com"),
            Reference("Manejo de Fluidos y Electrolitos",
                      "Instituto Mexicano del Seguro Social (IMSS)", year=2023),
            Reference("Pérdidas Insensibles en el Paciente Hospitalizado", "SciELO México", year=2022),
            Reference("Balance Hídrico en Cuidados Intensivos",
                      "Revista Mexicana de Medicina Crítica", year=2023),
            Reference("Fluid Balance Monitoring", "Nursing Care Plans and Documentation", year=2022),
        ]


def _non_negative_or_blank(raw) -> bool:
    if is_blank(raw):
        return True
    value = to_float(raw)
    return value is not None and value >= 0
