from dataclasses import dataclass
from textwrap import dedent
from typing import Optional

from clinicalc.calculators.base import Calculator
from clinicalc.constants import IV_CONSTANTS
from clinicalc.formatting import fmt
from clinicalc.models import Reference
from clinicalc.parsing import check_number, get_float, get_text, is_blank, to_float
from clinicalc.safety import ALWAYS, compose, join_lines, one_of, rule


@dataclass(frozen=True)
class InfusionCase:
    volume: float
    time_hours: float
    drop_factor: float
    fluid_type: str
    weight: Optional[float]
    flow_rate: float = 0.0      # mL/h
    drip_rate: float = 0.0      # gtt/min

    @property
    def ml_per_kg_per_hour(self) -> float:
        return self.flow_rate / self.weight


CONDITIONAL_WARNINGS = (
    one_of(
        rule(lambda c: c.flow_rate > 300.0, "⚠️ VELOCIDAD MUY ALTA - Riesgo de sobrecarga circulatoria"),
        rule(lambda c: c.flow_rate > 200.0, "⚠️ VELOCIDAD ALTA - Monitoreo cardiopulmonar estrecho"),
        rule(lambda c: c.flow_rate < 10.0, "⚠️ VELOCIDAD MUY LENTA - Verificar permeabilidad"),
    ),
    one_of(
        rule(lambda c: c.drip_rate > 60.0, "⚠️ GOTEO MUY RÁPIDO - Difícil de contar manualmente"),
        rule(lambda c: c.drip_rate < 5.0, "⚠️ GOTEO MUY LENTO - Riesgo de coagulación"),
    ),
    one_of(
        rule(lambda c: "Dextrosa" in c.fluid_type and c.flow_rate > 150.0,
             "⚠️ DEXTROSA RÁPIDA - Monitorear glucemia"),
        rule(lambda c: "Sangre" in c.fluid_type and c.flow_rate > 100.0,
             "⚠️ HEMODERIVADOS - Velocidad máxima excedida"),
        rule(lambda c: "Medicamento" in c.fluid_type,
             "⚠️ MEDICAMENTO DILUIDO - Verificar compatibilidad"),
    ),
    one_of(
        rule(lambda c: c.weight is not None and c.weight < 20.0 and c.flow_rate > 50.0,
             "⚠️ PACIENTE PEDIÁTRICO - Velocidad alta para el peso"),
        rule(lambda c: c.weight is not None and c.weight > 80.0 and c.ml_per_kg_per_hour > 3.0,
             "⚠️ ALTA VELOCIDAD POR PESO - Monitoreo intensivo"),
    ),
)
SAFE_PARAMETERS = "✅ Parámetros dentro de rangos seguros"
STANDING_WARNINGS = (
    "⚠️ Verificar permeabilidad de catéter antes de iniciar",
    "⚠️ Confirmar indicación médica y velocidad prescrita",
)

MONITORING = (
    rule(ALWAYS,
         "📊 SIGNOS VITALES cada 2-4 horas",
         "📊 BALANCE HÍDRICO estricto",
         "📊 SITIO DE PUNCIÓN cada hora"),
    one_of(
        rule(lambda c: c.flow_rate > 200.0,
             "📊 MONITOREO CARDIACO continuo",
             "📊 SATURACIÓN DE OXÍGENO continua",
             "📊 SIGNOS DE SOBRECARGA cada 30 min"),
        rule(lambda c: c.flow_rate > 100.0,
             "📊 SIGNOS DE SOBRECARGA cada hora",
             "📊 AUSCULTACIÓN PULMONAR cada 2h"),
    ),
    one_of(
        rule(lambda c: "Dextrosa" in c.fluid_type,
             "📊 GLUCEMIA cada 4-6 horas",
             "📊 SIGNOS DE HIPERGLUCEMIA"),
        rule(lambda c: "Salina" in c.fluid_type,
             "📊 ELECTROLITOS séricos diarios",
             "📊 SIGNOS DE HIPERNATREMIA"),
        rule(lambda c: "Lactato" in c.fluid_type,
             "📊 ESTADO ÁCIDO-BASE",
             "📊 FUNCIÓN RENAL"),
        rule(lambda c: "Sangre" in c.fluid_type,
             "📊 REACCIONES TRANSFUSIONALES",
             "📊 TEMPERATURA cada 15 min primera hora",
             "📊 HEMOGLOBINA post-transfusión"),
    ),
    rule(lambda c: c.time_hours > 24.0,
         "📊 EVALUACIÓN NUTRICIONAL diaria",
         "📊 FUNCIÓN RENAL cada 24h"),
    rule(ALWAYS,
         "📊 DOCUMENTAR volumen administrado cada turno",
         "📊 VERIFICAR bomba de infusión si disponible"),
)

_INTERPRETATION = dedent("""
    INTERPRETACIÓN CLÍNICA - VELOCIDAD DE GOTEO IV

    💧 RESULTADOS PRINCIPALES:
    • Velocidad de goteo: {drip_rate} gtt/min
    • Velocidad de flujo: {flow_rate} mL/h
    • Gotas en 15 segundos: {drops_15} gtt
    • Duración total: {duration}

    📋 PARÁMETROS DE CÁLCULO:
    • Volumen total: {volume} mL
    • Factor de goteo: {drop_factor}
    • Duración programada: {duration}

    🔬 FÓRMULAS UTILIZADAS:
    • Goteo (gtt/min) = (Volumen × Factor) ÷ Tiempo(min)
    • Flujo (mL/h) = Volumen ÷ Tiempo(h)
    • Conteo 15 seg = Goteo ÷ 4

    ⚠️ VERIFICACIONES OBLIGATORIAS:
    • Confirmar PRESCRIPCIÓN MÉDICA exacta
    • Verificar FACTOR DE GOTEO del equipo
    • Comprobar PERMEABILIDAD del catéter
    • Ajustar bomba de infusión si disponible

    📊 TÉCNICA DE CONTEO:
    • Contar gotas durante 15 segundos
    • Multiplicar por 4 para obtener gtt/min
    • Ajustar manualmente la llave de paso
    • Verificar cada 30-60 minutos

    🏥 PROTOCOLOS MEXICANOS:
    • Basado en estándares Roosevelt Hospital
    • Factores de goteo validados clínicamente
    • Límites de seguridad por población
    • Monitoreo según tipo de fluido
""").strip("\n")


def format_duration(hours: float) -> str:
    """2.5 -> '2h 30min'; 0.75 -> '45 minutos'; 1.0 -> '1 hora'."""
    whole_hours = int(hours)
    minutes = int((hours - whole_hours) * 60)
    if whole_hours == 0:
        return f"{minutes} minutos"
    if minutes == 0:
        return f"{whole_hours} hora{'s' if whole_hours > 1 else ''}"
    return f"{whole_hours}h {minutes}min"


def _check_bounded(inputs, key, errors, missing, invalid, not_positive, too_large, limit):
    raw = inputs.get(key)
    if is_blank(raw):
        errors.append(missing)
        return
    value = to_float(raw)
    if value is None:
        errors.append(invalid)
    elif value <= 0:
        errors.append(not_positive)
    elif value > limit:
        errors.append(too_large)


class IVDripRateCalculator(Calculator):
    """Gravity infusion: mL/h, gtt/min and the 15-second drop count."""
    calculator_id = "iv_drip_rate"
    name = "Velocidad de Goteo IV"
    category = "fluids"

    def _collect_errors(self, inputs, errors):
        _check_bounded(inputs, "total_volume", errors,
                       "El volumen total es obligatorio",
                       "El volumen debe ser un número válido",
                       "El volumen debe ser mayor que cero",
                       "El volumen excede el límite máximo (5000 mL)",
                       IV_CONSTANTS.MAX_VOLUME_ML)
        _check_bounded(inputs, "infusion_time_hours", errors,
                       "El tiempo de infusión es obligatorio",
                       "El tiempo debe ser un número válido",
                       "El tiempo debe ser mayor que cero",
                       "El tiempo excede el límite máximo (48 horas)",
                       IV_CONSTANTS.MAX_TIME_HOURS)

        drop_factor = inputs.get("drop_factor")
        if is_blank(drop_factor):
            errors.append("El factor de goteo es obligatorio")
        elif drop_factor not in IV_CONSTANTS.DROP_FACTORS:
            errors.append("Factor de goteo inválido")

        check_number(inputs, "patient_weight", errors,
                     missing=None,
                     invalid="El peso debe ser un número válido entre 1-200 kg",
                     accept=lambda w: 0 < w <= IV_CONSTANTS.MAX_WEIGHT_KG)

    def _parse(self, inputs) -> InfusionCase:
        volume = get_float(inputs, "total_volume")
        hours = get_float(inputs, "infusion_time_hours")
        drop_factor = IV_CONSTANTS.DROP_FACTORS[inputs["drop_factor"]]
        return InfusionCase(
            volume=volume,
            time_hours=hours,
            drop_factor=drop_factor,
            fluid_type=get_text(inputs, "fluid_type", IV_CONSTANTS.DEFAULT_FLUID),
            weight=get_float(inputs, "patient_weight"),
            flow_rate=volume / hours,
            drip_rate=(volume * drop_factor) / (hours * 60),
        )

    def _compute(self, case: InfusionCase):
        warnings = compose(CONDITIONAL_WARNINGS, case) or [SAFE_PARAMETERS]
        warnings.extend(STANDING_WARNINGS)

        return {
            "drip_rate": fmt(case.drip_rate, 1),
            "flow_rate": fmt(case.flow_rate, 1),
            # Nurses count for 15 s and multiply by 4
            "drops_per_15_seconds": fmt(case.drip_rate / 4.0, 1),
            "infusion_duration": format_duration(case.time_hours),
            "safety_warnings": join_lines(warnings),
            "monitoring_guidelines": join_lines(compose(MONITORING, case)),
        }

    def interpret(self, result):
        values = result.result_values
        return _INTERPRETATION.format(
            drip_rate=values.get("drip_rate", ""),
            flow_rate=values.get("flow_rate", ""),
            drops_15=values.get("drops_per_15_seconds", ""),
            duration=values.get("infusion_duration", ""),
            volume=result.input_values.get("total_volume", ""),
            drop_factor=result.input_values.get("drop_factor", ""),
        )

    def references(self):
        return [
            Reference("Cálculo de Goteo Intravenoso", "Blog Roosevelt Hospital México",
                      url="https://blog.roosevelt.edu.mx"),
            Reference("Administración de Fluidos Intravenosos", "Sociedad Mexicana de Enfermería", year=2023),
            Reference("IV Flow Rate Calculations", "Nursing Drug Calculations", year=2022),
            Reference("Factores de Goteo Estandarizados", "Manual de Procedimientos de Enfermería", year=2023),
            Reference("Seguridad en Terapia Intravenosa", "Instituto Mexicano del Seguro Social", year=2022),
        ]
