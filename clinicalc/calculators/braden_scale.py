from dataclasses import dataclass
from textwrap import dedent
from typing import List, Optional

from clinicalc.calculators.base import Calculator
from clinicalc.models import Reference
from clinicalc.parsing import check_number, get_bool, get_int
from clinicalc.safety import ALWAYS, compose, join_lines, one_of, rule


@dataclass(frozen=True)
class BradenItem:
    field_id: str
    display_name: str
    heading: str                  # section title in the detailed assessment
    descriptors: dict             # score -> description
    risk_note: str                # added when the item scores <= 2

    @property
    def max_score(self) -> int:
        return max(self.descriptors)


BRADEN_ITEMS = (
    BradenItem(
        "sensory_perception", "Percepción sensorial", "🧠 PERCEPCIÓN SENSORIAL",
        {
            1: "Completamente limitada - No responde a estímulos dolorosos",
            2: "Muy limitada - Responde solo a estímulos dolorosos",
            3: "Ligeramente limitada - Responde a órdenes verbales",
            4: "Sin alteraciones - Responde a órdenes verbales",
        },
        "• ⚠️ FACTOR DE ALTO RIESGO - Percepción limitada"),
    BradenItem(
        "moisture", "Exposición a la humedad", "💧 EXPOSICIÓN A HUMEDAD",
        {
            1: "Constantemente húmeda - Piel húmeda constantemente",
            2: "Muy húmeda - Piel húmeda frecuentemente",
            3: "Ocasionalmente húmeda - Requiere cambio de ropa adicional",
            4: "Raramente húmeda - Piel generalmente seca",
        },
        "• ⚠️ FACTOR DE RIESGO - Exposición excesiva a humedad"),
    BradenItem(
        "activity", "Actividad", "🚶 ACTIVIDAD",
        {
            1: "Encamado - Confinado a la cama",
            2: "En silla - Capacidad de caminar severamente limitada",
            3: "Camina ocasionalmente - Camina ocasionalmente durante el día",
            4: "Camina frecuentemente - Camina fuera de la habitación al menos dos veces al día",
        },
        "• ⚠️ FACTOR DE ALTO RIESGO - Actividad muy limitada"),
    BradenItem(
        "mobility", "Movilidad", "🔄 MOVILIDAD",
        {
            1: "Completamente inmóvil - No hace cambios de posición",
            2: "Muy limitada - Ocasionalmente hace cambios leves de posición",
            3: "Ligeramente limitada - Hace cambios frecuentes pero leves",
            4: "Sin limitaciones - Hace cambios importantes y frecuentes de posición",
        },
        "• ⚠️ FACTOR DE ALTO RIESGO - Movilidad severamente limitada"),
    BradenItem(
        "nutrition", "Nutrición", "🍽️ NUTRICIÓN",
        {
            1: "Muy pobre - Nunca come una comida completa",
            2: "Probablemente inadecuada - Raramente come una comida completa",
            3: "Adecuada - Come más de la mitad de la mayoría de comidas",
            4: "Excelente - Come la mayoría de cada comida",
        },
        "• ⚠️ FACTOR DE RIESGO - Estado nutricional comprometido"),
    BradenItem(
        "friction_shear", "Fricción y deslizamiento", "⚡ FRICCIÓN Y DESLIZAMIENTO",
        {
            1: "Problema - Requiere asistencia moderada a máxima para moverse",
            2: "Problema potencial - Se mueve débilmente o requiere mínima asistencia",
            3: "Sin problema aparente - Se mueve en cama y silla independientemente",
        },
        "• ⚠️ FACTOR DE RIESGO - Problemas de fricción/deslizamiento"),
)

NO_RISK = "Sin riesgo"
MILD_RISK = "Riesgo leve"
MODERATE_RISK = "Riesgo moderado"
HIGH_RISK = "Riesgo alto"
VERY_HIGH_RISK = "Riesgo muy alto"

# (lowest score in band, level); anything below 10 is very high risk
RISK_BANDS = ((19, NO_RISK), (15, MILD_RISK), (13, MODERATE_RISK), (10, HIGH_RISK))

RISK_INTERPRETATIONS = {
    NO_RISK: "✅ RIESGO MÍNIMO - Paciente con bajo riesgo de desarrollar úlceras por presión. "
             "Mantener cuidados preventivos básicos.",
    MILD_RISK: "⚠️ RIESGO LEVE - Iniciar medidas preventivas. Evaluación diaria y cambios posturales regulares.",
    MODERATE_RISK: "🟡 RIESGO MODERADO - Implementar protocolo de prevención. "
                   "Cambios posturales cada 2 horas y superficies de apoyo.",
    HIGH_RISK: "🔶 RIESGO ALTO - Protocol intensivo requerido. "
               "Cambios posturales cada 1-2 horas, colchón especializado.",
    VERY_HIGH_RISK: "🚨 RIESGO MUY ALTO - Medidas preventivas máximas. "
                    "Supervisión constante, colchón de presión alterna.",
}


def _level_is(level):
    return lambda c: c.risk_level == level


PREVENTION = (
    rule(ALWAYS, "🛡️ MEDIDAS PREVENTIVAS ESPECÍFICAS:", ""),
    one_of(
        rule(_level_is(NO_RISK),
             "✅ CUIDADOS BÁSICOS:",
             "• Inspección de piel diaria",
             "• Mantener piel limpia y seca",
             "• Cambios posturales cada 4 horas",
             "• Educación al paciente y familia"),
        rule(_level_is(MILD_RISK),
             "⚠️ PREVENCIÓN ACTIVA:",
             "• Inspección de piel cada turno (8 horas)",
             "• Cambios posturales cada 3 horas",
             "• Uso de almohadas para alivio de presión",
             "• Mantener nutrición e hidratación adecuada",
             "• Protección de prominencias óseas"),
        rule(_level_is(MODERATE_RISK),
             "🟡 PROTOCOLO INTENSIVO:",
             "• Inspección de piel cada 4 horas",
             "• Cambios posturales cada 2 horas",
             "• Colchón de espuma de alta densidad",
             "• Cojines de alivio de presión",
             "• Evaluación nutricional especializada",
             "• Mantener cabecera <30° cuando sea posible"),
        rule(_level_is(HIGH_RISK),
             "🔶 PREVENCIÓN MÁXIMA:",
             "• Inspección de piel cada 2 horas",
             "• Cambios posturales cada 1-2 horas",
             "• Colchón de presión alterna o aire",
             "• Superficies de apoyo especializadas",
             "• Suplementación nutricional si indicado",
             "• Evitar fricción durante movilización",
             "• Usar dispositivos de elevación"),
        rule(_level_is(VERY_HIGH_RISK),
             "🚨 MEDIDAS MÁXIMAS:",
             "• Inspección continua de la piel",
             "• Cambios posturales cada hora",
             "• Colchón de aire de presión baja",
             "• Cama especializada si disponible",
             "• Supervisión nutricional diaria",
             "• Equipo multidisciplinario",
             "• Documentación exhaustiva",
             "• Consulta especializada en heridas"),
    ),
    rule(lambda c: c.chronic_conditions,
         "",
         "🏥 CONSIDERACIONES ESPECIALES - CONDICIONES CRÓNICAS:",
         "• Manejo optimizado de diabetes",
         "• Control de enfermedades vasculares",
         "• Evaluación de medicamentos"),
    rule(lambda c: c.bed_rest,
         "",
         "🛏️ PROTOCOLO ESPECIAL - REPOSO EN CAMA:",
         "• Programa de movilización pasiva",
         "• Ejercicios de rango de movimiento",
         "• Fisioterapia respiratoria"),
    rule(lambda c: c.critical_illness,
         "",
         "🚨 CUIDADOS CRÍTICOS:",
         "• Monitoreo hemodinámico",
         "• Manejo de sedación y analgesia",
         "• Prevención de complicaciones"),
)

MONITORING = (
    rule(ALWAYS, "📅 CRONOGRAMA DE MONITOREO:", ""),
    one_of(
        rule(_level_is(NO_RISK),
             "• Evaluación Braden: Semanal",
             "• Inspección de piel: Diaria",
             "• Documentación: Semanal"),
        rule(_level_is(MILD_RISK),
             "• Evaluación Braden: Cada 3 días",
             "• Inspección de piel: Cada turno (8h)",
             "• Documentación: Cada 3 días",
             "• Revisión de medidas: Semanal"),
        rule(_level_is(MODERATE_RISK),
             "• Evaluación Braden: Cada 48 horas",
             "• Inspección de piel: Cada 4 horas",
             "• Documentación: Diaria",
             "• Revisión del plan: Cada 3 días"),
        rule(_level_is(HIGH_RISK),
             "• Evaluación Braden: Diaria",
             "• Inspección de piel: Cada 2 horas",
             "• Documentación: Cada turno",
             "• Revisión del plan: Diaria",
             "• Evaluación nutricional: Semanal"),
        rule(_level_is(VERY_HIGH_RISK),
             "• Evaluación Braden: Cada 12 horas",
             "• Inspección de piel: Continua",
             "• Documentación: Cada 2 horas",
             "• Revisión del plan: Cada 12 horas",
             "• Consulta especializada: Inmediata"),
    ),
    rule(lambda c: c.critical_illness,
         "",
         "🚨 MONITOREO INTENSIVO (UCI):",
         "• Evaluación continua durante procedures",
         "• Documentación cada hora",
         "• Comunicación con equipo médico"),
)

# Per item: (high-risk label when score <= threshold, threshold, moderate label, moderate score)
FACTOR_LABELS = {
    "sensory_perception": ("Percepción sensorial muy limitada", 2,
                           "Percepción sensorial ligeramente limitada", 3),
    "moisture": ("Exposición excesiva a humedad", 2, "Humedad ocasional", 3),
    "activity": ("Actividad muy limitada", 2, "Actividad limitada", 3),
    "mobility": ("Movilidad muy limitada", 2, "Movilidad ligeramente limitada", 3),
    "nutrition": ("Estado nutricional comprometido", 2, "Nutrición adecuada pero mejorable", 3),
    "friction_shear": ("Problemas significativos de fricción", 1, "Problemas potenciales de fricción", 2),
}

# (minimum age, tier, label), oldest first
AGE_FACTORS = (
    (85, "high", "Edad muy avanzada (≥85 años)"),
    (75, "moderate", "Edad avanzada (75-84 años)"),
    (65, "moderate", "Adulto mayor (65-74 años)"),
)

PRIORITY_INTERVENTIONS = (
    rule(lambda c: c.scores["sensory_perception"] <= 2 or c.scores["mobility"] <= 2,
         "• PRIORIDAD ALTA: Cambios posturales frecuentes"),
    rule(lambda c: c.scores["moisture"] <= 2, "• PRIORIDAD ALTA: Control de humedad"),
    rule(lambda c: c.scores["nutrition"] <= 2, "• PRIORIDAD ALTA: Evaluación nutricional"),
    rule(lambda c: c.scores["friction_shear"] <= 1, "• PRIORIDAD ALTA: Técnicas de movilización segura"),
)

_INTERPRETATION = dedent("""
    INTERPRETACIÓN CLÍNICA - ESCALA DE BRADEN

    PUNTUACIÓN TOTAL: {total_score}/23 puntos
    NIVEL DE RIESGO: {risk_level}
    EVALUACIÓN: {risk_interpretation}

    RANGOS DE PUNTUACIÓN:
    • 19-23 puntos: Sin riesgo
    • 15-18 puntos: Riesgo leve
    • 13-14 puntos: Riesgo moderado
    • 10-12 puntos: Riesgo alto
    • ≤9 puntos: Riesgo muy alto

    COMPONENTES EVALUADOS:
    • Percepción sensorial (1-4 puntos)
    • Exposición a humedad (1-4 puntos)
    • Actividad (1-4 puntos)
    • Movilidad (1-4 puntos)
    • Nutrición (1-4 puntos)
    • Fricción y deslizamiento (1-3 puntos)

    VALIDEZ CLÍNICA:
    La Escala de Braden es el instrumento más utilizado mundialmente para predecir el riesgo de desarrollar úlceras por presión. Ha demostrado alta sensibilidad (83-100%) y especificidad (64-90%) en diversos estudios.

    LIMITACIONES:
    • No considera factores como medicamentos, comorbilidades específicas
    • Requiere evaluación clínica complementaria
    • Debe combinarse con juicio clínico profesional
""").strip("\n")


@dataclass(frozen=True)
class BradenCase:
    scores: dict                   # field id -> item score
    age: Optional[int]
    chronic_conditions: bool
    bed_rest: bool
    critical_illness: bool

    @property
    def total_score(self) -> int:
        return sum(self.scores.values())

    @property
    def risk_level(self) -> str:
        return risk_level(self.total_score)


def risk_level(total_score: int) -> str:
    for lowest, level in RISK_BANDS:
        if total_score >= lowest:
            return level
    return VERY_HIGH_RISK


def detailed_assessment(scores) -> str:
    lines = ["📊 EVALUACIÓN DETALLADA POR ÁREA:", ""]
    for item in BRADEN_ITEMS:
        score = scores[item.field_id]
        lines.append(f"{item.heading} ({score}/{item.max_score}):")
        lines.append(f"• {item.descriptors.get(score, 'Valor no válido')}")
        if score <= 2:
            lines.append(item.risk_note)
        lines.append("")
    lines.pop()  # no spacer after the last item
    return join_lines(lines)


def risk_factor_analysis(case: BradenCase) -> str:
    high: List[str] = []
    moderate: List[str] = []
    for item in BRADEN_ITEMS:
        high_label, threshold, moderate_label, moderate_score = FACTOR_LABELS[item.field_id]
        score = case.scores[item.field_id]
        if score <= threshold:
            high.append(high_label)
        elif score == moderate_score:
            moderate.append(moderate_label)

    if case.age is not None:
        for minimum_age, tier, label in AGE_FACTORS:
            if case.age >= minimum_age:
                (high if tier == "high" else moderate).append(label)
                break

    lines = ["🔍 ANÁLISIS DE FACTORES DE RIESGO:", ""]
    if high:
        lines.append("🚨 FACTORES DE ALTO RIESGO:")
        lines.extend(f"• {factor}" for factor in high)
        lines.append("")
    if moderate:
        lines.append("⚠️ FACTORES DE RIESGO MODERADO:")
        lines.extend(f"• {factor}" for factor in moderate)
        lines.append("")
    if not high and not moderate:
        lines.append("✅ Sin factores de riesgo significativos identificados")
        lines.append("")

    lines.append("🎯 INTERVENCIONES PRIORITARIAS:")
    lines.extend(compose(PRIORITY_INTERVENTIONS, case))
    return join_lines(lines)


class BradenScaleCalculator(Calculator):
    """Pressure-ulcer risk: sum of six Braden items (6-23)."""
    calculator_id = "braden_scale"
    name = "Escala de Braden"
    category = "nursing"

    def _collect_errors(self, inputs, errors):
        for item in BRADEN_ITEMS:
            check_number(inputs, item.field_id, errors,
                         missing=f"{item.display_name} es obligatorio",
                         invalid=f"{item.display_name} debe ser un número válido",
                         accept=lambda v, top=item.max_score: 1 <= v <= top,
                         out_of_range=f"{item.display_name} debe estar entre 1-{item.max_score}",
                         integer=True)
        check_number(inputs, "patient_age", errors,
                     missing=None,
                     invalid="La edad debe estar entre 0-120 años",
                     accept=lambda a: 0 <= a <= 120,
                     integer=True)

    def _parse(self, inputs) -> BradenCase:
        return BradenCase(
            scores={item.field_id: get_int(inputs, item.field_id) for item in BRADEN_ITEMS},
            age=get_int(inputs, "patient_age"),
            chronic_conditions=get_bool(inputs, "chronic_conditions"),
            bed_rest=get_bool(inputs, "bed_rest"),
            critical_illness=get_bool(inputs, "critical_illness"),
        )

    def _compute(self, case: BradenCase):
        level = case.risk_level
        return {
            "total_score": str(case.total_score),
            "risk_level": level,
            "risk_interpretation": RISK_INTERPRETATIONS[level],
            "detailed_assessment": detailed_assessment(case.scores),
            "prevention_recommendations": join_lines(compose(PREVENTION, case)),
            "monitoring_schedule": join_lines(compose(MONITORING, case)),
            "risk_factors_analysis": risk_factor_analysis(case),
        }

    def interpret(self, result):
        values = result.result_values
        return _INTERPRETATION.format(
            total_score=values.get("total_score", ""),
            risk_level=values.get("risk_level", ""),
            risk_interpretation=values.get("risk_interpretation", ""),
        )

    def references(self):
        return [
            Reference("Guía de Práctica Clínica para la Prevención y Tratamiento de Úlceras por Presión",
                      "Secretaría de Salud México", url="http://gpc.salud.gob.mx"),
            Reference("Escala de Braden para Evaluación de Riesgo",
                      "Instituto Mexicano del Seguro Social (IMSS)", year=2023),
            Reference("Prevención de Úlceras por Presión en Hospitalización",
                      "Revista Mexicana de Enfermería", year=2022),
            Reference("Braden Scale for Predicting Pressure Sore Risk",
                      "Braden & Bergstrom, 1987 - Validated tool", year=1987),
            Reference("Protocolo de Prevención de UPP", "Hospital General de México", year=2023),
        ]
