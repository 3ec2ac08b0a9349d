from dataclasses import dataclass
from textwrap import dedent
from typing import Optional

from clinicalc.calculators.base import Calculator
from clinicalc.models import Reference
from clinicalc.parsing import check_number, get_bool, get_float, get_int, get_text
from clinicalc.safety import ALWAYS, AdvisoryRule, compose, join_lines, one_of, rule

DEFAULT_CONTEXT = "Evaluación General"

# score -> (descriptor, clinical note)
EYE_RESPONSES = {
    1: ("No abre los ojos", "• ⚠️ ALERTA CRÍTICA - No apertura ocular"),
    2: ("Abre los ojos al dolor", "• ⚠️ RESPUESTA AL DOLOR solamente"),
    3: ("Abre los ojos a la voz", "• ⚠️ Requiere estímulo verbal"),
    4: ("Abre los ojos espontáneamente", "• ✅ Respuesta ocular normal"),
}
VERBAL_RESPONSES = {
    1: ("No respuesta verbal", "• 🚨 ALERTA CRÍTICA - Sin respuesta verbal"),
    2: ("Sonidos incomprensibles", "• ⚠️ Solo sonidos, sin palabras reconocibles"),
    3: ("Palabras inapropiadas", "• ⚠️ Palabras sin coherencia"),
    4: ("Confuso", "• ⚠️ Confusión pero respuesta verbal presente"),
    5: ("Orientado", "• ✅ Respuesta verbal normal y orientada"),
}
MOTOR_RESPONSES = {
    1: ("No respuesta motora", "• 🚨 ALERTA CRÍTICA - Sin respuesta motora"),
    2: ("Extensión anormal (descerebración)", "• 🚨 DESCEREBRACIÓN - Lesión del tronco encefálico"),
    3: ("Flexión anormal (decorticación)", "• 🚨 DECORTICACIÓN - Lesión cortical/subcortical"),
    4: ("Flexión de retirada", "• ⚠️ Retirada al dolor - función motora básica"),
    5: ("Localiza el dolor", "• ⚠️ Localiza dolor - función motora parcial"),
    6: ("Obedece órdenes", "• ✅ Obedece órdenes - función motora normal"),
}

FULL = "Conciencia plena"
MILD = "Confusión leve"
MODERATE = "Estado moderado"
SEVERE = "Estado grave / Coma"

NEUROLOGICAL_STATUS = {
    FULL: "✅ ESTADO NEUROLÓGICO NORMAL - Paciente completamente alerta y orientado. "
          "Funciones neurológicas preservadas.",
    MILD: "🟡 ALTERACIÓN LEVE - Paciente confuso pero consciente. Requiere evaluación de causa subyacente.",
    MODERATE: "🟠 ALTERACIÓN MODERADA - Deterioro significativo del estado de conciencia. "
              "Monitoreo neurológico intensivo.",
    SEVERE: "🚨 ESTADO CRÍTICO - Coma o estado vegetativo. Requiere manejo en UCI y medidas de soporte vital.",
}


def consciousness_level(total_score: int) -> str:
    if total_score == 15:
        return FULL
    if total_score >= 13:
        return MILD
    if total_score >= 9:
        return MODERATE
    return SEVERE


def _level_is(level):
    return lambda c: c.level == level


def _context_is(context):
    return lambda c: c.context == context


RECOMMENDATIONS = (
    rule(ALWAYS, "🏥 RECOMENDACIONES CLÍNICAS ESPECÍFICAS:", ""),
    one_of(
        rule(_level_is(FULL),
             "✅ MANEJO ESTÁNDAR:",
             "• Observación clínica de rutina",
             "• Evaluación neurológica cada 4 horas",
             "• Investigar causa de consulta neurológica",
             "• Alta médica si no hay otras complicaciones"),
        rule(_level_is(MILD),
             "🟡 EVALUACIÓN DIRIGIDA:",
             "• Evaluación neurológica cada 2 horas",
             "• Investigar causas metabólicas (glucosa, electrolitos)",
             "• Considerar TAC de cráneo simple",
             "• Evaluar medicamentos y tóxicos",
             "• Monitoreo de signos vitales"),
        rule(_level_is(MODERATE),
             "🟠 MANEJO INTENSIVO:",
             "• UCI o área de cuidados intensivos",
             "• TAC de cráneo urgente",
             "• Evaluación neurológica cada hora",
             "• Protección de vía aérea",
             "• Prevención de aspiración",
             "• Consulta neuroquirúrgica"),
        rule(_level_is(SEVERE),
             "🚨 MEDIDAS DE EMERGENCIA:",
             "• UCI inmediatamente",
             "• Intubación orotraqueal si indicado",
             "• TAC de cráneo STAT",
             "• Monitoreo de presión intracraneal",
             "• Consulta neuroquirúrgica urgente",
             "• Protocolo de coma",
             "• Considerar traslado a centro especializado"),
    ),
    rule(lambda c: c.traumatic_brain_injury,
         "",
         "🧠 TRAUMATISMO CRANEOENCEFÁLICO:",
         "• Inmovilización cervical hasta descartar lesión",
         "• Protocolo de trauma craneal",
         "• Prevenir hipertensión intracraneal",
         "• Evitar hipotensión e hipoxia"),
    rule(lambda c: c.has_seizures,
         "",
         "⚡ ACTIVIDAD CONVULSIVA:",
         "• Protocolo de status epiléptico",
         "• Anticonvulsivantes según protocolo",
         "• EEG si disponible",
         "• Monitoreo continuo"),
    one_of(
        rule(_context_is("Urgencias"),
             "",
             "🚑 PROTOCOLO DE URGENCIAS:",
             "• Evaluación ABCDE completa",
             "• Estabilización hemodinámica",
             "• Descartar otras lesiones"),
        rule(_context_is("Postoperatorio"),
             "",
             "🔬 CUIDADOS POSTOPERATORIOS:",
             "• Evaluar complicaciones quirúrgicas",
             "• Monitoreo de sangrado intracraneal",
             "• Manejo del dolor postoperatorio"),
        rule(_context_is("UCI"),
             "",
             "🏥 MANEJO EN UCI:",
             "• Sedoanalgesia controlada",
             "• Prevención de úlceras por estrés",
             "• Fisioterapia respiratoria"),
    ),
)

MONITORING = (
    rule(ALWAYS, "📅 PROTOCOLO DE MONITOREO NEUROLÓGICO:", ""),
    one_of(
        rule(_level_is(FULL),
             "✅ MONITOREO BÁSICO:",
             "• Glasgow cada 4 horas",
             "• Signos vitales cada 4 horas",
             "• Evaluación pupilar cada turno",
             "• Documentación en expediente"),
        rule(_level_is(MILD),
             "🟡 MONITOREO ESTRECHO:",
             "• Glasgow cada 2 horas",
             "• Signos vitales cada 2 horas",
             "• Evaluación pupilar cada 2 horas",
             "• Función motora focal",
             "• Estado de agitación/sedación"),
        rule(_level_is(MODERATE),
             "🟠 MONITOREO INTENSIVO:",
             "• Glasgow cada hora",
             "• Signos vitales cada 30 minutos",
             "• Evaluación pupilar cada hora",
             "• Presión arterial media >80 mmHg",
             "• Saturación O2 >95%",
             "• Diuresis cada hora"),
        rule(_level_is(SEVERE),
             "🚨 MONITOREO CRÍTICO:",
             "• Glasgow cada 15-30 minutos",
             "• Monitoreo hemodinámico continuo",
             "• Presión intracraneal si disponible",
             "• Gasometría arterial cada 4-6 horas",
             "• Balance hídrico estricto",
             "• Electrolitos séricos cada 12 horas",
             "• Temperatura corporal continua"),
    ),
    rule(lambda c: c.traumatic_brain_injury,
         "",
         "🧠 MONITOREO ESPECIALIZADO TCE:",
         "• Evaluación de heridas externas",
         "• Signos de aumento de PIC",
         "• Líquido cefalorraquídeo (otorrea/rinorrea)",
         "• TAC de control según evolución"),
    rule(ALWAYS,
         "",
         "⚠️ PARÁMETROS DE ALERTA:",
         "• Disminución Glasgow ≥2 puntos",
         "• Cambios pupilares (anisocoria >1mm)",
         "• Deterioro motor unilateral",
         "• Signos de herniación cerebral",
         "• Vómitos en proyectil",
         "• Bradicardia + hipertensión (Cushing)"),
)

MOTOR_PROGNOSIS = {
    6: "• ✅ Mejor pronóstico - función cortical preservada",
    5: "• 🟡 Buen pronóstico - localización del dolor",
    4: "• 🟠 Pronóstico moderado - respuesta de retirada",
    3: "• 🔴 Mal pronóstico - decorticación",
    2: "• 🚨 Muy mal pronóstico - descerebración",
    1: "• 🚨 Pronóstico crítico - sin respuesta motora",
}

PROGNOSIS = (
    rule(ALWAYS, "📈 INDICADORES PRONÓSTICOS:", ""),
    one_of(
        rule(lambda c: c.total_score == 15,
             "✅ PRONÓSTICO EXCELENTE",
             "• Recuperación completa esperada",
             "• Riesgo mínimo de complicaciones"),
        rule(lambda c: c.total_score >= 13,
             "🟡 PRONÓSTICO BUENO",
             "• Recuperación probable con manejo apropiado",
             "• Monitoreo para prevenir deterioro"),
        rule(lambda c: c.total_score >= 9,
             "🟠 PRONÓSTICO RESERVADO",
             "• Recuperación variable según causa",
             "• Riesgo moderado de complicaciones",
             "• Requiere manejo especializado"),
        rule(lambda c: c.total_score >= 6,
             "🔴 PRONÓSTICO GRAVE",
             "• Alta morbimortalidad",
             "• Posibles secuelas neurológicas",
             "• Requiere cuidados intensivos"),
        rule(ALWAYS,
             "🚨 PRONÓSTICO MUY GRAVE",
             "• Mortalidad elevada (>50%)",
             "• Alto riesgo de secuelas permanentes",
             "• Considerar medidas de soporte vital"),
    ),
    rule(ALWAYS, "", "🤲 VALOR PRONÓSTICO MOTOR:"),
    AdvisoryRule(lambda c: c.motor in MOTOR_PROGNOSIS, lambda c: MOTOR_PROGNOSIS[c.motor]),
    rule(lambda c: c.age is not None, "", "👤 FACTORES DE EDAD:"),
    # Every age >= 65 lands in the last band; there is no separate band above 80
    one_of(
        rule(lambda c: c.age is not None and c.age < 40,
             "• ✅ Edad joven - mejor capacidad de recuperación"),
        rule(lambda c: c.age is not None and c.age < 65,
             "• 🟡 Edad adulta - pronóstico variable"),
        rule(lambda c: c.age is not None,
             "• 🟠 Edad avanzada - recuperación más lenta"),
    ),
    rule(lambda c: c.traumatic_brain_injury,
         "",
         "🧠 PRONÓSTICO EN TCE:",
         "• Depende de mecanismo de lesión",
         "• Lesiones difusas vs focales",
         "• Tiempo hasta atención médica",
         "• Presencia de lesiones secundarias"),
)

EMERGENCY_ALERTS = (
    rule(lambda c: c.total_score <= 8,
         "🚨 ALERTA CRÍTICA: Glasgow ≤8",
         "• COMA - Requiere manejo inmediato en UCI",
         "• Considerar intubación orotraqueal",
         "• Consulta neuroquirúrgica URGENTE",
         ""),
    rule(lambda c: c.total_score <= 5,
         "🚨 ALERTA MÁXIMA: Glasgow ≤5",
         "• ESTADO VEGETATIVO/COMA PROFUNDO",
         "• Medidas de soporte vital completo",
         "• Evaluación pronóstica familiar",
         ""),
    rule(lambda c: c.eye == 1,
         "👁️ ALERTA OCULAR: Sin apertura de ojos",
         "• Posible lesión del tronco cerebral",
         "• Evaluar reflejos pupilares inmediatamente",
         ""),
    rule(lambda c: c.verbal == 1 and not c.intubated,
         "🗣️ ALERTA VERBAL: Sin respuesta verbal",
         "• Descartar afasia vs disminución del nivel de conciencia",
         "• Evaluar comprensión de órdenes",
         ""),
    one_of(
        rule(lambda c: c.motor == 1,
             "🤲 ALERTA MOTORA CRÍTICA:",
             "• Sin respuesta motora - lesión grave del SNC",
             "• TAC de cráneo inmediato",
             "• Manejo de presión intracraneal",
             ""),
        rule(lambda c: c.motor == 2,
             "🤲 ALERTA MOTORA CRÍTICA:",
             "• Postura de descerebración - lesión del tronco",
             "• TAC de cráneo inmediato",
             "• Manejo de presión intracraneal",
             ""),
        rule(lambda c: c.motor == 3,
             "🤲 ALERTA MOTORA: Postura de decorticación",
             "• Lesión cortical/subcortical",
             "• Monitoreo neurológico estrecho",
             ""),
    ),
    rule(lambda c: c.total_score >= 13,
         "✅ SIN ALERTAS CRÍTICAS",
         "• Continuar monitoreo de rutina",
         "• Investigar causa de alteración si presente"),
)
NO_ALERTS = "📊 Estado evaluado - Ver recomendaciones específicas"

_INTERPRETATION = dedent("""
    INTERPRETACIÓN CLÍNICA - ESCALA DE COMA DE GLASGOW

    PUNTUACIÓN TOTAL: {total_score}/15 puntos
    NIVEL DE CONSCIENCIA: {level}

    COMPONENTES EVALUADOS:
    • Respuesta Ocular: {eye}/4 puntos
    • Respuesta Verbal: {verbal}/5 puntos
    • Respuesta Motora: {motor}/6 puntos

    RANGOS DE INTERPRETACIÓN:
    • 15 puntos: Conciencia plena
    • 13-14 puntos: Confusión leve
    • 9-12 puntos: Estado moderado
    • 3-8 puntos: Estado grave / Coma

    VALIDEZ CLÍNICA:
    La Escala de Glasgow es el estándar internacional para evaluar el nivel de consciencia y predecir pronóstico neurológico. Desarrollada en 1974, tiene alta confiabilidad inter-observador cuando se aplica correctamente.

    CONSIDERACIONES ESPECIALES:
    • Pacientes intubados: Usar GCS modificado
    • Edema facial: Puede limitar evaluación ocular
    • Sedación/analgesia: Puede alterar las respuestas
    • Lesiones locales: Evaluar componentes no afectados

    APLICACIÓN CLÍNICA:
    • Evaluación inicial y seriada en trauma
    • Monitoreo neurológico en UCI
    • Criterio para intubación (GCS ≤8)
    • Predictor pronóstico en coma
""").strip("\n")


@dataclass(frozen=True)
class GlasgowCase:
    eye: int
    verbal: int
    motor: int
    age: Optional[float]
    intubated: bool
    has_seizures: bool
    traumatic_brain_injury: bool
    drugs_alcohol: bool
    context: str

    @property
    def total_score(self) -> int:
        return self.eye + self.verbal + self.motor

    @property
    def level(self) -> str:
        return consciousness_level(self.total_score)


def detailed_assessment(case: GlasgowCase) -> str:
    eye_text, eye_note = EYE_RESPONSES[case.eye]
    verbal_text, verbal_note = VERBAL_RESPONSES[case.verbal]
    motor_text, motor_note = MOTOR_RESPONSES[case.motor]

    lines = [
        "📊 EVALUACIÓN DETALLADA POR COMPONENTE:",
        "",
        f"👁️ RESPUESTA OCULAR ({case.eye}/4):",
        f"• {eye_text}",
        eye_note,
        "",
        f"🗣️ RESPUESTA VERBAL ({case.verbal}/5):",
    ]
    if case.intubated:
        lines.append("• PACIENTE INTUBADO - Evaluación verbal no aplicable")
        lines.append("• ⚠️ Usar GCS modificado para pacientes intubados")
    else:
        lines.append(f"• {verbal_text}")
        lines.append(verbal_note)
    lines.extend([
        "",
        f"🤲 RESPUESTA MOTORA ({case.motor}/6):",
        f"• {motor_text}",
        motor_note,
    ])
    return join_lines(lines)


class GlasgowComaScaleCalculator(Calculator):
    """Level of consciousness: eye (1-4) + verbal (1-5) + motor (1-6)."""
    calculator_id = "glasgow_coma_scale"
    name = "Escala de Coma de Glasgow"
    category = "neurology"

    def _collect_errors(self, inputs, errors):
        for key, label, top in (("eye_response", "ocular", 4),
                                ("verbal_response", "verbal", 5),
                                ("motor_response", "motora", 6)):
            check_number(inputs, key, errors,
                         missing=f"La respuesta {label} es obligatoria",
                         invalid=f"La respuesta {label} debe estar entre 1-{top}",
                         accept=lambda v, top=top: 1 <= v <= top,
                         integer=True)
        check_number(inputs, "patient_age", errors,
                     missing=None,
                     invalid="La edad debe estar entre 0-120 años",
                     accept=lambda a: 0 <= a <= 120)

    def _parse(self, inputs) -> GlasgowCase:
        return GlasgowCase(
            eye=get_int(inputs, "eye_response"),
            verbal=get_int(inputs, "verbal_response"),
            motor=get_int(inputs, "motor_response"),
            age=get_float(inputs, "patient_age"),
            intubated=get_bool(inputs, "is_intubated"),
            has_seizures=get_bool(inputs, "has_seizures"),
            traumatic_brain_injury=get_bool(inputs, "traumatic_brain_injury"),
            drugs_alcohol=get_bool(inputs, "drugs_alcohol"),
            context=get_text(inputs, "clinical_context", DEFAULT_CONTEXT),
        )

    def _compute(self, case: GlasgowCase):
        alerts = compose(EMERGENCY_ALERTS, case) or [NO_ALERTS]
        return {
            "total_score": str(case.total_score),
            "consciousness_level": case.level,
            "neurological_interpretation": NEUROLOGICAL_STATUS[case.level],
            "detailed_assessment": detailed_assessment(case),
            "clinical_recommendations": join_lines(compose(RECOMMENDATIONS, case)),
            "monitoring_protocol": join_lines(compose(MONITORING, case)),
            "prognostic_indicators": join_lines(compose(PROGNOSIS, case)),
            "emergency_alerts": join_lines(alerts),
        }

    def interpret(self, result):
        return _INTERPRETATION.format(
            total_score=result.result_values.get("total_score", ""),
            level=result.result_values.get("consciousness_level", ""),
            eye=result.input_values.get("eye_response", ""),
            verbal=result.input_values.get("verbal_response", ""),
            motor=result.input_values.get("motor_response", ""),
        )

    def references(self):
        return [
            Reference("Manual de Atención Neurológica de Urgencia",
                      "Instituto Nacional de Neurología y Neurocirugía (INNN)", year=2023),
            Reference("Escala de Coma de Glasgow en Urgencias",
                      "Sociedad Mexicana de Medicina de Emergencia", year=2022),
            Reference("Guías de Manejo del Trauma Craneoencefálico",
                      "Instituto Mexicano del Seguro Social (IMSS)", year=2023),
            Reference("Assessment of coma and impaired consciousness",
                      "Teasdale & Jennett, The Lancet 1974", year=1974),
            Reference("Neurological Assessment in Critical Care",
                      "American Association of Neuroscience Nurses", year=2022),
        ]
