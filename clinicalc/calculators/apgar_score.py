from dataclasses import dataclass
from textwrap import dedent
from typing import Optional

from clinicalc.calculators.base import Calculator
from clinicalc.models import Reference
from clinicalc.parsing import check_number, get_bool, get_float, get_text, is_blank, to_int
from clinicalc.safety import ALWAYS, compose, first_message, join_lines, one_of, rule

DEFAULT_EVALUATION_TIME = "1 minuto"
DEFAULT_DELIVERY = "Vaginal espontáneo"

GOOD = "Buen estado"
MODERATE = "Asistencia moderada"
IMMEDIATE = "Asistencia inmediata"


@dataclass(frozen=True)
class ApgarSign:
    field_id: str
    display_name: str
    heading: str
    # score -> (descriptor, clinical note)
    scores: dict


APGAR_SIGNS = (
    ApgarSign("appearance_color", "Apariencia (color)", "🎨 APARIENCIA - COLOR", {
        0: ("Cianosis generalizada o palidez",
            "• 🚨 CIANOSIS CENTRAL - Hipoxia severa, requiere O2 inmediato"),
        1: ("Extremidades cianóticas, cuerpo rosado",
            "• ⚠️ CIANOSIS PERIFÉRICA - Adaptación circulatoria en proceso"),
        2: ("Rosado completamente", "• ✅ COLORACIÓN NORMAL - Buena oxigenación tisular"),
    }),
    ApgarSign("pulse_heart_rate", "Pulso", "💓 PULSO - FRECUENCIA CARDÍACA", {
        0: ("Ausente", "• 🚨 ASISTOLIA - Reanimación cardiopulmonar inmediata"),
        1: ("Menos de 100 lpm", "• ⚠️ BRADICARDIA - Estimulación y oxigenación urgente"),
        2: ("Más de 100 lpm", "• ✅ FRECUENCIA ADECUADA - Función cardíaca estable"),
    }),
    ApgarSign("grimace_reflex", "Gesticulación", "😤 GESTICULACIÓN - IRRITABILIDAD REFLEJA", {
        0: ("Sin respuesta", "• 🚨 SIN REFLEJOS - Depresión neurológica severa"),
        1: ("Mueca o débil", "• ⚠️ RESPUESTA DÉBIL - Depresión neurológica leve-moderada"),
        2: ("Llanto vigoroso", "• ✅ RESPUESTA VIGOROSA - Función neurológica adecuada"),
    }),
    ApgarSign("activity_muscle_tone", "Actividad", "💪 ACTIVIDAD - TONO MUSCULAR", {
        0: ("Flácido", "• 🚨 HIPOTONÍA SEVERA - Depresión del sistema nervioso central"),
        1: ("Flexión mínima de extremidades", "• ⚠️ HIPOTONÍA LEVE - Adaptación neurológica en proceso"),
        2: ("Movimientos activos", "• ✅ TONO NORMAL - Desarrollo neuromuscular adecuado"),
    }),
    ApgarSign("respiratory_effort", "Respiración", "🫁 RESPIRACIÓN - ESFUERZO RESPIRATORIO", {
        0: ("Ausente", "• 🚨 APNEA - Ventilación asistida inmediata"),
        1: ("Débil o irregular", "• ⚠️ RESPIRACIÓN IRREGULAR - Estimulación y oxígeno suplementario"),
        2: ("Llanto fuerte", "• ✅ RESPIRACIÓN VIGOROSA - Función pulmonar establecida"),
    }),
)


def score_from_option(option: Optional[str]) -> Optional[int]:
    """'2 - Rosado completamente' -> 2. Plain '2' is accepted too."""
    if option is None:
        return None
    return to_int(option.split(" - ")[0])


def clinical_status(total_score: int) -> str:
    if total_score >= 7:
        return GOOD
    if total_score >= 4:
        return MODERATE
    return IMMEDIATE


STATUS_TEXT = {
    GOOD: "✅ ESTADO ÓPTIMO - Recién nacido con excelente adaptación extrauterina. "
          "Signos vitales estables y respuesta neurológica adecuada.",
    MODERATE: "🟡 ASISTENCIA REQUERIDA - Recién nacido con adaptación comprometida. "
              "Requiere intervenciones de soporte y monitoreo estrecho.",
    IMMEDIATE: "🚨 EMERGENCIA NEONATAL - Recién nacido en estado crítico. "
               "Requiere reanimación inmediata y cuidados intensivos.",
}

TIME_CONTEXT = {
    "1 minuto": " Evaluación inicial al primer minuto de vida.",
    "5 minutos": " Evaluación a los 5 minutos - indicador pronóstico importante.",
    "10 minutos": " Evaluación tardía a los 10 minutos - seguimiento post-reanimación.",
}

GESTATIONAL_CONTEXT = (
    rule(lambda c: c.gestational_age < 28, " (Extremadamente prematuro - ajustar expectativas)"),
    rule(lambda c: c.gestational_age < 32, " (Muy prematuro - considerar inmadurez orgánica)"),
    rule(lambda c: c.gestational_age < 37, " (Prematuro - vigilar adaptación respiratoria)"),
    rule(lambda c: c.gestational_age > 42, " (Postérmino - evaluar complicaciones asociadas)"),
    rule(ALWAYS, " (A término - expectativas normales)"),
)


def _status_is(status):
    return lambda c: c.status == status


def _has_ga(c) -> bool:
    return c.gestational_age is not None


def _has_weight(c) -> bool:
    return c.birth_weight is not None


IMMEDIATE_ACTIONS = (
    rule(ALWAYS, "🚨 ACCIONES INMEDIATAS REQUERIDAS:", ""),
    one_of(
        rule(_status_is(GOOD),
             "✅ CUIDADOS DE RUTINA:",
             "• Secar y abrigar al recién nacido",
             "• Contacto piel a piel con la madre",
             "• Pinzamiento tardío del cordón (1-3 minutos)",
             "• Iniciar lactancia materna en la primera hora",
             "• Aplicar vitamina K intramuscular",
             "• Profilaxis ocular (eritromicina)",
             "• Identificación y registro del neonato"),
        rule(_status_is(MODERATE),
             "🟡 INTERVENCIONES DE SOPORTE:",
             "• Secar vigorosamente y proporcionar calor",
             "• Aspiración suave de secreciones si es necesario",
             "• Estimulación táctil suave",
             "• Oxigenoterapia a flujo libre si cianosis persiste",
             "• Monitoreo continuo de signos vitales",
             "• Reevaluar APGAR a los 5 minutos",
             "• Considerar CPAP nasal si dificultad respiratoria",
             "• Diferir procedimientos no urgentes"),
        rule(_status_is(IMMEDIATE),
             "🚨 REANIMACIÓN NEONATAL - PROTOCOLO ABC:",
             "• A - AIRWAY: Posición, aspiración, permeabilidad",
             "• B - BREATHING: Ventilación con presión positiva",
             "• C - CIRCULATION: Compresiones torácicas si FC <60",
             "• Intubación endotraqueal si ventilación inefectiva",
             "• Acceso vascular umbilical de emergencia",
             "• Epinefrina IV/ET si bradicardia persistente",
             "• Expansión de volumen si shock hipovolémico",
             "• Traslado inmediato a UCIN",
             "• Documentación exhaustiva de la reanimación"),
    ),
    rule(lambda c: c.evaluation_time == "5 minutos" and c.total_score < 7,
         "",
         "⏰ CONSIDERACIONES A LOS 5 MINUTOS:",
         "• Continuar reanimación si APGAR <7",
         "• Evaluar efectividad de intervenciones",
         "• Considerar causas reversibles",
         "• Documentar respuesta a reanimación",
         "• Planificar cuidados intensivos neonatales"),
    rule(lambda c: c.resuscitation_needed,
         "",
         "📋 PROTOCOLO POST-REANIMACIÓN:",
         "• Monitoreo hemodinámico continuo",
         "• Gasometría arterial",
         "• Glucemia y electrolitos",
         "• Radiografía de tórax",
         "• Evaluación neurológica seriada"),
)

MONITORING = (
    rule(ALWAYS, "📊 PROTOCOLO DE MONITOREO NEONATAL:", ""),
    one_of(
        rule(_status_is(GOOD),
             "✅ MONITOREO ESTÁNDAR:",
             "• Signos vitales cada 4 horas las primeras 24h",
             "• Temperatura, respiración, coloración",
             "• Alimentación y eliminación",
             "• Peso diario",
             "• Evaluación neurológica básica"),
        rule(_status_is(MODERATE),
             "🟡 MONITOREO INTENSIVO:",
             "• Signos vitales cada 2 horas",
             "• Monitoreo cardiorrespiratorio continuo",
             "• Saturación de oxígeno continua",
             "• Glucemia cada 6 horas",
             "• Balance hídrico estricto",
             "• Evaluación neurológica cada 8 horas",
             "• APGAR de seguimiento a los 10 minutos"),
        rule(_status_is(IMMEDIATE),
             "🚨 MONITOREO CRÍTICO:",
             "• Monitoreo hemodinámico invasivo",
             "• Gasometrías arteriales seriadas",
             "• Presión arterial continua",
             "• Diuresis horaria",
             "• Electrolitos cada 6 horas",
             "• Evaluación neurológica continua",
             "• Ecocardiograma funcional",
             "• EEG si convulsiones o encefalopatía"),
    ),
    # A term or normal-weight baby still gets the blank separator
    rule(_has_ga, ""),
    one_of(
        rule(lambda c: _has_ga(c) and c.gestational_age < 32,
             "👶 MONITOREO GRAN PREMATURO:",
             "• Apneas y bradicardias",
             "• Síndrome de dificultad respiratoria",
             "• Hemorragia intraventricular",
             "• Enterocolitis necrotizante",
             "• Retinopatía del prematuro"),
        rule(lambda c: _has_ga(c) and c.gestational_age < 37,
             "👶 MONITOREO PREMATURO:",
             "• Dificultad respiratoria transitoria",
             "• Hipoglucemia",
             "• Ictericia patológica",
             "• Problemas de termorregulación"),
        rule(lambda c: _has_ga(c) and c.gestational_age > 42,
             "👶 MONITOREO POSTÉRMINO:",
             "• Síndrome de aspiración meconial",
             "• Hipoglucemia",
             "• Policitemia",
             "• Insuficiencia placentaria"),
    ),
    rule(_has_weight, ""),
    one_of(
        rule(lambda c: _has_weight(c) and c.birth_weight < 1500,
             "⚖️ MONITOREO MUY BAJO PESO:",
             "• Hipotermia",
             "• Hipoglucemia severa",
             "• Síndrome de dificultad respiratoria",
             "• Conducto arterioso persistente"),
        rule(lambda c: _has_weight(c) and c.birth_weight < 2500,
             "⚖️ MONITOREO BAJO PESO:",
             "• Hipoglucemia",
             "• Dificultades de alimentación",
             "• Pérdida de calor"),
        rule(lambda c: _has_weight(c) and c.birth_weight > 4000,
             "⚖️ MONITOREO MACROSÓMICO:",
             "• Hipoglucemia",
             "• Traumatismo del parto",
             "• Policitemia"),
    ),
)

PROGNOSIS = (
    rule(ALWAYS, "📈 INDICADORES PRONÓSTICOS:", ""),
    one_of(
        rule(_status_is(GOOD),
             "✅ PRONÓSTICO EXCELENTE:",
             "• Adaptación extrauterina óptima",
             "• Bajo riesgo de complicaciones",
             "• Desarrollo neurológico normal esperado",
             "• Mortalidad neonatal mínima (<1%)"),
        rule(_status_is(MODERATE),
             "🟡 PRONÓSTICO MODERADO:",
             "• Requiere vigilancia estrecha",
             "• Riesgo moderado de complicaciones",
             "• Posibles secuelas neurológicas leves",
             "• Mortalidad neonatal baja (2-5%)"),
        rule(_status_is(IMMEDIATE),
             "🔴 PRONÓSTICO RESERVADO:",
             "• Alto riesgo de morbimortalidad",
             "• Posibles secuelas neurológicas graves",
             "• Requiere cuidados intensivos prolongados",
             "• Mortalidad neonatal significativa (15-30%)"),
    ),
    rule(_has_ga, "", "📅 IMPACTO DE EDAD GESTACIONAL:"),
    one_of(
        rule(lambda c: _has_ga(c) and c.gestational_age < 28,
             "• Extremadamente prematuro - Supervivencia 50-80%"),
        rule(lambda c: _has_ga(c) and c.gestational_age < 32, "• Muy prematuro - Supervivencia 85-95%"),
        rule(lambda c: _has_ga(c) and c.gestational_age < 37, "• Prematuro - Supervivencia >95%"),
        rule(lambda c: _has_ga(c) and c.gestational_age > 42,
             "• Postérmino - Riesgo de complicaciones aumentado"),
        rule(_has_ga, "• A término - Pronóstico óptimo esperado"),
    ),
    rule(_has_weight, "", "⚖️ IMPACTO DEL PESO AL NACER:"),
    one_of(
        rule(lambda c: _has_weight(c) and c.birth_weight < 1000, "• Peso extremadamente bajo - Alto riesgo"),
        rule(lambda c: _has_weight(c) and c.birth_weight < 1500, "• Muy bajo peso - Riesgo moderado-alto"),
        rule(lambda c: _has_weight(c) and c.birth_weight < 2500, "• Bajo peso - Vigilancia aumentada"),
        rule(lambda c: _has_weight(c) and c.birth_weight > 4500,
             "• Macrosomía - Riesgo de complicaciones metabólicas"),
        rule(_has_weight, "• Peso adecuado - Pronóstico favorable"),
    ),
    rule(lambda c: c.maternal_complications,
         "",
         "⚠️ COMPLICACIONES MATERNAS:",
         "• Aumentan riesgo de adaptación deficiente",
         "• Requieren monitoreo más intensivo",
         "• Posible necesidad de intervenciones adicionales"),
    rule(lambda c: c.multiple_birth,
         "",
         "👥 EMBARAZO MÚLTIPLE:",
         "• Mayor riesgo de prematurez",
         "• Posible síndrome transfusor-transfundido",
         "• Competencia intrauterina por nutrientes"),
)

FOLLOW_UP = (
    rule(ALWAYS, "📋 RECOMENDACIONES DE SEGUIMIENTO:", ""),
    one_of(
        rule(_status_is(GOOD),
             "✅ SEGUIMIENTO ESTÁNDAR:",
             "• Control pediátrico a los 3-5 días",
             "• Tamiz neonatal ampliado",
             "• Vacunación según esquema nacional",
             "• Promoción de lactancia materna exclusiva",
             "• Evaluación del desarrollo a los 2 meses"),
        rule(_status_is(MODERATE),
             "🟡 SEGUIMIENTO INTENSIFICADO:",
             "• Control pediátrico en 24-48 horas",
             "• Evaluación neurológica a las 2 semanas",
             "• Audiometría antes del alta",
             "• Ecocardiograma si indicado",
             "• Seguimiento del desarrollo mensual",
             "• Intervención temprana si necesario"),
        rule(_status_is(IMMEDIATE),
             "🚨 SEGUIMIENTO ESPECIALIZADO:",
             "• Neurología pediátrica urgente",
             "• Cardiología pediátrica",
             "• Programa de alto riesgo neurológico",
             "• Resonancia magnética cerebral",
             "• Evaluación oftalmológica",
             "• Fisioterapia y terapia ocupacional",
             "• Seguimiento multidisciplinario"),
    ),
    rule(lambda c: _has_ga(c) and c.gestational_age < 37,
         "",
         "👶 SEGUIMIENTO PREMATUREZ:",
         "• Programa de seguimiento de prematuros",
         "• Evaluación oftalmológica (retinopatía)",
         "• Audiometría (potenciales evocados)",
         "• Evaluación del desarrollo corregida por edad",
         "• Inmunizaciones según peso y edad gestacional"),
    rule(lambda c: _has_weight(c) and c.birth_weight < 2500,
         "",
         "⚖️ SEGUIMIENTO BAJO PESO:",
         "• Monitoreo estrecho del crecimiento",
         "• Suplementación nutricional si necesario",
         "• Evaluación del neurodesarrollo",
         "• Prevención de infecciones"),
    rule(lambda c: c.resuscitation_needed,
         "",
         "🚨 SEGUIMIENTO POST-REANIMACIÓN:",
         "• Evaluación neurológica especializada",
         "• EEG y neuroimagen si indicado",
         "• Programa de estimulación temprana",
         "• Evaluación cardiológica",
         "• Seguimiento pulmonar si ventilación prolongada"),
    rule(ALWAYS,
         "",
         "👨‍👩‍👧‍👦 APOYO FAMILIAR:",
         "• Educación sobre cuidados neonatales",
         "• Signos de alarma para consulta inmediata",
         "• Promoción del vínculo materno-filial",
         "• Apoyo psicológico si trauma del parto",
         "• Grupos de apoyo para padres"),
)

_INTERPRETATION = dedent("""
    INTERPRETACIÓN CLÍNICA - PUNTUACIÓN APGAR

    PUNTUACIÓN TOTAL: {total_score}/10 puntos
    TIEMPO DE EVALUACIÓN: {evaluation_time}
    ESTADO CLÍNICO: {status}

    COMPONENTES EVALUADOS:
    - Apariencia (Color): {appearance_color}/2 puntos
    - Pulso (Frecuencia Cardíaca): {pulse_heart_rate}/2 puntos
    - Gesticulación (Irritabilidad): {grimace_reflex}/2 puntos
    - Actividad (Tono Muscular): {activity_muscle_tone}/2 puntos
    - Respiración (Esfuerzo): {respiratory_effort}/2 puntos

    RANGOS DE INTERPRETACIÓN:
    - 7-10 puntos: Buen estado
    - 4-6 puntos: Asistencia moderada
    - 0-3 puntos: Asistencia inmediata

    SIGNIFICADO CLÍNICO:
    La puntuación APGAR evalúa la adaptación del recién nacido a la vida extrauterina. Desarrollada por la Dra. Virginia Apgar en 1952, es un predictor confiable de la necesidad de intervención médica inmediata.

    EVALUACIÓN TEMPORAL:
    - 1 minuto: Refleja tolerancia al proceso del parto
    - 5 minutos: Predictor de pronóstico neurológico
    - 10 minutos: Evaluación post-reanimación

    VALIDEZ CLÍNICA:
    - Sensibilidad del 99% para identificar neonatos que requieren reanimación
    - Especificidad del 95% para descartar depresión neonatal
    - Correlación significativa con pH de cordón umbilical

    LIMITACIONES:
    - No predice desarrollo neurológico a largo plazo por sí solo
    - Puede estar influenciado por medicamentos maternos
    - Prematurez puede afectar algunos componentes
    - Debe interpretarse en contexto clínico completo

    MARCO LEGAL MEXICANO:
    Basado en NOM-007-SSA2-2016 para la atención del embarazo, parto y puerperio. Evaluación obligatoria en todos los nacimientos en México.
""").strip("\n")


@dataclass(frozen=True)
class NewbornCase:
    scores: dict
    evaluation_time: str
    gestational_age: Optional[float]    # weeks
    birth_weight: Optional[float]       # grams
    delivery_type: str
    maternal_complications: bool
    multiple_birth: bool
    resuscitation_needed: bool

    @property
    def total_score(self) -> int:
        return sum(self.scores.values())

    @property
    def status(self) -> str:
        return clinical_status(self.total_score)


def detailed_assessment(case: NewbornCase) -> str:
    lines = [f"📊 EVALUACIÓN DETALLADA APGAR ({case.evaluation_time}):", ""]
    for sign in APGAR_SIGNS:
        score = case.scores[sign.field_id]
        descriptor, note = sign.scores[score]
        lines.extend([f"{sign.heading} ({score}/2):", f"• {descriptor}", note, ""])
    lines.pop()
    return join_lines(lines)


class ApgarScoreCalculator(Calculator):
    """Newborn adaptation at 1/5/10 minutes: five signs scored 0-2."""
    calculator_id = "apgar_score"
    name = "Puntuación APGAR"
    category = "neonatology"

    def _collect_errors(self, inputs, errors):
        for sign in APGAR_SIGNS:
            raw = inputs.get(sign.field_id)
            if is_blank(raw):
                errors.append(f"{sign.display_name} es obligatorio")
                continue
            score = score_from_option(raw)
            if score is None or not 0 <= score <= 2:
                errors.append(f"{sign.display_name} debe tener una puntuación válida (0-2)")

        if is_blank(inputs.get("evaluation_time")):
            errors.append("El tiempo de evaluación es obligatorio")

        check_number(inputs, "gestational_age", errors,
                     missing=None,
                     invalid="La edad gestacional debe estar entre 20-44 semanas",
                     accept=lambda w: 20 <= w <= 44)
        check_number(inputs, "birth_weight", errors,
                     missing=None,
                     invalid="El peso al nacer debe estar entre 500-6000 gramos",
                     accept=lambda g: 500 <= g <= 6000)

    def _parse(self, inputs) -> NewbornCase:
        return NewbornCase(
            scores={sign.field_id: score_from_option(inputs[sign.field_id]) for sign in APGAR_SIGNS},
            evaluation_time=get_text(inputs, "evaluation_time", DEFAULT_EVALUATION_TIME),
            gestational_age=get_float(inputs, "gestational_age"),
            birth_weight=get_float(inputs, "birth_weight"),
            delivery_type=get_text(inputs, "delivery_type", DEFAULT_DELIVERY),
            maternal_complications=get_bool(inputs, "maternal_complications"),
            multiple_birth=get_bool(inputs, "multiple_birth"),
            resuscitation_needed=get_bool(inputs, "resuscitation_needed"),
        )

    def _compute(self, case: NewbornCase):
        interpretation = STATUS_TEXT[case.status] + TIME_CONTEXT.get(case.evaluation_time, "")
        if case.gestational_age is not None:
            interpretation += first_message(GESTATIONAL_CONTEXT, case)

        return {
            "total_score": str(case.total_score),
            "clinical_status": case.status,
            "clinical_interpretation": interpretation,
            "detailed_assessment": detailed_assessment(case),
            "immediate_actions": join_lines(compose(IMMEDIATE_ACTIONS, case)),
            "monitoring_protocol": join_lines(compose(MONITORING, case)),
            "prognostic_indicators": join_lines(compose(PROGNOSIS, case)),
            "follow_up_recommendations": join_lines(compose(FOLLOW_UP, case)),
        }

    def interpret(self, result):
        components = {}
        for sign in APGAR_SIGNS:
            score = score_from_option(result.input_values.get(sign.field_id, ""))
            components[sign.field_id] = "" if score is None else score
        return _INTERPRETATION.format(
            total_score=result.result_values.get("total_score", ""),
            evaluation_time=result.input_values.get("evaluation_time", ""),
            status=result.result_values.get("clinical_status", ""),
            **components,
        )

    def references(self):
        return [
            Reference("NOM-007-SSA2-2016 para la atención del embarazo, parto y puerperio",
                      "Diario Oficial de la Federación (DOF)", url="https://dof.gob.mx"),
            Reference("Guías de Reanimación Neonatal", "Academia Mexicana de Pediatría", year=2023),
            Reference("Manual de Neonatología", "Instituto Nacional de Perinatología", year=2022),
            Reference("A proposal for a new method of evaluation of the newborn infant",
                      "Virginia Apgar, 1953 - Artículo original", year=1953),
            Reference("Protocolo de Atención del Recién Nacido", "Secretaría de Salud México", year=2023),
            Reference("Guía de Práctica Clínica: Prevención, Diagnóstico y Tratamiento del Recién Nacido "
                      "con Trastorno del Ritmo y Frecuencia Respiratoria",
                      "Instituto Mexicano del Seguro Social (IMSS)", year=2022),
            Reference("Manual de Procedimientos en Sala de Partos", "Hospital General de México", year=2023),
        ]
