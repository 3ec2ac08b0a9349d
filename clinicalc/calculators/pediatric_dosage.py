"""
Pediatric weight-based dosing from the Mexican pediatric formulary.

mg/kg/day = formulary dose x severity factor (or a custom dose for
"Otro medicamento"), then reduced for age band, prematurity and renal
function. Drug-specific age contraindications zero the dose; exceeding the
formulary maximum or minimum age only produces warnings.
"""

from dataclasses import dataclass
from textwrap import dedent
from typing import Optional

from clinicalc.calculators.base import Calculator
from clinicalc.constants import PEDIATRIC_CONSTANTS as PC
from clinicalc.formatting import fmt
from clinicalc.models import MedicationInfo, Reference, UnsupportedSelectorError
from clinicalc.parsing import (
    check_number,
    get_bool,
    get_float,
    get_int,
    get_text,
    is_blank,
    to_float,
)
from clinicalc.safety import ALWAYS, AdvisoryRule, compose, join_lines, one_of, rule


@dataclass(frozen=True)
class PediatricCase:
    weight: float
    age_months: float
    medication: str
    info: Optional[MedicationInfo]     # None for a custom medication
    doses_per_day: int
    concentration: Optional[float]
    condition: str
    severity: str
    renal_function: str
    premature: bool
    allergies: bool
    dose_per_kg: float = 0.0           # after every adjustment

    @property
    def total_daily_dose(self) -> float:
        return self.dose_per_kg * self.weight

    @property
    def dose_per_administration(self) -> float:
        return self.total_daily_dose / self.doses_per_day

    @property
    def volume_per_dose(self) -> Optional[float]:
        if self.concentration is None:
            return None
        return self.dose_per_administration / self.concentration


def adjust_for_age(dose: float, age_months: float, premature: bool, medication: str) -> float:
    if age_months < PC.NEONATE_MONTHS:
        dose *= PC.NEONATE_FACTOR
    elif age_months < PC.INFANT_MONTHS:
        dose *= PC.INFANT_FACTOR

    if premature and age_months < PC.PREMATURE_MONTHS:
        dose *= PC.PREMATURE_FACTOR

    limit = PC.CONTRAINDICATED_UNDER.get(medication)
    if limit is not None and age_months < limit:
        dose = 0.0
    return dose


def adjust_for_renal_function(dose: float, renal_function: str) -> float:
    return dose * PC.RENAL_FACTORS.get(renal_function, 1.0)


def dosing_schedule(doses_per_day: int) -> str:
    return PC.SCHEDULES.get(doses_per_day, PC.DEFAULT_SCHEDULE)


def _medication_is(name):
    return lambda c: c.medication == name


SAFETY_WARNINGS = (
    rule(lambda c: c.info is not None and c.dose_per_kg > c.info.max_dose_per_kg,
         "⚠️ DOSIS ALTA - Excede la dosis máxima recomendada"),
    rule(lambda c: c.info is not None and c.age_months < c.info.min_age_months,
         "⚠️ EDAD MÍNIMA - Medicamento no recomendado para esta edad"),
    rule(lambda c: c.weight < PC.LOW_BIRTH_WEIGHT_KG,
         "⚠️ PESO BAJO - Recién nacido de bajo peso, ajustar dosis"),
    rule(lambda c: c.age_months < PC.NEONATE_MONTHS,
         "⚠️ NEONATO - Dosis reducida aplicada automáticamente"),
    rule(lambda c: c.premature, "⚠️ PREMATURO - Dosis ajustada para prematurez"),
    rule(lambda c: c.renal_function != PC.NORMAL_RENAL,
         "⚠️ FUNCIÓN RENAL - Dosis ajustada por insuficiencia renal"),
    rule(_medication_is("Paracetamol"), "⚠️ No exceder 90 mg/kg/día - Riesgo de hepatotoxicidad"),
    rule(_medication_is("Ibuprofeno"), "⚠️ Administrar con alimentos - Evitar si hay deshidratación"),
    rule(lambda c: c.medication == "Ibuprofeno" and c.age_months < 6,
         "🚫 CONTRAINDICADO en menores de 6 meses"),
    rule(_medication_is("Amoxicilina"), "⚠️ Verificar alergias a penicilina antes de administrar"),
    rule(_medication_is("Dexametasona"),
         "⚠️ ESTEROIDE - Uso a corto plazo, monitorear efectos secundarios"),
    rule(lambda c: c.allergies, "⚠️ ALERGIAS CONOCIDAS - Verificar compatibilidad medicamentosa"),
    rule(ALWAYS,
         "⚠️ Verificar dosis con otro profesional de salud (doble verificación)",
         "⚠️ Usar jeringa o medidor adecuado para la edad"),
)

DRUG_INSTRUCTIONS = {
    "Amoxicilina": (
        "• Completar todo el tratamiento (7-10 días)",
        "• Puede administrarse con o sin alimentos",
        "• Refrigerar si es suspensión",
    ),
    "Paracetamol": (
        "• Puede administrarse con o sin alimentos",
        "• No exceder 5 días de uso continuo",
        "• Esperar al menos 4 horas entre dosis",
    ),
    "Ibuprofeno": (
        "• Administrar SIEMPRE con alimentos",
        "• Asegurar hidratación adecuada",
        "• No usar si hay vómitos o diarrea",
    ),
    "Salbutamol": (
        "• Enjuagar boca después de inhalación",
        "• Usar cámara espaciadora en menores de 4 años",
        "• Agitar inhalador antes de usar",
    ),
}

ADMINISTRATION = (
    rule(ALWAYS, "💊 INSTRUCCIONES DE ADMINISTRACIÓN:", ""),
    one_of(
        rule(lambda c: c.age_months < 6,
             "👶 LACTANTE:",
             "• Usar jeringa oral de 1-5 mL",
             "• Administrar lentamente en la mejilla",
             "• Evitar la parte posterior de la lengua",
             "• Puede mezclar con pequeña cantidad de leche materna"),
        rule(lambda c: c.age_months < 24,
             "🍼 BEBÉ:",
             "• Usar jeringa oral o cuchara medidora",
             "• Administrar sentado o semi-incorporado",
             "• Puede mezclarse con alimento si es necesario",
             "• No forzar si rechaza, intentar más tarde"),
        rule(lambda c: c.age_months < 72,
             "👦 NIÑO PEQUEÑO:",
             "• Usar vaso medidor o cuchara",
             "• Explicar que es medicina para sentirse mejor",
             "• Ofrecer agua después si acepta",
             "• Supervisión de adulto obligatoria"),
        rule(ALWAYS,
             "🧒 NIÑO MAYOR:",
             "• Puede usar vaso medidor",
             "• Enseñar la importancia de completar tratamiento",
             "• Supervisión de adulto para dosificación",
             "• Registrar horarios de administración"),
    ),
    AdvisoryRule(
        applies=lambda c: c.info is not None,
        message=lambda c: ("", f"📋 ESPECÍFICAS PARA {c.medication.upper()}:")
        + DRUG_INSTRUCTIONS.get(c.medication, ()),
    ),
    rule(ALWAYS,
         "",
         "⏰ HORARIOS:",
         "• Mantener horarios regulares",
         "• Usar alarmas o recordatorios",
         "• Anotar cada dosis administrada"),
)

MONITORING = (
    rule(ALWAYS,
         "📊 MONITOREO RECOMENDADO:",
         "",
         "👀 OBSERVACIÓN GENERAL:",
         "• Respuesta clínica a las 24-48 horas",
         "• Signos de mejoría o empeoramiento",
         "• Tolerancia a la medicación",
         "• Efectos secundarios"),
    rule(lambda c: c.age_months < 6,
         "",
         "👶 MONITOREO ESPECIAL LACTANTE:",
         "• Patrón de alimentación",
         "• Irritabilidad o somnolencia",
         "• Vómitos o regurgitación",
         "• Cambios en deposiciones"),
    rule(_medication_is("Paracetamol"),
         "",
         "💊 MONITOREO PARACETAMOL:",
         "• Efectividad en reducción de fiebre",
         "• No usar más de 5 días consecutivos",
         "• Vigilar signos de hepatotoxicidad (amarillez)"),
    rule(_medication_is("Ibuprofeno"),
         "",
         "💊 MONITOREO IBUPROFENO:",
         "• Hidratación adecuada",
         "• Dolor abdominal o vómitos",
         "• Función renal si uso prolongado"),
    rule(_medication_is("Amoxicilina"),
         "",
         "💊 MONITOREO ANTIBIÓTICO:",
         "• Mejoría de síntomas en 48-72 horas",
         "• Erupciones cutáneas (alergia)",
         "• Diarrea (cambio de flora intestinal)",
         "• Completar tratamiento aunque mejore"),
    rule(_medication_is("Dexametasona"),
         "",
         "💊 MONITOREO ESTEROIDE:",
         "• Respuesta respiratoria",
         "• Cambios de comportamiento",
         "• Aumento de apetito/sed",
         "• Uso por tiempo limitado"),
    rule(lambda c: c.renal_function != PC.NORMAL_RENAL,
         "",
         "🔬 MONITOREO FUNCIÓN RENAL:",
         "• Diuresis adecuada",
         "• Signos de retención de líquidos",
         "• Consulta nefrológica si empeora"),
    rule(ALWAYS,
         "",
         "🚨 CONTACTAR AL MÉDICO SI:",
         "• Vómitos persistentes (no retiene medicación)",
         "• Fiebre que no cede después de 48 horas",
         "• Erupciones cutáneas o hinchazón",
         "• Dificultad respiratoria",
         "• Cambios significativos en comportamiento",
         "• Empeoramiento de síntomas"),
)

AGE_WARNINGS = (
    rule(ALWAYS, "👶 CONSIDERACIONES POR EDAD:", ""),
    one_of(
        rule(lambda c: c.age_months < 1,
             "🍼 RECIÉN NACIDO (0-1 mes):",
             "• Metabolismo hepático inmaduro",
             "• Función renal reducida",
             "• Mayor riesgo de efectos secundarios",
             "• Monitoreo hospitalario recomendado"),
        rule(lambda c: c.age_months < 6,
             "👶 LACTANTE (1-6 meses):",
             "• Sistema inmune en desarrollo",
             "• Cuidado con medicamentos que afecten GI",
             "• Preferir formulaciones líquidas",
             "• Evitar miel como excipiente"),
        rule(lambda c: c.age_months < 24,
             "🍼 BEBÉ (6-24 meses):",
             "• Fase de mayor crecimiento",
             "• Ajustes frecuentes de dosis por peso",
             "• Cuidado con saborizantes artificiales",
             "• Supervisión constante de administración"),
        rule(lambda c: c.age_months < 72,
             "👦 PREESCOLAR (2-6 años):",
             "• Puede rechazar medicación por sabor",
             "• Explicaciones simples sobre el tratamiento",
             "• Usar técnicas de distracción si es necesario",
             "• Comenzar educación sobre medicamentos"),
        rule(ALWAYS,
             "🧒 ESCOLAR (6+ años):",
             "• Puede participar en su tratamiento",
             "• Enseñar importancia de adherencia",
             "• Supervisión adulta aún necesaria",
             "• Preparar para transición a adolescencia"),
    ),
    rule(lambda c: c.premature,
         "",
         "⚠️ PREMATUREZ:",
         "• Órganos menos maduros",
         "• Mayor susceptibilidad a efectos adversos",
         "• Posible necesidad de ajustes adicionales",
         "• Seguimiento especializado"),
    rule(lambda c: c.medication == "Ibuprofeno" and c.age_months < 6,
         "",
         "🚫 IBUPROFENO:",
         "• CONTRAINDICADO en menores de 6 meses",
         "• Usar paracetamol como alternativa"),
    rule(lambda c: c.medication == "Loratadina" and c.age_months < 12,
         "",
         "⚠️ LORATADINA:",
         "• No recomendado en menores de 1 año",
         "• Considerar antihistamínicos alternativos"),
)

_INTERPRETATION = dedent("""
    INTERPRETACIÓN CLÍNICA - DOSIFICACIÓN PEDIÁTRICA

    MEDICAMENTO: {medication}
    PACIENTE: {age_years} años ({age_months} meses), {weight} kg

    DOSIFICACIÓN CALCULADA:
    • Dosis total diaria: {total_dose} mg/día
    • Dosis por administración: {dose_per_admin} mg
    • Frecuencia: {doses_per_day} veces al día

    FÓRMULA UTILIZADA:
    Dosis total = Dosis recomendada (mg/kg/día) × Peso (kg)
    Dosis por toma = Dosis total ÷ Número de dosis por día

    PRINCIPIOS DE DOSIFICACIÓN PEDIÁTRICA:
    • Ajuste por peso corporal (mg/kg)
    • Consideración de madurez orgánica
    • Factores de seguridad adicionales
    • Formulaciones apropiadas para la edad

    FUENTES MEXICANAS:
    • Guía de Práctica Clínica: Farmacología en Pediatría
    • Secretaría de Salud México (gpc.salud.gob.mx)
    • Instituto Nacional de Pediatría
    • Normas farmacológicas pediátricas mexicanas

    CONSIDERACIONES ESPECIALES:
    • Verificación obligatoria por doble personal
    • Uso de jeringas/medidores apropiados para edad
    • Supervisión parental en administración
    • Monitoreo de efectividad y efectos adversos

    LIMITACIONES:
    • Dosis calculadas son orientativas
    • Requieren validación médica profesional
    • Factores individuales pueden requerir ajustes
    • Seguimiento clínico obligatorio
""").strip("\n")


class PediatricDosageCalculator(Calculator):
    calculator_id = "pediatric_dosage"
    name = "Dosificación Pediátrica"
    category = "pharmacology"

    def _collect_errors(self, inputs, errors):
        check_number(inputs, "patient_weight", errors,
                     missing="El peso del paciente es obligatorio",
                     invalid="El peso debe ser un número válido",
                     accept=lambda w: 0.5 <= w <= 80.0,
                     out_of_range="El peso debe estar entre 0.5-80 kg")
        check_number(inputs, "patient_age_months", errors,
                     missing="La edad del paciente es obligatoria",
                     invalid="La edad debe ser un número válido",
                     accept=lambda a: 0 <= a <= 216,
                     out_of_range="La edad debe estar entre 0-216 meses (0-18 años)")

        medication = inputs.get("medication")
        if is_blank(medication):
            errors.append("Debe seleccionar un medicamento")

        if medication == PC.CUSTOM_MEDICATION:
            check_number(inputs, "custom_dose_per_kg", errors,
                         missing="Debe especificar la dosis personalizada para 'Otro medicamento'",
                         invalid="La dosis personalizada debe estar entre 0.1-500 mg/kg/día",
                         accept=lambda d: 0 < d <= 500)
            check_number(inputs, "custom_doses_per_day", errors,
                         missing="Debe especificar el número de dosis por día",
                         invalid="El número de dosis debe estar entre 1-6 por día",
                         accept=lambda n: 1 <= n <= 6,
                         integer=True)

        check_number(inputs, "medication_concentration", errors,
                     missing=None,
                     invalid="La concentración debe estar entre 0.1-1000 mg/mL",
                     accept=lambda c: 0 < c <= 1000)

    def _parse(self, inputs) -> PediatricCase:
        weight = get_float(inputs, "patient_weight")
        age_months = get_float(inputs, "patient_age_months")
        medication = inputs["medication"]
        severity = get_text(inputs, "severity", PC.DEFAULT_SEVERITY)
        renal_function = get_text(inputs, "renal_function", PC.NORMAL_RENAL)
        premature = get_bool(inputs, "premature_infant")

        if medication == PC.CUSTOM_MEDICATION:
            info = None
            base_dose = get_float(inputs, "custom_dose_per_kg")
            doses_per_day = get_int(inputs, "custom_doses_per_day")
        else:
            info = PC.FORMULARY.get(medication)
            if info is None:
                raise UnsupportedSelectorError(f"Medicamento no encontrado: {medication}")
            base_dose = info.standard_dose_per_kg * PC.SEVERITY_FACTORS.get(severity, 1.0)
            doses_per_day = info.doses_per_day

        dose = adjust_for_age(base_dose, age_months, premature, medication)
        dose = adjust_for_renal_function(dose, renal_function)

        return PediatricCase(
            weight=weight,
            age_months=age_months,
            medication=medication,
            info=info,
            doses_per_day=doses_per_day,
            concentration=get_float(inputs, "medication_concentration"),
            condition=get_text(inputs, "clinical_condition", PC.DEFAULT_CONDITION),
            severity=severity,
            renal_function=renal_function,
            premature=premature,
            allergies=get_bool(inputs, "allergies"),
            dose_per_kg=dose,
        )

    def _compute(self, case: PediatricCase):
        volume = case.volume_per_dose
        return {
            "recommended_dose_per_kg": fmt(case.dose_per_kg, 1),
            "total_daily_dose": fmt(case.total_daily_dose, 1),
            "dose_per_administration": fmt(case.dose_per_administration, 1),
            "volume_per_dose": fmt(volume, 2) if volume is not None else PC.NOT_CALCULATED,
            "doses_per_day": str(case.doses_per_day),
            "dosing_schedule": dosing_schedule(case.doses_per_day),
            "safety_warnings": join_lines(compose(SAFETY_WARNINGS, case)),
            "administration_instructions": join_lines(compose(ADMINISTRATION, case)),
            "monitoring_recommendations": join_lines(compose(MONITORING, case)),
            "age_appropriate_warnings": join_lines(compose(AGE_WARNINGS, case)),
        }

    def interpret(self, result):
        values = result.result_values
        age_months = result.input_values.get("patient_age_months", "")
        return _INTERPRETATION.format(
            medication=result.input_values.get("medication", ""),
            age_years=fmt((to_float(age_months) or 0.0) / 12, 1),
            age_months=age_months,
            weight=result.input_values.get("patient_weight", ""),
            total_dose=values.get("total_daily_dose", ""),
            dose_per_admin=values.get("dose_per_administration", ""),
            doses_per_day=values.get("doses_per_day", ""),
        )

    def references(self):
        return [
            Reference("Guía de Práctica Clínica: Farmacología en Pediatría", "Secretaría de Salud México",
                      url="http://gpc.salud.gob.mx"),
            Reference("Manual de Dosificación Pediátrica", "Instituto Nacional de Pediatría", year=2023),
            Reference("Farmacología Pediátrica Clínica", "Hospital Infantil de México Federico Gómez", year=2022),
            Reference("Guías de Prescripción Segura en Pediatría",
                      "Instituto Mexicano del Seguro Social (IMSS)", year=2023),
            Reference("Pediatric Drug Dosing Guidelines", "American Academy of Pediatrics", year=2022),
        ]
