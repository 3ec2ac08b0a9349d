"""
Sodium and potassium replacement.

Sodium: deficit = (target - current) x weight x 0.6, never corrected faster
than 12 mEq/L per 24 h (scaled to the chosen window). Symptomatic patients
get 25% headroom, but only when the window is at least 24 h.

Potassium: deficit = (target - current) x weight x 4, capped per dose by
route, reduced for renal impairment, and infused no faster than 20 mEq/h
(10 mEq/h with an abnormal heart) over at least 2 h.
"""

from dataclasses import dataclass
from textwrap import dedent

from clinicalc.calculators.base import Calculator
from clinicalc.constants import ELECTROLYTE_CONSTANTS as EC
from clinicalc.formatting import fmt
from clinicalc.models import Reference
from clinicalc.parsing import check_number, get_bool, get_float, get_text
from clinicalc.safety import ALWAYS, compose, join_lines, one_of, rule


@dataclass(frozen=True)
class SodiumPlan:
    deficit: float              # mEq
    corrected_amount: float     # mEq actually replaced in the window
    rate: float                 # mEq/h
    saline_volume_ml: float     # 0.9% NaCl


@dataclass(frozen=True)
class PotassiumPlan:
    deficit: float
    dose: float                 # mEq
    infusion_rate: float        # mEq/h, 0 for oral


@dataclass(frozen=True)
class ElectrolyteCase:
    weight: float
    age: float
    current_sodium: float
    target_sodium: float
    current_potassium: float
    target_potassium: float
    correction_hours: float
    route: str
    renal_function: str
    cardiac_status: str
    diuretic_use: bool
    neurological_symptoms: bool
    sodium: SodiumPlan
    potassium: PotassiumPlan

    @property
    def oral(self) -> bool:
        return self.route == EC.ORAL_ROUTE

    @property
    def cardiac_abnormal(self) -> bool:
        return self.cardiac_status != EC.NORMAL


def sodium_safety_cap(weight: float, hours: float) -> float:
    """Largest amount (mEq) that keeps the correction within 12 mEq/L per 24 h."""
    return (EC.MAX_SODIUM_CORRECTION * weight * EC.SODIUM_DISTRIBUTION_FACTOR) * (hours / 24.0)


def plan_sodium(current: float, target: float, weight: float, hours: float,
                neurological_symptoms: bool) -> SodiumPlan:
    deficit = (target - current) * weight * EC.SODIUM_DISTRIBUTION_FACTOR
    cap = sodium_safety_cap(weight, hours)
    if neurological_symptoms and hours >= EC.NEURO_ALLOWANCE_MIN_HOURS:
        cap *= EC.NEURO_ALLOWANCE
    corrected = min(deficit, cap)
    return SodiumPlan(
        deficit=deficit,
        corrected_amount=corrected,
        rate=corrected / hours,
        saline_volume_ml=(corrected / EC.NORMAL_SALINE_NA) * 1000,
    )


def plan_potassium(current: float, target: float, weight: float, route: str,
                   renal_function: str, cardiac_status: str) -> PotassiumPlan:
    deficit = (target - current) * weight * EC.POTASSIUM_DEFICIT_FACTOR
    oral = route == EC.ORAL_ROUTE

    dose = min(EC.MAX_ORAL_K_DOSE if oral else EC.MAX_IV_K_DOSE, deficit)
    dose *= EC.RENAL_DOSE_FACTORS.get(renal_function, 1.0)

    if oral:
        rate = 0.0
    else:
        max_rate = EC.MAX_K_IV_RATE if cardiac_status == EC.NORMAL else EC.MAX_K_IV_RATE_CARDIAC
        rate = min(max_rate, dose / EC.MIN_K_INFUSION_HOURS)
    return PotassiumPlan(deficit=deficit, dose=dose, infusion_rate=rate)


CONDITIONAL_WARNINGS = (
    one_of(
        rule(lambda c: c.current_sodium < 120.0, "🚨 HIPONATREMIA SEVERA - Riesgo de edema cerebral"),
        rule(lambda c: c.current_sodium < 125.0, "⚠️ HIPONATREMIA GRAVE - Monitoreo neurológico intensivo"),
        rule(lambda c: c.current_sodium > 150.0, "⚠️ HIPERNATREMIA - Corrección gradual obligatoria"),
    ),
    rule(lambda c: c.sodium.rate > 0.5 and c.current_sodium < 125.0,
         "⚠️ CORRECCIÓN RÁPIDA Na+ - Riesgo de desmielinización osmótica"),
    rule(lambda c: c.neurological_symptoms,
         "🧠 SÍNTOMAS NEUROLÓGICOS - Balance riesgo/beneficio crítico"),
    one_of(
        rule(lambda c: c.current_potassium < 2.5, "🚨 HIPOPOTASEMIA SEVERA - Riesgo de arritmias letales"),
        rule(lambda c: c.current_potassium < 3.0, "⚠️ HIPOPOTASEMIA GRAVE - Monitoreo cardíaco continuo"),
        rule(lambda c: c.current_potassium > 5.5, "⚠️ HIPERPOTASEMIA - Verificar función renal"),
    ),
    rule(lambda c: c.potassium.infusion_rate > 10.0,
         "⚠️ INFUSIÓN K+ RÁPIDA - Monitoreo cardíaco obligatorio"),
    rule(lambda c: c.renal_function in EC.IMPAIRED_RENAL,
         "🔴 FUNCIÓN RENAL COMPROMETIDA - Ajuste de dosis obligatorio"),
    rule(lambda c: c.cardiac_abnormal,
         "❤️ ESTADO CARDÍACO ALTERADO - Infusión lenta de electrolitos"),
)
SAFE_PARAMETERS = "✅ Parámetros dentro de rangos de seguridad"
STANDING_WARNINGS = (
    "⚠️ NUNCA administrar K+ IV en bolo",
    "⚠️ Verificar permeabilidad venosa antes de infusión",
)

MONITORING = (
    rule(ALWAYS, "📊 MONITOREO OBLIGATORIO:"),
    one_of(
        rule(lambda c: c.current_sodium < 125.0 or c.current_potassium < 2.5,
             "• Electrolitos séricos cada 2-4 horas",
             "• Monitoreo cardíaco continuo"),
        rule(lambda c: c.current_sodium < 130.0 or c.current_potassium < 3.0,
             "• Electrolitos séricos cada 6 horas",
             "• Monitoreo cardíaco cada 2 horas"),
        rule(ALWAYS,
             "• Electrolitos séricos cada 8-12 horas",
             "• Signos vitales cada 4 horas"),
    ),
    rule(lambda c: c.current_sodium < 130.0,
         "• Evaluación neurológica cada 2 horas",
         "• Escala de coma de Glasgow",
         "• Vigilar convulsiones y alteraciones mentales"),
    rule(lambda c: c.current_potassium < 3.5 or c.cardiac_abnormal,
         "• ECG cada 4 horas",
         "• Vigilar arritmias y cambios ST-T",
         "• Monitoreo de QT prolongado"),
    rule(lambda c: c.renal_function != EC.NORMAL,
         "• Creatinina sérica diaria",
         "• Balance hídrico estricto",
         "• Diuresis cada hora"),
    rule(ALWAYS,
         "• Verificar sitio de infusión cada hora",
         "• Documentar volumen y velocidad de infusión",
         "• Tener disponible calcio IV para emergencias K+"),
)

SOLUTIONS = (
    rule(ALWAYS, "💊 SOLUCIONES RECOMENDADAS:"),
    rule(lambda c: c.sodium.deficit > 0,
         "• SODIO:",
         "  - Solución Salina 0.9% (154 mEq/L)",
         "  - Solución Salina 3% (513 mEq/L) solo en UCI",
         "  - Lactato de Ringer (130 mEq/L) alternativa"),
    rule(lambda c: c.potassium.dose > 0 and c.oral,
         "• POTASIO:",
         "  - Cloruro de Potasio VO: 10-20 mEq por toma",
         "  - Citrato de Potasio: mejor tolerancia gástrica",
         "  - Administrar con alimentos"),
    rule(lambda c: c.potassium.dose > 0 and not c.oral,
         "• POTASIO:",
         "  - Cloruro de Potasio IV: máximo 80 mEq/L",
         "  - Fosfato de Potasio: si también déficit de fósforo",
         "  - Diluir en solución glucosada o salina",
         "  - NUNCA en bolo directo"),
    rule(lambda c: c.renal_function in EC.IMPAIRED_RENAL,
         "• CONSIDERACIONES RENALES:",
         "  - Reducir dosis de mantenimiento",
         "  - Evitar soluciones con fósforo",
         "  - Monitoreo más frecuente"),
    rule(ALWAYS,
         "• COMPATIBILIDADES:",
         "  - K+ compatible con glucosa, salina, lactato",
         "  - Evitar mezclar electrolitos concentrados",
         "  - Usar bombas de infusión para precisión"),
)

_INTERPRETATION = dedent("""
    INTERPRETACIÓN CLÍNICA - GESTIÓN DE ELECTROLITOS

    ⚡ RESULTADOS PRINCIPALES:
    • Déficit de Sodio: {sodium_deficit} mEq
    • Déficit de Potasio: {potassium_deficit} mEq
    • Velocidad reemplazo Na+: {sodium_rate} mEq/h
    • Velocidad infusión K+: {potassium_rate} mEq/h

    📊 NIVELES ACTUALES:
    • Sodio sérico: {current_na} mEq/L (Normal: 135-145)
    • Potasio sérico: {current_k} mEq/L (Normal: 3.5-5.0)

    🔬 METODOLOGÍA IMSS:
    • Déficit Na+: (Deseado - Actual) × Peso × 0.6
    • Límite seguridad: 12 mEq/L por 24h
    • K+ máximo IV: 20 mEq/h con monitoreo
    • Factores de distribución validados

    ⚠️ LÍMITES DE SEGURIDAD:
    • Corrección Na+ máxima: 12 mEq/L/24h
    • Infusión K+ máxima: 20 mEq/h (10 mEq/h sin monitoreo)
    • Concentración K+ IV: máximo 80 mEq/L periférico
    • Monitoreo cardíaco obligatorio para K+ >10 mEq/h

    🚨 COMPLICACIONES CRÍTICAS:
    • Síndrome de desmielinización osmótica (Na+ rápido)
    • Arritmias cardíacas por hipopotasemia
    • Edema cerebral por hiponatremia severa
    • Hiperpotasemia iatrogénica

    🏥 PROTOCOLO MEXICANO IMSS:
    • Basado en guías institucionales 2023
    • Validado para población mexicana
    • Ajustado por función renal
    • Incluye factores de comorbilidad
""").strip("\n")


class ElectrolyteManagementCalculator(Calculator):
    calculator_id = "electrolyte_management"
    name = "Gestión de Electrolitos (Na+/K+)"
    category = "fluids"

    def _collect_errors(self, inputs, errors):
        na_low, na_high = EC.NORMAL_SODIUM
        k_low, k_high = EC.NORMAL_POTASSIUM

        check_number(inputs, "patient_weight", errors,
                     missing="El peso del paciente es obligatorio",
                     invalid="El peso debe estar entre 1-200 kg",
                     accept=lambda w: 0 < w <= 200.0)
        check_number(inputs, "patient_age", errors,
                     missing=None,
                     invalid="La edad debe estar entre 0-120 años",
                     accept=lambda a: 0 <= a <= 120.0)
        check_number(inputs, "current_sodium", errors,
                     missing="El sodio sérico actual es obligatorio",
                     invalid="Sodio actual debe estar entre 100-180 mEq/L",
                     accept=lambda na: 100.0 <= na <= 180.0)
        check_number(inputs, "target_sodium", errors,
                     missing="El sodio deseado es obligatorio",
                     invalid="Sodio deseado debe estar entre 135-145 mEq/L",
                     accept=lambda na: na_low <= na <= na_high)
        check_number(inputs, "current_potassium", errors,
                     missing="El potasio sérico actual es obligatorio",
                     invalid="Potasio actual debe estar entre 1.5-6.0 mEq/L",
                     accept=lambda k: 1.5 <= k <= 6.0)
        check_number(inputs, "target_potassium", errors,
                     missing="El potasio deseado es obligatorio",
                     invalid="Potasio deseado debe estar entre 3.5-5.0 mEq/L",
                     accept=lambda k: k_low <= k <= k_high)
        check_number(inputs, "correction_time_hours", errors,
                     missing=None,
                     invalid="Tiempo de corrección debe estar entre 6-48 horas",
                     accept=lambda h: 6.0 <= h <= 48.0)

    def _parse(self, inputs) -> ElectrolyteCase:
        weight = get_float(inputs, "patient_weight")
        age = get_float(inputs, "patient_age")
        hours = get_float(inputs, "correction_time_hours")
        hours = EC.DEFAULT_CORRECTION_HOURS if hours is None else hours
        current_na = get_float(inputs, "current_sodium")
        target_na = get_float(inputs, "target_sodium")
        current_k = get_float(inputs, "current_potassium")
        target_k = get_float(inputs, "target_potassium")
        route = get_text(inputs, "potassium_route", EC.DEFAULT_ROUTE)
        renal = get_text(inputs, "renal_function", EC.NORMAL)
        cardiac = get_text(inputs, "cardiac_status", EC.NORMAL)
        neuro = get_bool(inputs, "neurological_symptoms")

        return ElectrolyteCase(
            weight=weight,
            age=EC.DEFAULT_AGE if age is None else age,
            current_sodium=current_na, target_sodium=target_na,
            current_potassium=current_k, target_potassium=target_k,
            correction_hours=hours, route=route,
            renal_function=renal, cardiac_status=cardiac,
            diuretic_use=get_bool(inputs, "diuretic_use"),
            neurological_symptoms=neuro,
            sodium=plan_sodium(current_na, target_na, weight, hours, neuro),
            potassium=plan_potassium(current_k, target_k, weight, route, renal, cardiac),
        )

    def _compute(self, case: ElectrolyteCase):
        warnings = compose(CONDITIONAL_WARNINGS, case) or [SAFE_PARAMETERS]
        warnings.extend(STANDING_WARNINGS)

        return {
            "sodium_deficit": fmt(case.sodium.deficit, 1),
            "sodium_replacement_rate": fmt(case.sodium.rate, 2),
            "sodium_solution_volume": fmt(case.sodium.saline_volume_ml, 0),
            "potassium_deficit": fmt(case.potassium.deficit, 1),
            "potassium_dose": fmt(case.potassium.dose, 1),
            "potassium_infusion_rate": fmt(case.potassium.infusion_rate, 1),
            "safety_warnings": join_lines(warnings),
            "monitoring_protocol": join_lines(compose(MONITORING, case)),
            "solution_recommendations": join_lines(compose(SOLUTIONS, case)),
        }

    def interpret(self, result):
        values = result.result_values
        return _INTERPRETATION.format(
            sodium_deficit=values.get("sodium_deficit", ""),
            potassium_deficit=values.get("potassium_deficit", ""),
            sodium_rate=values.get("sodium_replacement_rate", ""),
            potassium_rate=values.get("potassium_infusion_rate", ""),
            current_na=result.input_values.get("current_sodium", ""),
            current_k=result.input_values.get("current_potassium", ""),
        )

    def references(self):
        return [
            Reference("Manejo de Trastornos Hidroelectrolíticos",
                      "Instituto Mexicano del Seguro Social (IMSS)", year=2023),
            Reference("Corrección Segura de Hiponatremia", "Blog Roosevelt Hospital México",
                      url="https://blog.roosevelt.edu.mx"),
            Reference("Protocolos de Seguridad del Paciente", "Aesculap Seguridad del Paciente México",
                      url="https://aesculapseguridaddelpaciente.org.mx"),
            Reference("Reemplazo de Electrolitos en Pediatría", "Salud Infantil México",
                      url="https://saludinfantil.org"),
            Reference("Electrolyte Disorders in Critical Care", "SlideShare Medical Education",
                      url="https://www.slideshare.net"),
        ]
