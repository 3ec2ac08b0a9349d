from dataclasses import dataclass
from textwrap import dedent
from typing import Tuple

from clinicalc.calculators.base import Calculator
from clinicalc.formatting import fmt
from clinicalc.models import Reference
from clinicalc.parsing import check_number, get_float
from clinicalc.safety import join_lines

# (upper bound exclusive, IMSS category)
CATEGORY_BANDS: Tuple[Tuple[float, str], ...] = (
    (18.5, "Bajo peso"),
    (25.0, "Peso normal"),
    (30.0, "Sobrepeso"),
    (35.0, "Obesidad grado I"),
    (40.0, "Obesidad grado II"),
)
TOP_CATEGORY = "Obesidad grado III"

HEALTHY_BMI = (18.5, 24.9)

RECOMMENDATIONS = {
    "Bajo peso": (
        "CONSULTA MÉDICA para evaluación nutricional",
        "Incrementar ingesta calórica saludable",
        "Considerar suplementos nutricionales",
        "Ejercicio de fortalecimiento muscular",
    ),
    "Peso normal": (
        "MANTENER peso actual con dieta equilibrada",
        "Ejercicio regular 150 min/semana",
        "Controles médicos anuales de rutina",
        "Hidratación adecuada 2-3 L/día",
    ),
    "Sobrepeso": (
        "REDUCIR peso 5-10% en 6 meses",
        "Dieta hipocalórica supervisada",
        "Ejercicio aeróbico 300 min/semana",
        "Control médico cada 3 meses",
    ),
    "Obesidad grado I": (
        "CONSULTA NUTRICIONAL urgente",
        "Reducir peso 10-15% gradualmente",
        "Ejercicio supervisado y progresivo",
        "Evaluar factores de riesgo cardiovascular",
    ),
    "Obesidad grado II": (
        "MANEJO MÉDICO ESPECIALIZADO",
        "Evaluar cirugía bariátrica",
        "Control de diabetes e hipertensión",
        "Seguimiento psicológico",
    ),
    "Obesidad grado III": (
        "URGENTE: Evaluación bariátrica",
        "Manejo multidisciplinario inmediato",
        "Control metabólico estricto",
        "Monitoreo cardiológico",
    ),
}

_INTERPRETATION = dedent("""
    INTERPRETACIÓN CLÍNICA - ÍNDICE DE MASA CORPORAL

    IMC CALCULADO: {bmi} kg/m²
    CATEGORÍA IMSS: {category}
    PESO ACTUAL: {weight} kg
    ESTATURA: {height} cm
    RANGO SALUDABLE: {weight_range}

    CLASIFICACIÓN IMSS:
    • Bajo peso: <18.5 kg/m²
    • Peso normal: 18.5-24.9 kg/m²
    • Sobrepeso: 25.0-29.9 kg/m²
    • Obesidad I: 30.0-34.9 kg/m²
    • Obesidad II: 35.0-39.9 kg/m²
    • Obesidad III: ≥40.0 kg/m²

    FÓRMULA UTILIZADA:
    IMC = Peso (kg) ÷ [Estatura (m)]²
    IMC = {weight} ÷ [{height_m}]² = {bmi}

    EVALUACIÓN CLÍNICA:
    El IMC es un indicador de masa corporal que correlaciona con grasa corporal y riesgos de salud. Valores fuera del rango normal requieren evaluación médica y modificaciones del estilo de vida.

    LIMITACIONES:
    • No distingue entre masa muscular y grasa
    • Puede sobreestimar obesidad en atletas
    • Subestima riesgo en adultos mayores
    • Requiere evaluación clínica complementaria
""").strip("\n")


@dataclass(frozen=True)
class BodyCase:
    height_m: float
    weight: float

    @property
    def bmi(self) -> float:
        return self.weight / self.height_m ** 2


def classify(bmi: float) -> str:
    for upper, category in CATEGORY_BANDS:
        if bmi < upper:
            return category
    return TOP_CATEGORY


def healthy_weight_range(height_m: float) -> str:
    low, high = HEALTHY_BMI
    return f"{fmt(low * height_m ** 2, 1)} - {fmt(high * height_m ** 2, 1)} kg"


class BMICalculator(Calculator):
    calculator_id = "bmi_calculator"
    name = "Índice de Masa Corporal (IMC)"
    category = "anthropometry"

    def _collect_errors(self, inputs, errors):
        check_number(inputs, "height", errors,
                     missing="La estatura es obligatoria",
                     invalid="La estatura debe ser un número válido",
                     accept=lambda h: 50.0 <= h <= 250.0,
                     out_of_range="La estatura debe estar entre 50-250 cm")
        check_number(inputs, "weight", errors,
                     missing="El peso es obligatorio",
                     invalid="El peso debe ser un número válido",
                     accept=lambda w: 3.0 <= w <= 300.0,
                     out_of_range="El peso debe estar entre 3-300 kg")

    def _parse(self, inputs) -> BodyCase:
        return BodyCase(height_m=get_float(inputs, "height") / 100.0,
                        weight=get_float(inputs, "weight"))

    def _compute(self, case: BodyCase):
        category = classify(case.bmi)
        return {
            "bmi": fmt(case.bmi, 1),
            "category": category,
            "health_recommendations": join_lines(RECOMMENDATIONS[category]),
            "weight_range": healthy_weight_range(case.height_m),
        }

    def interpret(self, result):
        values = result.result_values
        height = result.input_values.get("height", "")
        height_cm = get_float(result.input_values, "height")
        return _INTERPRETATION.format(
            bmi=values.get("bmi", ""),
            category=values.get("category", ""),
            weight_range=values.get("weight_range", ""),
            weight=result.input_values.get("weight", ""),
            height=height,
            height_m=fmt(height_cm / 100.0, 2) if height_cm is not None else "",
        )

    def references(self):
        return [
            Reference("Clasificación del IMC", "Instituto Mexicano del Seguro Social (IMSS)", year=2023),
            Reference("Evaluación Nutricional en Adultos", "Norma Oficial Mexicana NOM-043-SSA2-2012", year=2012),
            Reference("Obesidad y Factores de Riesgo Cardiovascular", "SciELO México - Revista Médica", year=2022),
            Reference("Body Mass Index Guidelines", "World Health Organization", year=2023),
            Reference("Manejo Integral de la Obesidad", "Secretaría de Salud México", year=2023),
        ]
