from dataclasses import dataclass
from textwrap import dedent
from typing import Optional

from clinicalc.calculators.base import Calculator
from clinicalc.constants import CONVERSION_LIBRARY as CONV
from clinicalc.formatting import fmt, plain
from clinicalc.models import Reference, UnsupportedSelectorError
from clinicalc.parsing import check_number, get_float, get_text, is_blank, to_float
from clinicalc.safety import ALWAYS, compose, join_lines, rule


@dataclass(frozen=True)
class ConversionCase:
    conversion_type: str
    value: float
    concentration: Optional[float]
    substance: str
    insulin_type: str


# --- 1. CLINICAL NOTE TABLES ---

MG_ML_NOTES = (
    rule(lambda n: n.ml < 0.1, "⚠️ VOLUMEN MUY PEQUEÑO - Verificar precisión de administración"),
    rule(lambda n: n.ml > 10.0, "⚠️ VOLUMEN GRANDE - Considerar dividir en múltiples dosis"),
    rule(lambda n: n.concentration > 500.0, "💊 ALTA CONCENTRACIÓN - Medicamento muy concentrado"),
    rule(ALWAYS, "✅ Verificar concentración del vial antes de administrar",
         "📋 Usar jeringa apropiada para el volumen calculado"),
)

MEQ_NOTES = (
    rule(lambda n: "KCl" in n.substance, "⚡ POTASIO - Monitorear ECG y función renal"),
    rule(lambda n: "KCl" in n.substance and n.meq > 40, "⚠️ DOSIS ALTA DE K+ - Verificar indicación"),
    rule(lambda n: "NaCl" in n.substance, "🧂 SODIO - Monitorear balance hídrico"),
    rule(lambda n: "NaCl" in n.substance and n.meq > 100, "⚠️ ALTA CARGA DE Na+ - Vigilar sobrecarga"),
    rule(lambda n: "CaCl2" in n.substance, "🦴 CALCIO - Monitorear ritmo cardíaco",
         "⚠️ ADMINISTRACIÓN IV LENTA obligatoria"),
    rule(lambda n: "MgSO4" in n.substance, "🧠 MAGNESIO - Vigilar reflejos tendinosos",
         "⚠️ Puede causar DEPRESIÓN RESPIRATORIA"),
    rule(ALWAYS, "📊 Verificar electrolitos séricos antes y después",
         "💉 Calcular velocidad de infusión apropiada"),
)

MCG_MG_NOTES = (
    rule(lambda n: n.mcg < 100 and n.mg < 0.1, "🔬 DOSIS MUY PEQUEÑA - Verificar unidades de medida"),
    rule(lambda n: n.mcg > 10000, "📏 CONSIDERAR USAR MG para mayor claridad"),
    rule(ALWAYS, "✅ Conversión métrica estándar",
         "📋 Verificar que las unidades coincidan en prescripción",
         "⚠️ CUIDADO CON ERRORES de factor 1000"),
)

INSULIN_NOTES = (
    rule(lambda n: n.units > 50, "⚠️ DOSIS ALTA DE INSULINA - Verificar indicación"),
    rule(lambda n: n.ml < 0.1, "⚠️ VOLUMEN MUY PEQUEÑO - Usar jeringa de insulina"),
    rule(lambda n: "40 U/mL" in n.insulin_type, "🔴 CONCENTRACIÓN U-40 - Usar jeringa específica"),
    rule(lambda n: "40 U/mL" not in n.insulin_type and "100 U/mL" in n.insulin_type,
         "🔵 CONCENTRACIÓN U-100 - Concentración estándar"),
    rule(ALWAYS, "💉 Usar siempre JERINGA DE INSULINA",
         "🍽️ Coordinar con horarios de comida",
         "📊 Monitorear glucemia antes y después"),
)


@dataclass(frozen=True)
class _Notes:
    ml: float = 0.0
    mg: float = 0.0
    mcg: float = 0.0
    meq: float = 0.0
    units: float = 0.0
    concentration: float = 0.0
    substance: str = ""
    insulin_type: str = ""


# --- 2. CONVERSIONS ---

def _mg_to_ml(case: ConversionCase):
    mg, concentration = case.value, case.concentration
    ml = mg / concentration
    return {
        "converted_value": fmt(ml, 3),
        "output_unit": "mL",
        "conversion_formula": f"mL = mg ÷ Concentración\nmL = {plain(mg)} ÷ {plain(concentration)} = {fmt(ml, 3)}",
        "clinical_notes": join_lines(compose(MG_ML_NOTES, _Notes(ml=ml, concentration=concentration))),
        "equivalent_weight_info": f"Concentración utilizada: {plain(concentration)} mg/mL",
    }


def _ml_to_mg(case: ConversionCase):
    ml, concentration = case.value, case.concentration
    mg = ml * concentration
    return {
        "converted_value": fmt(mg, 2),
        "output_unit": "mg",
        "conversion_formula": f"mg = mL × Concentración\nmg = {plain(ml)} × {plain(concentration)} = {fmt(mg, 2)}",
        "clinical_notes": join_lines(compose(MG_ML_NOTES, _Notes(ml=ml, concentration=concentration))),
        "equivalent_weight_info": f"Concentración utilizada: {plain(concentration)} mg/mL",
    }


def _meq_to_mg(case: ConversionCase):
    meq, substance = case.value, case.substance
    weight = CONV.EQUIVALENT_WEIGHTS[substance]
    mg = meq * weight
    return {
        "converted_value": fmt(mg, 2),
        "output_unit": "mg",
        "conversion_formula": f"mg = mEq × Peso Equivalente\nmg = {plain(meq)} × {plain(weight)} = {fmt(mg, 2)}",
        "clinical_notes": join_lines(compose(MEQ_NOTES, _Notes(meq=meq, mg=mg, substance=substance))),
        "equivalent_weight_info": f"Peso equivalente de {substance}: {plain(weight)} mg/mEq",
    }


def _mg_to_meq(case: ConversionCase):
    mg, substance = case.value, case.substance
    weight = CONV.EQUIVALENT_WEIGHTS[substance]
    meq = mg / weight
    return {
        "converted_value": fmt(meq, 2),
        "output_unit": "mEq",
        "conversion_formula": f"mEq = mg ÷ Peso Equivalente\nmEq = {plain(mg)} ÷ {plain(weight)} = {fmt(meq, 2)}",
        "clinical_notes": join_lines(compose(MEQ_NOTES, _Notes(meq=meq, mg=mg, substance=substance))),
        "equivalent_weight_info": f"Peso equivalente de {substance}: {plain(weight)} mg/mEq",
    }


def _mcg_to_mg(case: ConversionCase):
    mcg = case.value
    mg = mcg / CONV.MCG_PER_MG
    return {
        "converted_value": fmt(mg, 3),
        "output_unit": "mg",
        "conversion_formula": f"mg = mcg ÷ 1000\nmg = {plain(mcg)} ÷ 1000 = {fmt(mg, 3)}",
        "clinical_notes": join_lines(compose(MCG_MG_NOTES, _Notes(mcg=mcg, mg=mg))),
        "equivalent_weight_info": "Factor de conversión: 1 mg = 1000 mcg",
    }


def _mg_to_mcg(case: ConversionCase):
    mg = case.value
    mcg = mg * CONV.MCG_PER_MG
    return {
        "converted_value": fmt(mcg, 1),
        "output_unit": "mcg",
        "conversion_formula": f"mcg = mg × 1000\nmcg = {plain(mg)} × 1000 = {fmt(mcg, 1)}",
        "clinical_notes": join_lines(compose(MCG_MG_NOTES, _Notes(mcg=mcg, mg=mg))),
        "equivalent_weight_info": "Factor de conversión: 1 mg = 1000 mcg",
    }


def _units_to_ml(case: ConversionCase):
    units, insulin_type = case.value, case.insulin_type
    concentration = CONV.insulin_concentration(insulin_type)
    ml = units / concentration
    return {
        "converted_value": fmt(ml, 2),
        "output_unit": "mL",
        "conversion_formula": f"mL = Unidades ÷ Concentración\nmL = {plain(units)} ÷ {plain(concentration)} = {fmt(ml, 2)}",
        "clinical_notes": join_lines(compose(INSULIN_NOTES, _Notes(units=units, ml=ml, insulin_type=insulin_type))),
        "equivalent_weight_info": f"Concentración de {insulin_type}: {plain(concentration)} U/mL",
    }


CONVERSIONS = {
    CONV.MG_TO_ML: _mg_to_ml,
    CONV.ML_TO_MG: _ml_to_mg,
    CONV.MEQ_TO_MG: _meq_to_mg,
    CONV.MG_TO_MEQ: _mg_to_meq,
    CONV.MCG_TO_MG: _mcg_to_mg,
    CONV.MG_TO_MCG: _mg_to_mcg,
    CONV.UNITS_TO_ML: _units_to_ml,
}

_INTERPRETATION = dedent("""
    INTERPRETACIÓN CLÍNICA - CONVERSOR DE UNIDADES

    💱 RESULTADO: {converted_value} {output_unit}
    📐 CONVERSIÓN: {conversion_type}

    📋 FÓRMULA UTILIZADA:
    {formula}

    ⚠️ VERIFICACIONES OBLIGATORIAS:
    • Confirmar CONCENTRACIÓN DEL MEDICAMENTO antes de administrar
    • Verificar UNIDADES DE MEDIDA en prescripción médica
    • Usar JERINGA APROPIADA para el volumen calculado
    • DOBLE VERIFICACIÓN para medicamentos de alto riesgo

    🔬 PRECISIÓN DE CÁLCULO:
    • Conversiones mg/mL: 3 decimales
    • Conversiones mEq: 2 decimales
    • Conversiones mcg: Alta precisión
    • Factores validados farmacológicamente

    📚 BASES CIENTÍFICAS:
    • Pesos equivalentes farmacológicos estándar
    • Concentraciones comerciales verificadas
    • Fórmulas universales de farmacología clínica
""").strip("\n")


class UnitConverterCalculator(Calculator):
    """mg/mL, mEq/mg, mcg/mg and insulin units/mL conversions."""
    calculator_id = "unit_converter"
    name = "Conversor de Unidades"
    category = "pharmacology"

    def _collect_errors(self, inputs, errors):
        conversion_type = inputs.get("conversion_type")
        if is_blank(conversion_type):
            errors.append("El tipo de conversión es obligatorio")

        raw_value = inputs.get("input_value")
        if is_blank(raw_value):
            errors.append("El valor a convertir es obligatorio")
        else:
            value = to_float(raw_value)
            if value is None:
                errors.append("El valor debe ser un número válido")
            elif value <= 0:
                errors.append("El valor debe ser mayor que cero")
            elif value > CONV.MAX_INPUT_VALUE:
                errors.append("El valor es demasiado grande")

        if conversion_type in CONV.CONCENTRATION_CONVERSIONS:
            check_number(inputs, "concentration", errors,
                         missing="La concentración es obligatoria para conversiones mg/mL",
                         invalid="La concentración debe ser un número válido",
                         accept=lambda c: c > 0,
                         out_of_range="La concentración debe ser mayor que cero")

        if conversion_type in CONV.MEQ_CONVERSIONS:
            substance = inputs.get("substance_for_meq")
            if is_blank(substance):
                errors.append("La sustancia es obligatoria para conversiones mEq")
            elif substance not in CONV.EQUIVALENT_WEIGHTS:
                errors.append("Sustancia no reconocida para conversión mEq")

    def _parse(self, inputs) -> ConversionCase:
        return ConversionCase(
            conversion_type=inputs["conversion_type"],
            value=get_float(inputs, "input_value"),
            concentration=get_float(inputs, "concentration"),
            substance=get_text(inputs, "substance_for_meq", ""),
            insulin_type=get_text(inputs, "insulin_type", CONV.DEFAULT_INSULIN),
        )

    def _compute(self, case: ConversionCase):
        convert = CONVERSIONS.get(case.conversion_type)
        if convert is None:
            raise UnsupportedSelectorError("Tipo de conversión no soportado")
        return convert(case)

    def interpret(self, result):
        return _INTERPRETATION.format(
            converted_value=result.result_values.get("converted_value", ""),
            output_unit=result.result_values.get("output_unit", ""),
            formula=result.result_values.get("conversion_formula", ""),
            conversion_type=result.input_values.get("conversion_type", ""),
        )

    def references(self):
        return [
            Reference("Dosage Calculations for Nursing Students", "WTCS Pressbooks",
                      url="https://wtcs.pressbooks.pub/dosagecalculations/"),
            Reference("Fórmulas de Conversión en Farmacología", "Manual de Farmacología Clínica", year=2023),
            Reference("Equivalent Weights of Common Electrolytes",
                      "American Journal of Health-System Pharmacy", year=2022),
            Reference("Insulin Concentration Standards", "International Diabetes Federation", year=2023),
            Reference("Medication Safety in Unit Conversions",
                      "Institute for Safe Medication Practices", year=2022),
        ]
