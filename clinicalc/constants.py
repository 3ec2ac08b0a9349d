from clinicalc.models import MedicationInfo

VERSION = "1.0.0"


class HEPARIN_CONSTANTS:
    """Enoxaparin protocol (mg, mg/kg)."""
    PROPHYLACTIC = "Profiláctico"
    THERAPEUTIC = "Terapéutico"
    TREATMENT_TYPES = (PROPHYLACTIC, THERAPEUTIC)

    PROPHYLACTIC_DOSE = 40.0
    PROPHYLACTIC_REDUCED_DOSE = 20.0    # high bleeding risk or ClCr < 30 mL/min
    PROPHYLACTIC_ELDERLY_DOSE = 30.0    # > 75 years, no other reduction
    PROPHYLACTIC_FREQUENCY = "cada 24 horas"

    # Schedule label: (mg/kg per dose, frequency text)
    THERAPEUTIC_SCHEDULES = {
        "1 mg/kg cada 12h": (1.0, "cada 12 horas"),
        "1.5 mg/kg cada 24h": (1.5, "cada 24 horas"),
    }
    RENAL_FACTOR = 0.75
    SYRINGE_STEP_MG = 2.5
    HIGH_THERAPEUTIC_DOSE_MG = 150.0


class CONVERSION_LIBRARY:
    """Constants behind the unit converter."""
    MG_TO_ML = "mg → mL"
    ML_TO_MG = "mL → mg"
    MEQ_TO_MG = "mEq → mg"
    MG_TO_MEQ = "mg → mEq"
    MCG_TO_MG = "mcg → mg"
    MG_TO_MCG = "mg → mcg"
    UNITS_TO_ML = "Unidades → mL"

    CONCENTRATION_CONVERSIONS = (MG_TO_ML, ML_TO_MG)
    MEQ_CONVERSIONS = (MEQ_TO_MG, MG_TO_MEQ)
    MAX_INPUT_VALUE = 999999.0
    MCG_PER_MG = 1000.0

    # Equivalent weight (mg/mEq)
    EQUIVALENT_WEIGHTS = {
        "KCl (Cloruro de Potasio)": 74.5,
        "NaCl (Cloruro de Sodio)": 58.4,
        "CaCl2 (Cloruro de Calcio)": 147.0,
        "MgSO4 (Sulfato de Magnesio)": 246.0,
        "NaHCO3 (Bicarbonato de Sodio)": 84.0,
    }

    # Insulin concentration (U/mL)
    DEFAULT_INSULIN = "Insulina Regular (100 U/mL)"
    DEFAULT_INSULIN_CONCENTRATION = 100.0
    INSULIN_CONCENTRATIONS = {
        "Insulina Regular (100 U/mL)": 100.0,
        "Insulina NPH (100 U/mL)": 100.0,
        "Insulina Rápida (100 U/mL)": 100.0,
        "Insulina Lenta (40 U/mL)": 40.0,
    }

    @staticmethod
    def insulin_concentration(insulin_type: str) -> float:
        return CONVERSION_LIBRARY.INSULIN_CONCENTRATIONS.get(
            insulin_type, CONVERSION_LIBRARY.DEFAULT_INSULIN_CONCENTRATION)


class IV_CONSTANTS:
    # Tubing label: drops per mL (gtt/mL)
    DROP_FACTORS = {
        "10 gtt/mL": 10.0,
        "15 gtt/mL": 15.0,
        "20 gtt/mL": 20.0,
        "60 gtt/mL (microgotero)": 60.0,
    }
    DEFAULT_FLUID = "Solución Salina 0.9%"
    MAX_VOLUME_ML = 5000.0
    MAX_TIME_HOURS = 48.0
    MAX_WEIGHT_KG = 200.0


class FLUID_BALANCE_CONSTANTS:
    """Insensible losses per UNAM/IMSS bedside tables."""
    ADULT_INSENSIBLE_ML_PER_KG = 15.0       # mL/kg/24h
    PEDIATRIC_INSENSIBLE_ML_PER_KG = 20.0   # mL/kg/24h, weight < 20 kg
    PEDIATRIC_WEIGHT_LIMIT_KG = 20.0
    FEVER_PERCENT_PER_DEGREE = 13.0         # above 37 C
    FEVER_THRESHOLD_C = 37.0
    DEFAULT_TEMPERATURE_C = 36.5
    VENTILATION_FACTOR = 0.5                # humidified circuit
    HYPERVENTILATION_FACTOR = 1.5
    DEFAULT_ENVIRONMENT = "Normal"
    ENVIRONMENT_FACTORS = {
        "Calor Extremo": 1.8,
        "Fototerapia": 1.3,
        "Incubadora": 0.7,
        "Ambiente Seco": 1.2,
    }

    # (field id, breakdown label)
    INTAKE_FIELDS = (
        ("oral_intake", "Vía oral"),
        ("iv_fluids", "Fluidos IV"),
        ("enteral_feeding", "Alimentación enteral"),
        ("medications_fluids", "Medicamentos"),
        ("other_intake", "Otros"),
    )
    OUTPUT_FIELDS = (
        ("urine_output", "Diuresis"),
        ("vomit", "Vómitos"),
        ("drainage", "Drenajes"),
        ("diarrhea", "Diarrea"),
    )


class ELECTROLYTE_CONSTANTS:
    """IMSS replacement protocol."""
    SODIUM_DISTRIBUTION_FACTOR = 0.6        # total body water fraction
    MAX_SODIUM_CORRECTION = 12.0            # mEq/L per 24 h
    NEURO_ALLOWANCE = 1.25                  # symptomatic, window >= 24 h
    NEURO_ALLOWANCE_MIN_HOURS = 24.0
    NORMAL_SALINE_NA = 154.0                # mEq/L
    POTASSIUM_DEFICIT_FACTOR = 4.0          # mEq per (mEq/L x kg)
    MAX_ORAL_K_DOSE = 80.0                  # mEq per dose
    MAX_IV_K_DOSE = 40.0
    MAX_K_IV_RATE = 20.0                    # mEq/h
    MAX_K_IV_RATE_CARDIAC = 10.0
    MIN_K_INFUSION_HOURS = 2.0

    NORMAL_SODIUM = (135.0, 145.0)
    NORMAL_POTASSIUM = (3.5, 5.0)

    ORAL_ROUTE = "Vía Oral"
    DEFAULT_ROUTE = "Vía Intravenosa"
    NORMAL = "Normal"
    DEFAULT_AGE = 45.0
    DEFAULT_CORRECTION_HOURS = 24.0

    RENAL_DOSE_FACTORS = {
        "Insuficiencia Severa": 0.5,
        "Diálisis": 0.5,
        "Insuficiencia Moderada": 0.75,
    }
    IMPAIRED_RENAL = ("Insuficiencia Moderada", "Insuficiencia Severa")


class PEDIATRIC_CONSTANTS:
    """Mexican pediatric formulary. Ages in months, doses in mg/kg/day."""
    CUSTOM_MEDICATION = "Otro medicamento"

    FORMULARY = {
        "Amoxicilina": MedicationInfo(
            50.0, 90.0, 2, 1, 216, "Oral",
            ("Infección Respiratoria", "Infección del Oído", "Infección Urinaria")),
        "Paracetamol": MedicationInfo(
            60.0, 90.0, 4, 1, 216, "Oral/IV", ("Fiebre", "Dolor/Inflamación")),
        # Not recommended under 6 months
        "Ibuprofeno": MedicationInfo(
            20.0, 40.0, 3, 6, 216, "Oral", ("Fiebre", "Dolor/Inflamación")),
        "Azitromicina": MedicationInfo(
            10.0, 12.0, 1, 6, 216, "Oral", ("Infección Respiratoria", "Infección del Oído")),
        "Cefixima": MedicationInfo(
            8.0, 12.0, 2, 6, 216, "Oral", ("Infección Respiratoria", "Infección Urinaria")),
        # Dose expressed as the trimethoprim component
        "Trimetoprim-Sulfametoxazol": MedicationInfo(
            8.0, 12.0, 2, 2, 216, "Oral", ("Infección Urinaria", "Infección Gastrointestinal")),
        "Claritromicina": MedicationInfo(
            15.0, 20.0, 2, 6, 216, "Oral", ("Infección Respiratoria",)),
        "Dexametasona": MedicationInfo(
            0.6, 1.0, 1, 1, 216, "Oral/IV", ("Asma/Broncoespasmo", "Inflamación")),
        "Salbutamol": MedicationInfo(
            0.3, 0.5, 3, 2, 216, "Oral/Inhalado", ("Asma/Broncoespasmo",)),
        "Loratadina": MedicationInfo(
            0.2, 0.3, 1, 12, 216, "Oral", ("Alergia",)),
        "Cetirizina": MedicationInfo(
            0.25, 0.5, 1, 6, 216, "Oral", ("Alergia",)),
        "Furosemida": MedicationInfo(
            2.0, 6.0, 2, 1, 216, "Oral/IV", ("Edema", "Insuficiencia Cardíaca")),
    }

    SEVERITY_FACTORS = {"Leve": 0.8, "Moderada": 1.0, "Severa": 1.2}
    DEFAULT_SEVERITY = "Moderada"

    RENAL_FACTORS = {
        "Insuficiencia Leve": 0.8,
        "Insuficiencia Moderada": 0.6,
        "Insuficiencia Severa": 0.4,
    }
    NORMAL_RENAL = "Normal"
    DEFAULT_CONDITION = "Otra condición"

    NEONATE_MONTHS = 1
    NEONATE_FACTOR = 0.5
    INFANT_MONTHS = 12
    INFANT_FACTOR = 0.8
    PREMATURE_MONTHS = 3
    PREMATURE_FACTOR = 0.7

    # Drug -> age (months) below which the dose is zeroed
    CONTRAINDICATED_UNDER = {"Ibuprofeno": 6, "Loratadina": 12}

    LOW_BIRTH_WEIGHT_KG = 2.5

    SCHEDULES = {
        1: "Una vez al día (cada 24 horas)",
        2: "Cada 12 horas (8:00 AM y 8:00 PM)",
        3: "Cada 8 horas (8:00 AM, 4:00 PM, 12:00 AM)",
        4: "Cada 6 horas (6:00 AM, 12:00 PM, 6:00 PM, 12:00 AM)",
        6: "Cada 4 horas (6:00 AM, 10:00 AM, 2:00 PM, 6:00 PM, 10:00 PM, 2:00 AM)",
    }
    DEFAULT_SCHEDULE = "Según indicación médica"
    NOT_CALCULATED = "No calculado"
