from clinicalc.calculators.apgar_score import ApgarScoreCalculator
from clinicalc.calculators.base import Calculator
from clinicalc.calculators.bmi_calculator import BMICalculator
from clinicalc.calculators.braden_scale import BradenScaleCalculator
from clinicalc.calculators.electrolyte_management import ElectrolyteManagementCalculator
from clinicalc.calculators.fluid_balance import FluidBalanceCalculator
from clinicalc.calculators.glasgow_coma_scale import GlasgowComaScaleCalculator
from clinicalc.calculators.heparin_dosage import HeparinDosageCalculator
from clinicalc.calculators.iv_drip_rate import IVDripRateCalculator
from clinicalc.calculators.map_calculator import MAPCalculator
from clinicalc.calculators.medication_dosage import MedicationDosageCalculator
from clinicalc.calculators.minute_ventilation import MinuteVentilationCalculator
from clinicalc.calculators.pediatric_dosage import PediatricDosageCalculator
from clinicalc.calculators.unit_converter import UnitConverterCalculator

# Registration order of the default service
ALL_CALCULATORS = (
    MedicationDosageCalculator,
    HeparinDosageCalculator,
    UnitConverterCalculator,
    IVDripRateCalculator,
    FluidBalanceCalculator,
    ElectrolyteManagementCalculator,
    BMICalculator,
    MAPCalculator,
    MinuteVentilationCalculator,
    PediatricDosageCalculator,
    BradenScaleCalculator,
    GlasgowComaScaleCalculator,
    ApgarScoreCalculator,
)

__all__ = [cls.__name__ for cls in ALL_CALCULATORS] + ["ALL_CALCULATORS", "Calculator"]
