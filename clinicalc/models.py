"""
clinicalc: Data Dictionary for the Calculation Engine
=====================================================
Value objects exchanged between the surrounding application and the
calculators: raw field maps in, validation outcomes and immutable
results out.

NO LOGIC is implemented here beyond the invariants the objects enforce
on themselves.
"""

import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

# Raw boundary contract: field id -> textual value
FieldValues = Dict[str, str]


class ClinicalCalcError(ValueError):
    """Base class for every failure the engine reports."""
    pass


class InvalidInputError(ClinicalCalcError):
    """Raised by calculate() when validation fails. Message is the joined error list."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class UnsupportedSelectorError(ClinicalCalcError):
    """A categorical input passed validation but has no computation behind it."""
    pass


class CalculatorNotFoundError(ClinicalCalcError):
    """Registry lookup for an id nobody registered."""

    def __init__(self, calculator_id: str):
        self.calculator_id = calculator_id
        super().__init__(f"Calculator not found: {calculator_id}")


# --- 1. VALIDATION ---

@dataclass(frozen=True)
class ValidationResult:
    """Outcome of the pre-computation checks. Valid iff there are no errors."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)

    def __post_init__(self):
        if self.is_valid != (len(self.errors) == 0):
            raise ValueError("is_valid must be True exactly when errors is empty")

    @classmethod
    def from_errors(cls, errors: List[str]) -> "ValidationResult":
        return cls(is_valid=not errors, errors=list(errors))


# --- 2. RESULTS ---

def _now_millis() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class CalculationResult:
    """
    A completed computation.
    `input_values` echoes what the caller sent, `result_values` holds the
    formatted outputs. Both are private copies so later edits by the caller
    cannot leak in.
    """
    calculator_id: str
    input_values: FieldValues
    result_values: FieldValues
    timestamp: int = field(default_factory=_now_millis)  # ms since epoch

    def __post_init__(self):
        object.__setattr__(self, "input_values", dict(self.input_values))
        object.__setattr__(self, "result_values", dict(self.result_values))


@dataclass(frozen=True)
class Reference:
    """Static citation shown under each calculator."""
    title: str
    source: str
    year: Optional[int] = None
    url: Optional[str] = None


# --- 3. LOOKUP RECORDS ---

@dataclass(frozen=True)
class MedicationInfo:
    """One row of the pediatric formulary. Doses in mg/kg/day."""
    standard_dose_per_kg: float
    max_dose_per_kg: float
    doses_per_day: int
    min_age_months: int
    max_age_months: int
    route: str
    special_conditions: Tuple[str, ...] = ()
