# service.py
"""
Calculator registry.

The surrounding application registers every calculator once at startup and
afterwards only reads: requests are routed by id without the caller knowing
the concrete class.
"""

import logging
from typing import Dict, List, Optional

from clinicalc.calculators import ALL_CALCULATORS, Calculator
from clinicalc.models import (
    CalculationResult,
    CalculatorNotFoundError,
    FieldValues,
    Reference,
    ValidationResult,
)

logger = logging.getLogger(__name__)


class CalculatorService:
    def __init__(self):
        self._calculators: Dict[str, Calculator] = {}

    def register(self, calculator: Calculator) -> None:
        """Adds a calculator. Re-registering an id replaces the previous one."""
        if calculator.calculator_id in self._calculators:
            logger.warning("Replacing calculator %s", calculator.calculator_id)
        self._calculators[calculator.calculator_id] = calculator
        logger.debug("Registered calculator %s", calculator.calculator_id)

    def get_calculator(self, calculator_id: str) -> Optional[Calculator]:
        return self._calculators.get(calculator_id)

    def resolve(self, calculator_id: str) -> Calculator:
        calculator = self._calculators.get(calculator_id)
        if calculator is None:
            logger.warning("Unknown calculator requested: %s", calculator_id)
            raise CalculatorNotFoundError(calculator_id)
        return calculator

    def get_all_calculator_ids(self) -> List[str]:
        return list(self._calculators)

    def list_calculators(self) -> List[Dict[str, str]]:
        return [
            {"id": c.calculator_id, "name": c.name, "category": c.category}
            for c in self._calculators.values()
        ]

    def validate_inputs(self, calculator_id: str, inputs: FieldValues) -> ValidationResult:
        # Unknown ids come back as a failed validation rather than an exception
        calculator = self.get_calculator(calculator_id)
        if calculator is None:
            logger.warning("Unknown calculator requested: %s", calculator_id)
            return ValidationResult.from_errors([str(CalculatorNotFoundError(calculator_id))])
        return calculator.validate(inputs)

    def perform_calculation(self, calculator_id: str, inputs: FieldValues) -> CalculationResult:
        return self.resolve(calculator_id).calculate(inputs)

    def get_interpretation(self, calculator_id: str, result: CalculationResult) -> str:
        return self.resolve(calculator_id).get_interpretation(result)

    def get_references(self, calculator_id: str) -> List[Reference]:
        return self.resolve(calculator_id).get_references()

    def __contains__(self, calculator_id) -> bool:
        return calculator_id in self._calculators

    def __len__(self) -> int:
        return len(self._calculators)


def build_default_service() -> CalculatorService:
    """Service with every bundled calculator registered."""
    service = CalculatorService()
    for calculator_cls in ALL_CALCULATORS:
        service.register(calculator_cls())
    return service
