import logging
from abc import ABC, abstractmethod
from typing import Any, List, Mapping

from clinicalc.models import (
    CalculationResult,
    FieldValues,
    InvalidInputError,
    Reference,
    ValidationResult,
)

logger = logging.getLogger(__name__)


class Calculator(ABC):
    """
    Contract shared by every clinical tool.

    Subclasses declare `calculator_id`, `name`, `category` and implement:
      - _collect_errors(inputs): append every problem, never stop early
      - _parse(inputs): typed record, called only on valid input
      - _compute(case): result map of formatted strings
      - interpret(result), references()

    Instances hold no per-request state; lookup tables are class constants.
    """
    calculator_id: str = ""
    name: str = ""
    category: str = "general"

    def validate(self, inputs: Mapping[str, str]) -> ValidationResult:
        errors: List[str] = []
        self._collect_errors(inputs, errors)
        return ValidationResult.from_errors(errors)

    def calculate(self, inputs: Mapping[str, str]) -> CalculationResult:
        validation = self.validate(inputs)
        if not validation.is_valid:
            raise InvalidInputError(validation.errors)

        logger.debug("Calculating %s", self.calculator_id)
        case = self._parse(inputs)
        return CalculationResult(
            calculator_id=self.calculator_id,
            input_values=dict(inputs),
            result_values=self._compute(case),
        )

    # Names used by the surrounding application
    def get_interpretation(self, result: CalculationResult) -> str:
        return self.interpret(result)

    def get_references(self) -> List[Reference]:
        return self.references()

    @abstractmethod
    def _collect_errors(self, inputs: Mapping[str, str], errors: List[str]) -> None:
        ...

    @abstractmethod
    def _parse(self, inputs: Mapping[str, str]) -> Any:
        ...

    @abstractmethod
    def _compute(self, case: Any) -> FieldValues:
        ...

    @abstractmethod
    def interpret(self, result: CalculationResult) -> str:
        ...

    @abstractmethod
    def references(self) -> List[Reference]:
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.calculator_id}>"
