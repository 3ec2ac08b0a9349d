# main.py

import logging
from dataclasses import asdict
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from clinicalc import MEDICAL_DISCLAIMER, __version__
from clinicalc.models import (
    CalculatorNotFoundError,
    ClinicalCalcError,
    InvalidInputError,
)
from clinicalc.service import build_default_service

# --- 1. CONFIGURATION & LOGGING ---
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("clinicalc-api")

app = FastAPI(
    title="Clinicalc API",
    version=__version__,
    description="Calculadoras clínicas validadas con interpretación en español.\n\n"
                f"**AVISO**: {MEDICAL_DISCLAIMER}",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Populated once, read-only afterwards
service = build_default_service()


@app.get("/")
def read_root():
    return {"status": "active", "message": "Clinicalc API is running successfully!"}


@app.get("/health")
def health_check():
    """Liveness probe."""
    return {"status": "active", "version": __version__, "module": "clinicalc-engine",
            "calculators": len(service)}


# --- 2. SCHEMAS ---
class CalculationRequest(BaseModel):
    # Raw field values exactly as the form collected them
    inputs: Dict[str, str] = Field(default_factory=dict, description="Field id -> textual value")

    class Config:
        json_schema_extra = {
            "example": {
                "inputs": {"height": "170", "weight": "70"}
            }
        }


class CalculatorSummary(BaseModel):
    id: str
    name: str
    category: str


class ReferenceResponse(BaseModel):
    title: str
    source: str
    year: Optional[int] = None
    url: Optional[str] = None


class ValidationResponse(BaseModel):
    is_valid: bool
    errors: List[str]


class CalculationResponse(BaseModel):
    calculator_id: str
    input_values: Dict[str, str]
    result_values: Dict[str, str]
    interpretation: str
    timestamp: int


def _resolve_or_404(calculator_id: str):
    try:
        return service.resolve(calculator_id)
    except CalculatorNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


# --- 3. ENDPOINTS ---
@app.get("/calculators", response_model=List[CalculatorSummary])
def list_calculators():
    return service.list_calculators()


@app.get("/calculators/{calculator_id}/references", response_model=List[ReferenceResponse])
def get_references(calculator_id: str):
    calculator = _resolve_or_404(calculator_id)
    return [asdict(ref) for ref in calculator.get_references()]


@app.post("/calculators/{calculator_id}/validate", response_model=ValidationResponse)
def validate_inputs(calculator_id: str, request: CalculationRequest):
    calculator = _resolve_or_404(calculator_id)
    validation = calculator.validate(request.inputs)
    return {"is_valid": validation.is_valid, "errors": validation.errors}


@app.post("/calculators/{calculator_id}/calculate", response_model=CalculationResponse)
def calculate(calculator_id: str, request: CalculationRequest):
    """
    Validates and runs one calculator. The interpretation text is generated
    from the same result so the client never needs a second round trip.
    """
    calculator = _resolve_or_404(calculator_id)
    try:
        logger.info("Processing calculation for %s (%d fields)", calculator_id, len(request.inputs))
        result = calculator.calculate(request.inputs)
        interpretation = calculator.get_interpretation(result)

    except InvalidInputError as e:
        logger.warning("Validation failed for %s: %s", calculator_id, e)
        raise HTTPException(status_code=422, detail={"message": "Datos de entrada inválidos",
                                                     "errors": e.errors})

    except ClinicalCalcError as e:
        # Selector accepted by validation but with no computation behind it
        logger.warning("Clinical calculation error for %s: %s", calculator_id, e)
        raise HTTPException(status_code=422, detail={"message": str(e), "errors": [str(e)]})

    except Exception:
        logger.error("Internal engine failure in %s", calculator_id, exc_info=True)
        raise HTTPException(status_code=500, detail="Internal Calculation Engine Error")

    return {
        "calculator_id": result.calculator_id,
        "input_values": result.input_values,
        "result_values": result.result_values,
        "interpretation": interpretation,
        "timestamp": result.timestamp,
    }
