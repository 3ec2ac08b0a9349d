"""
clinicalc: validated clinical calculations with Spanish-language rationale.

Decision support only. Every result must be reviewed by a qualified
professional before it reaches a patient.
"""

from clinicalc.constants import VERSION

__version__ = VERSION

MEDICAL_DISCLAIMER = (
    "Esta herramienta es un apoyo para la toma de decisiones clínicas. "
    "Los resultados no sustituyen el juicio profesional y deben verificarse "
    "antes de cualquier intervención."
)
