# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Domain records: Intervention, Technician, Keyword."""
from planning.models.domain import Intervention, Keyword, Technician

__all__ = ["Intervention", "Keyword", "Technician"]
