# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Pure helpers — time slots and technician colors. No state, no I/O."""
