# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Field-intervention planning core: entity store, calendar queries and
overlap layout for technician dispatch calendars.
"""

__version__ = "1.0.0"
