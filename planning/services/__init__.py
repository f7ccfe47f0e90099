# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Business logic: entity rules, calendar queries, layout, persistence."""
