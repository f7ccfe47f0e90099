# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Core plumbing: settings, logging, errors, storage engine and wiring."""
