# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Data access — pure CRUD over in-memory maps and persisted blobs."""
