"""Utilities for importing subjects and exporting enriched contact records."""
from __future__ import annotations

from .exporters import build_json_export, export_json, export_records, records_to_dataframe
from .loaders import UnsupportedFileTypeError, load_subjects

__all__ = [
    "UnsupportedFileTypeError",
    "build_json_export",
    "export_json",
    "export_records",
    "load_subjects",
    "records_to_dataframe",
]
