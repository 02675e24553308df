"""Utilities for loading subjects from spreadsheets."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, List, Mapping, MutableMapping, Optional, Sequence, Union

import pandas as pd

from ..models import Subject

PathLike = Union[str, Path]

_FIELD_SYNONYMS: Mapping[str, Sequence[str]] = {
    "first_name": ("first name", "firstname", "first"),
    "middle_name": ("middle name", "middlename", "middle"),
    "last_name": ("last name", "lastname", "last"),
    "city": ("city",),
    "state": ("state", "region"),
    "trade": ("trade",),
    "license_number": ("license #", "license number", "licensenumber", "license"),
    "status": ("status",),
}

_SUBJECT_FIELDS = ("first_name", "middle_name", "last_name", "city", "state")


class UnsupportedFileTypeError(ValueError):
    """Raised when an unsupported file format is passed to the loader."""


def load_subjects(
    path: PathLike,
    *,
    column_mapping: Optional[Mapping[str, str]] = None,
    sheet_name: Union[str, int, None] = 0,
    loader_kwargs: Optional[MutableMapping[str, Any]] = None,
) -> List[Subject]:
    """Load subjects from a spreadsheet.

    Parameters
    ----------
    path:
        Path to the CSV/TSV/XLSX file to be loaded.
    column_mapping:
        Optional mapping of :class:`Subject` field names (plus ``trade``,
        ``license_number`` and ``status``) to column names. Fields without an
        explicit mapping are matched against known header spellings such as
        ``first name``, ``firstName`` or ``First Name``.
    sheet_name:
        Sheet selector passed to :func:`pandas.read_excel`. Ignored for CSV.
    loader_kwargs:
        Extra keyword arguments forwarded to :func:`pandas.read_csv` or
        :func:`pandas.read_excel`.

    Rows in which first name, last name and city are all blank are dropped.
    """

    dataframe = _read_dataframe(path, sheet_name=sheet_name, loader_kwargs=loader_kwargs)
    mapping = dict(column_mapping or {})
    resolved = {field: _resolve_column(field, dataframe.columns, mapping) for field in _FIELD_SYNONYMS}
    mapped_columns = {column for column in resolved.values() if column}

    subjects: List[Subject] = []
    for _, row in dataframe.iterrows():
        values = {field: _extract_scalar(row, column) for field, column in resolved.items()}
        if not (values["first_name"] or values["last_name"] or values["city"]):
            continue

        metadata = {}
        for column, value in row.items():
            text = _clean_text(value)
            if column not in mapped_columns and text:
                metadata[str(column)] = text
        for field in ("trade", "license_number", "status"):
            if values[field]:
                metadata[field] = values[field]

        subjects.append(Subject(**{field: values[field] for field in _SUBJECT_FIELDS}, metadata=metadata))

    return subjects


def _read_dataframe(
    path: PathLike,
    *,
    sheet_name: Union[str, int, None] = 0,
    loader_kwargs: Optional[MutableMapping[str, Any]] = None,
) -> pd.DataFrame:
    loader_kwargs = dict(loader_kwargs or {})
    loader_kwargs.setdefault("dtype", str)
    path_obj = Path(path)
    suffix = path_obj.suffix.lower()

    if suffix in {".csv", ".tsv"}:
        if suffix == ".tsv":
            loader_kwargs.setdefault("sep", "\t")
        return pd.read_csv(path_obj, **loader_kwargs)

    if suffix in {".xls", ".xlsx", ".xlsm", ".xlsb"}:
        return pd.read_excel(path_obj, sheet_name=sheet_name, engine=loader_kwargs.pop("engine", None) or "openpyxl", **loader_kwargs)

    raise UnsupportedFileTypeError(f"Unsupported file extension: {path_obj.suffix}")


def _normalise_header(value: Any) -> str:
    return str(value).strip().lower().replace(" ", "").replace("_", "")


def _resolve_column(
    field: str,
    available_columns: Iterable[Any],
    mapping: Mapping[str, str],
) -> Optional[str]:
    if field in mapping:
        return mapping[field]

    candidates = {_normalise_header(field)}
    candidates.update(_normalise_header(name) for name in _FIELD_SYNONYMS.get(field, ()))
    for column in available_columns:
        if _normalise_header(column) in candidates:
            return column
    return None


def _extract_scalar(row: pd.Series, column: Optional[str]) -> str:
    if not column or column not in row:
        return ""
    return _clean_text(row[column])


def _clean_text(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str) and pd.isna(value):
        return ""
    return str(value).strip()


__all__ = ["load_subjects", "UnsupportedFileTypeError"]
