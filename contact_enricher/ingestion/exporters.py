"""Export utilities for enriched contact records."""
from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, MutableMapping, Optional, Sequence, Union

import pandas as pd

from ..models import COMBINATION, CONTACT, PERSON, EnrichedRecord

PathLike = Union[str, Path]

EXPORT_COLUMNS = [
    "first_name",
    "middle_name",
    "last_name",
    "city",
    "state",
    "trade",
    "license_number",
    "status",
    "email",
    "phone",
    "address",
]
SEARCH_METADATA_COLUMNS = ["enriched", "strategy", "cost", "used_combination", "identity_score"]


def export_records(
    records: Sequence[EnrichedRecord],
    path: PathLike,
    *,
    include_search_metadata: bool = False,
    sheet_name: str = "Enriched Contacts",
    exporter_kwargs: Optional[MutableMapping[str, object]] = None,
) -> Path:
    """Write enriched records to a CSV, TSV or Excel file."""

    dataframe = records_to_dataframe(records, include_search_metadata=include_search_metadata)
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    _write_dataframe(dataframe, output_path, sheet_name=sheet_name, exporter_kwargs=exporter_kwargs)
    return output_path


def records_to_dataframe(
    records: Sequence[EnrichedRecord],
    *,
    include_search_metadata: bool = False,
) -> pd.DataFrame:
    """Convert enriched records into a :class:`pandas.DataFrame`."""

    columns = list(EXPORT_COLUMNS)
    if include_search_metadata:
        columns += SEARCH_METADATA_COLUMNS
    rows = [record.as_row(include_search_metadata=include_search_metadata) for record in records]
    return pd.DataFrame(rows, columns=columns)


def build_json_export(
    records: Sequence[EnrichedRecord],
    *,
    export_date: Optional[str] = None,
) -> Dict[str, Any]:
    """Build the JSON export envelope including the full provenance log.

    Only enriched records that carry at least one API response appear under
    ``records``; ``export_info`` counts every record passed in.
    """

    with_responses = [record for record in records if record.enriched and record.api_calls]
    total_api_calls = sum(len(record.api_calls) for record in with_responses)
    total_cost = sum(call.cost for record in records for call in record.api_calls)

    return {
        "export_info": {
            "export_date": export_date or datetime.now(timezone.utc).isoformat(),
            "total_records": len(records),
            "enriched_records": len(with_responses),
            "total_api_calls": total_api_calls,
            "search_types": {
                CONTACT: sum(1 for record in with_responses if _called(record, CONTACT)),
                PERSON: sum(1 for record in with_responses if _called(record, PERSON)),
                COMBINATION: sum(1 for record in with_responses if len(record.api_calls) > 1),
            },
            "total_cost": f"{total_cost:.2f}",
        },
        "records": [_record_to_json(record) for record in with_responses],
    }


def export_json(records: Sequence[EnrichedRecord], path: PathLike) -> Path:
    """Persist :func:`build_json_export` output to ``path``."""

    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = build_json_export(records)
    output_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    return output_path


def _called(record: EnrichedRecord, endpoint: str) -> bool:
    return any(call.endpoint == endpoint for call in record.api_calls)


def _record_to_json(record: EnrichedRecord) -> Dict[str, Any]:
    subject = record.subject
    calls = record.api_calls
    if len(calls) > 1:
        strategy = COMBINATION
    else:
        strategy = calls[0].endpoint if calls else "unknown"

    original: Dict[str, Any] = {
        "first_name": subject.first_name,
        "middle_name": subject.middle_name,
        "last_name": subject.last_name,
        "city": subject.city,
        "state": subject.state,
    }
    original.update(subject.metadata)

    return {
        "original_data": original,
        "enriched_data": {
            "email": record.email,
            "phone": record.phone,
            "address": record.address,
            "strategy": strategy,
            "total_cost": round(sum(call.cost for call in calls), 2),
            "api_calls_made": len(calls),
        },
        "api_responses": [call.as_dict() for call in calls],
    }


def _write_dataframe(
    dataframe: pd.DataFrame,
    path: Path,
    *,
    sheet_name: str,
    exporter_kwargs: Optional[MutableMapping[str, object]],
) -> None:
    exporter_kwargs = dict(exporter_kwargs or {})
    suffix = path.suffix.lower()

    if suffix in {".csv", ".tsv"}:
        if suffix == ".tsv":
            exporter_kwargs.setdefault("sep", "\t")
        dataframe.to_csv(path, index=False, **exporter_kwargs)
        return

    if suffix in {".xls", ".xlsx", ".xlsm", ".xlsb"}:
        engine = exporter_kwargs.pop("engine", None) or "openpyxl"
        dataframe.to_excel(path, index=False, sheet_name=sheet_name, engine=engine, **exporter_kwargs)
        return

    raise ValueError(f"Unsupported export file extension: {suffix}")


__all__ = [
    "EXPORT_COLUMNS",
    "SEARCH_METADATA_COLUMNS",
    "build_json_export",
    "export_json",
    "export_records",
    "records_to_dataframe",
]
