"""
Default decoding of backend query responses into data frames.

The backend answers `{"results": {refId: result}}` where each result may hold
legacy time series, legacy tables, JSON encoded frames, base64 Arrow frames
and an error message. Every frame becomes a pandas DataFrame with its refId
and name stored in `attrs`.

This module is loaded lazily, see decoder.py.
"""

import base64
from typing import Any

import pandas as pd
from .models import QueryError, QueryResponse

TIME_FIELD = "Time"


def _frame(df: pd.DataFrame, ref_id: str | None, name: str | None) -> pd.DataFrame:
    df.attrs["refId"] = ref_id
    df.attrs["name"] = name
    return df


def series_to_data_frame(series: dict, ref_id: str | None) -> pd.DataFrame:
    name = series.get("name")
    value_field = name or "Value"
    points = series.get("points") or []
    df = pd.DataFrame(
        {
            TIME_FIELD: pd.to_datetime([p[1] for p in points], unit="ms", utc=True),
            value_field: [p[0] for p in points],
        }
    )
    df = _frame(df, ref_id, name)
    if series.get("tags"):
        df.attrs["labels"] = dict(series["tags"])
    return df


def table_to_data_frame(table: dict, ref_id: str | None) -> pd.DataFrame:
    columns = [c.get("text") for c in table.get("columns") or []]
    df = pd.DataFrame([list(row) for row in table.get("rows") or []], columns=columns)
    return _frame(df, ref_id, table.get("name"))


def json_to_data_frame(frame: dict, ref_id: str | None) -> pd.DataFrame:
    schema = frame.get("schema") or {}
    fields = schema.get("fields") or []
    values = (frame.get("data") or {}).get("values") or []
    columns = {}
    for i, f in enumerate(fields):
        column = list(values[i]) if i < len(values) else []
        if f.get("type") == "time":
            column = pd.to_datetime(column, unit="ms", utc=True)
        columns[f.get("name") or f"Field {i + 1}"] = column
    df = pd.DataFrame(columns)
    return _frame(df, schema.get("refId") or ref_id, schema.get("name"))


def arrow_to_data_frame(encoded: str, ref_id: str | None) -> pd.DataFrame:
    # only responses carrying Arrow frames need pyarrow
    from pyarrow import ipc

    with ipc.open_stream(base64.b64decode(encoded)) as reader:
        table = reader.read_all()
    metadata = {
        k.decode(): v.decode() for k, v in (table.schema.metadata or {}).items()
    }
    return _frame(table.to_pandas(), metadata.get("refId") or ref_id, metadata.get("name"))


def results_to_data_frames(body: Any) -> QueryResponse:
    """
    Decode a backend query response.

    Args:
        body: The decoded JSON body of the backend response, left untouched

    Returns:
        QueryResponse with every frame of every result, and the first error found
    """
    response = QueryResponse()
    if not body:
        return response
    for ref_id, result in (body.get("results") or {}).items():
        if result.get("error") and response.error is None:
            response.error = QueryError(ref_id=ref_id, message=result["error"])
        for series in result.get("series") or []:
            response.data.append(series_to_data_frame(series, ref_id))
        for table in result.get("tables") or []:
            response.data.append(table_to_data_frame(table, ref_id))
        for frame in result.get("frames") or []:
            response.data.append(json_to_data_frame(frame, ref_id))
        for encoded in result.get("dataframes") or []:
            response.data.append(arrow_to_data_frame(encoded, ref_id))
    return response
