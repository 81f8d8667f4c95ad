"""
Data models for the core module.

Everything here lives for a single call: targets and requests come from the
caller, wire queries and results are built fresh and discarded.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


EXPRESSION_DATASOURCE = "__expr__"
DEFAULT_DATASOURCE = "default"


def to_epoch_ms(value: int | float | str | datetime) -> int:
    if isinstance(value, str):
        if value.strip().lstrip("-").isdigit():
            return int(value)
        # ISO 8601, as sent by the front-end
        value = datetime.fromisoformat(value)
    if isinstance(value, datetime):
        return int(value.timestamp() * 1000)
    return int(value)


@dataclass(frozen=True)
class TimeRange:
    """A from/to pair of instants, as epoch milliseconds, ISO 8601 strings or datetimes."""

    from_: int | float | str | datetime
    to: int | float | str | datetime

    def to_wire(self) -> tuple[str, str]:
        return str(to_epoch_ms(self.from_)), str(to_epoch_ms(self.to))

    @classmethod
    def from_dict(cls, data: dict | None) -> "TimeRange | None":
        if not data:
            return None
        return cls(from_=data["from"], to=data["to"])


@dataclass(frozen=True)
class QueryTarget:
    """One query of a batch. `payload` holds the query-specific fields, untouched."""

    ref_id: str
    datasource: str | None = None
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def is_expression(self) -> bool:
        return self.datasource == EXPRESSION_DATASOURCE

    def to_dict(self) -> dict[str, Any]:
        query = dict(self.payload)
        query["refId"] = self.ref_id
        if self.datasource is not None:
            query["datasource"] = self.datasource
        return query

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "QueryTarget":
        payload = {k: v for k, v in data.items() if k not in ("refId", "datasource")}
        return cls(ref_id=data["refId"], datasource=data.get("datasource"), payload=payload)


@dataclass(frozen=True)
class QueryRequest:
    targets: list[QueryTarget]
    interval_ms: int | None = None
    max_data_points: int | None = None
    range: TimeRange | None = None
    request_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "QueryRequest":
        return cls(
            targets=[QueryTarget.from_dict(t) for t in data.get("targets", [])],
            interval_ms=data.get("intervalMs"),
            max_data_points=data.get("maxDataPoints"),
            range=TimeRange.from_dict(data.get("range")),
            request_id=data.get("requestId"),
        )


@dataclass
class WireQuery:
    """The backend-ready form of a query target."""

    datasource_id: Any
    datasource_name: str | None
    ref_id: str
    model: dict[str, Any]
    from_: str | None = None
    to: str | None = None
    interval_ms: int | None = None
    max_data_points: int | None = None

    def to_dict(self) -> dict[str, Any]:
        wire = {
            "datasourceId": self.datasource_id,
            "datasourceName": self.datasource_name,
            "refId": self.ref_id,
        }
        # absent range means absent fields, not zero
        if self.from_ is not None:
            wire["from"] = self.from_
        if self.to is not None:
            wire["to"] = self.to
        wire["intervalMs"] = self.interval_ms
        wire["maxDataPoints"] = self.max_data_points
        wire["model"] = self.model
        return wire


@dataclass
class QueryError:
    ref_id: str | None
    message: str


@dataclass
class QueryResponse:
    # frames, as produced by the decoder
    data: list[Any] = field(default_factory=list)
    error: QueryError | None = None


class HealthStatus(str, Enum):
    UNKNOWN = "UNKNOWN"
    OK = "OK"
    ERROR = "ERROR"

    @classmethod
    def parse(cls, value: Any) -> "HealthStatus":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            return cls.UNKNOWN


@dataclass
class HealthCheckResult:
    status: HealthStatus
    message: str = ""
    details: dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "HealthCheckResult":
        if not isinstance(data, dict):
            return cls(status=HealthStatus.UNKNOWN)
        return cls(
            status=HealthStatus.parse(data.get("status")),
            message=data.get("message") or "",
            details=data.get("details"),
        )


@dataclass
class TestDatasourceResult:
    """Outcome of a connectivity test, as shown by a datasource configuration page."""

    __test__ = False

    status: str
    message: str

    @property
    def ok(self) -> bool:
        return self.status == "success"

    def to_dict(self) -> dict[str, str]:
        return {"status": self.status, "message": self.message}
