"""
Core module for datasource_backend.

Target resolution, request assembly, transport and response decoding, kept
apart from the datasource that composes them.
"""

from .assembler import BatchRequest, assemble
from .decoder import LazyDecoder, default_decoder
from .exceptions import DatasourceException, FetchError, UnknownDatasourceError
from .models import (
    HealthCheckResult,
    HealthStatus,
    QueryRequest,
    QueryResponse,
    QueryTarget,
    TestDatasourceResult,
    TimeRange,
    WireQuery,
)
from .registry import DatasourceRegistry
from .resolver import TargetResolver
from .transport import BackendTransport, FetchResponse, Transport

__all__ = [
    "BackendTransport",
    "BatchRequest",
    "DatasourceException",
    "DatasourceRegistry",
    "FetchError",
    "FetchResponse",
    "HealthCheckResult",
    "HealthStatus",
    "LazyDecoder",
    "QueryRequest",
    "QueryResponse",
    "QueryTarget",
    "TargetResolver",
    "TestDatasourceResult",
    "TimeRange",
    "Transport",
    "UnknownDatasourceError",
    "WireQuery",
    "assemble",
    "default_decoder",
]
