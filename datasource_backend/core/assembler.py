from dataclasses import dataclass
from typing import Any

from .models import WireQuery

QUERY_PATH = "/api/ds/query"
TRANSFORM_PATH = "/api/ds/transform"


@dataclass
class BatchRequest:
    path: str
    body: dict[str, Any]


def assemble(queries: list[WireQuery], expression_count: int) -> BatchRequest:
    """
    Batch the wire queries into one request body.

    A single expression target sends the whole batch to the transform endpoint.
    An empty batch is still a valid request.
    """
    path = TRANSFORM_PATH if expression_count > 0 else QUERY_PATH
    return BatchRequest(path=path, body={"queries": [q.to_dict() for q in queries]})
