"""
Target resolution.

Turns each query target of a batch into a wire query: finds the datasource
that has to run it, or recognizes the expression pseudo datasource, which
always runs in the context of the requesting datasource.
"""

import logging
from typing import Any, Callable

from .exceptions import UnknownDatasourceError
from .models import QueryRequest, QueryTarget, TimeRange, WireQuery
from .registry import DatasourceRegistry

logger = logging.getLogger(__name__)

Substitute = Callable[[dict[str, Any]], dict[str, Any]]


def identity(query: dict[str, Any]) -> dict[str, Any]:
    return query


class TargetResolver:
    """Resolves query targets against a datasource registry snapshot."""

    def __init__(
        self,
        datasource_id: Any,
        registry: DatasourceRegistry,
        substitute: Substitute = identity,
    ):
        self.datasource_id = datasource_id
        self.registry = registry
        self.substitute = substitute

    def resolve(
        self,
        target: QueryTarget,
        time_range: TimeRange | None = None,
        interval_ms: int | None = None,
        max_data_points: int | None = None,
    ) -> WireQuery:
        """
        Build the wire query for a single target.

        Args:
            target: The query target to resolve
            time_range: Shared range of the request, if any
            interval_ms: Shared resolution of the request
            max_data_points: Shared point budget of the request

        Returns:
            The wire query to send to the backend

        Raises:
            UnknownDatasourceError: If the target names a datasource the registry doesn't know
        """
        range_from, range_to = time_range.to_wire() if time_range else (None, None)

        if target.is_expression:
            # expressions are evaluated server side, no template substitution
            datasource_id = self.datasource_id
            model = target.to_dict()
        else:
            name = self.registry.resolve_name(target.datasource)
            datasource = self.registry.get(name)
            if datasource is None:
                raise UnknownDatasourceError(target.datasource)
            datasource_id = datasource["id"]
            model = self.substitute(target.to_dict())
            if model.get("refId") != target.ref_id:
                raise ValueError(
                    f"Template substitution changed refId of query {target.ref_id!r}"
                )
        logger.debug("Resolved query %s to datasource %s", target.ref_id, datasource_id)

        return WireQuery(
            datasource_id=datasource_id,
            datasource_name=target.datasource,
            ref_id=target.ref_id,
            model={**model, "datasourceId": datasource_id},
            from_=range_from,
            to=range_to,
            interval_ms=interval_ms,
            max_data_points=max_data_points,
        )

    def resolve_all(self, request: QueryRequest) -> tuple[list[WireQuery], int]:
        """Resolve every target of a request, returning the wire queries and the expression count."""
        expression_count = 0
        queries = []
        for target in request.targets:
            if target.is_expression:
                expression_count += 1
            queries.append(
                self.resolve(
                    target,
                    request.range,
                    request.interval_ms,
                    request.max_data_points,
                )
            )
        return queries, expression_count
