"""
Datasource backed by the backend query service.

Resolves query targets, sends them as a single batch to the backend and
decodes the answer into frames. Also exposes the per-datasource resource
namespace and the health check used to test connectivity.
"""

import logging
from typing import Any

from datasource_backend import config
from datasource_backend.core.assembler import assemble
from datasource_backend.core.decoder import LazyDecoder, default_decoder
from datasource_backend.core.exceptions import FetchError
from datasource_backend.core.models import (
    HealthCheckResult,
    HealthStatus,
    QueryRequest,
    QueryResponse,
    TestDatasourceResult,
)
from datasource_backend.core.registry import DatasourceRegistry
from datasource_backend.core.resolver import Substitute, TargetResolver
from datasource_backend.core.transport import Transport

logger = logging.getLogger(__name__)

HealthCheckOutcome = HealthCheckResult | FetchError


class DataSourceWithBackend:
    """A datasource whose queries are executed by the backend."""

    def __init__(
        self,
        datasource_id: Any,
        transport: Transport,
        registry: DatasourceRegistry | None = None,
        substitute: Substitute | None = None,
        decoder: LazyDecoder | None = None,
    ):
        self.id = datasource_id
        self.transport = transport
        self.registry = registry or DatasourceRegistry.from_config(config)
        self.substitute = substitute or self.apply_template_variables
        self.decoder = decoder or default_decoder

    def apply_template_variables(self, query: dict[str, Any]) -> dict[str, Any]:
        """Default template substitution: leave the query as is."""
        return query

    async def query(self, request: QueryRequest) -> QueryResponse:
        """
        Run a batch of queries.

        Args:
            request: The batch to run

        Returns:
            QueryResponse with the decoded frames

        Raises:
            UnknownDatasourceError: Before anything is sent, if a target can't be resolved
            FetchError: If the backend call fails
        """
        resolver = TargetResolver(self.id, self.registry, self.substitute)
        queries, expression_count = resolver.resolve_all(request)
        batch = assemble(queries, expression_count)
        logger.debug(
            "Sending %d queries to %s (request %s)", len(queries), batch.path, request.request_id
        )
        res = await self.transport.datasource_request(
            batch.path, "POST", batch.body, request.request_id
        )
        return await self.to_query_response(res.data)

    async def to_query_response(self, body: Any) -> QueryResponse:
        decoded = await self.decoder.decode(body)
        if isinstance(decoded, QueryResponse):
            return decoded
        # plain decoders only give back the frames
        return QueryResponse(data=list(decoded))

    def _resource_url(self, path: str) -> str:
        return f"/api/datasources/{self.id}/resources/{path}"

    async def get_resource(self, path: str, params: dict | None = None) -> dict[str, Any]:
        """Make a GET request to the datasource resource path"""
        return await self.transport.get(self._resource_url(path), params)

    async def post_resource(self, path: str, body: dict | None = None) -> dict[str, Any]:
        """Send a POST request to the datasource resource path"""
        return await self.transport.post(self._resource_url(path), dict(body or {}))

    async def check_health(self) -> HealthCheckOutcome:
        """Run the health check, returning the transport failure instead of raising it."""
        try:
            data = await self.transport.get(f"/api/datasources/{self.id}/health")
        except FetchError as e:
            return e
        return HealthCheckResult.from_dict(data)

    async def call_health_check(self) -> HealthCheckResult:
        """Run the datasource health check. Transport failures become a result too."""
        outcome = await self.check_health()
        if not isinstance(outcome, FetchError):
            return outcome
        # the result is shown to the user, no need for another error popup
        outcome.is_handled = True
        logger.warning("Health check of datasource %s failed: %s", self.id, outcome.message)
        if isinstance(outcome.data, dict):
            return HealthCheckResult.from_dict(outcome.data)
        return HealthCheckResult(status=HealthStatus.ERROR, message=outcome.message)

    async def test_datasource(self) -> TestDatasourceResult:
        """Checks the plugin health"""
        res = await self.call_health_check()
        if res.status == HealthStatus.OK:
            return TestDatasourceResult(status="success", message=res.message)
        return TestDatasourceResult(status="fail", message=res.message)
