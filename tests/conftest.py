import pytest
import pytest_asyncio
from aiohttp import ClientSession
from aioresponses import aioresponses

from datasource_backend.core.decoder import LazyDecoder
from datasource_backend.core.registry import DatasourceRegistry
from datasource_backend.core.transport import BackendTransport
from datasource_backend.datasource import DataSourceWithBackend

BACKEND_URL = "https://example.com"
DATASOURCE_ID = 7
QUERY_URL = f"{BACKEND_URL}/api/ds/query"
TRANSFORM_URL = f"{BACKEND_URL}/api/ds/transform"
HEALTH_URL = f"{BACKEND_URL}/api/datasources/{DATASOURCE_ID}/health"
RESOURCES_URL = f"{BACKEND_URL}/api/datasources/{DATASOURCE_ID}/resources"

DATASOURCES = {
    "prometheus": {"id": 1, "type": "prometheus"},
    "influx": {"id": 2, "type": "influxdb"},
    "testdata": {"id": 3, "type": "testdata"},
}


@pytest.fixture
def registry():
    return DatasourceRegistry(default_datasource="prometheus", datasources=DATASOURCES)


@pytest.fixture
def rmock():
    with aioresponses() as m:
        yield m


@pytest_asyncio.fixture
async def client():
    async with ClientSession() as session:
        yield session


@pytest.fixture
def transport(client):
    return BackendTransport(client, BACKEND_URL)


@pytest.fixture
def datasource(transport, registry):
    return DataSourceWithBackend(
        DATASOURCE_ID,
        transport,
        registry=registry,
        decoder=LazyDecoder("datasource_backend.core.frames:results_to_data_frames"),
    )


def sent_requests(rmock, method: str, url: str) -> list:
    """Requests recorded by aioresponses for a method and url"""
    return [
        call
        for (m, u), calls in rmock.requests.items()
        if m == method and str(u) == url
        for call in calls
    ]
