import json

import pytest

from datasource_backend import config
from datasource_backend.cli import build_parser, main

from .conftest import BACKEND_URL

pytestmark = pytest.mark.asyncio

HEALTH_URL = f"{BACKEND_URL}/api/datasources/1/health"


async def test_cli_test_success(rmock, capsys):
    rmock.get(HEALTH_URL, payload={"status": "OK", "message": "Data source is working"})
    code = await main(["--url", BACKEND_URL, "test", "--datasource-id", "1"])
    assert code == 0
    assert json.loads(capsys.readouterr().out) == {
        "status": "success",
        "message": "Data source is working",
    }


async def test_cli_test_fail(rmock, capsys):
    rmock.get(HEALTH_URL, status=503, payload={"status": "ERROR", "message": "db down"})
    code = await main(["--url", BACKEND_URL, "test", "--datasource-id", "1"])
    assert code == 1
    assert json.loads(capsys.readouterr().out) == {"status": "fail", "message": "db down"}


async def test_cli_health(rmock, capsys):
    rmock.get(HEALTH_URL, payload={"status": "OK", "message": "ok", "details": {"n": 1}})
    code = await main(["--url", BACKEND_URL, "health", "--datasource-id", "1"])
    assert code == 0
    assert json.loads(capsys.readouterr().out) == {
        "status": "OK",
        "message": "ok",
        "details": {"n": 1},
    }


async def test_cli_query(rmock, capsys, tmp_path, monkeypatch):
    monkeypatch.setitem(config.configuration, "DEFAULT_DATASOURCE", "prometheus")
    monkeypatch.setitem(config.configuration, "DATASOURCES", {"prometheus": {"id": 3}})
    request_file = tmp_path / "request.json"
    request_file.write_text(
        json.dumps(
            {
                "targets": [{"refId": "A", "expr": "up"}],
                "range": {"from": 1000, "to": 2000},
                "requestId": "Q1",
            }
        )
    )
    rmock.post(
        f"{BACKEND_URL}/api/ds/query",
        payload={
            "results": {
                "A": {
                    "tables": [{"columns": [{"text": "job"}], "rows": [["node"]]}],
                }
            }
        },
    )
    code = await main(["--url", BACKEND_URL, "query", "--datasource-id", "1", str(request_file)])
    assert code == 0
    assert json.loads(capsys.readouterr().out) == {
        "data": [{"refId": "A", "name": None, "rows": [{"job": "node"}]}]
    }


async def test_parser_requires_datasource_id():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["test"])
