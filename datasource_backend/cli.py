#!/usr/bin/env python3
"""
Command line connectivity diagnostics for a backend datasource.

    datasource-backend test --datasource-id 1
    datasource-backend health --datasource-id 1
    datasource-backend query --datasource-id 1 request.json
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

import sentry_sdk
from aiohttp import ClientSession

from datasource_backend import config
from datasource_backend.core.models import QueryRequest
from datasource_backend.core.sentry import get_sentry_kwargs
from datasource_backend.core.transport import BackendTransport
from datasource_backend.datasource import DataSourceWithBackend

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="datasource-backend", description="Test a datasource against the backend"
    )
    parser.add_argument("--url", default=None, help="Backend URL (default: BACKEND_URL setting)")
    subparsers = parser.add_subparsers(dest="command", required=True)
    for name, help_text in [
        ("test", "Run the connectivity test"),
        ("health", "Show the raw health check result"),
        ("query", "Run a query request read from a JSON file"),
    ]:
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument(
            "--datasource-id", type=int, required=True, help="Id of the datasource"
        )
        if name == "query":
            sub.add_argument("file", type=Path, help="JSON file holding the query request")
    return parser


def frames_to_json(frames) -> list[dict]:
    return [
        {
            "refId": df.attrs.get("refId"),
            "name": df.attrs.get("name"),
            "rows": json.loads(df.to_json(orient="records", date_format="iso")),
        }
        for df in frames
    ]


async def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    async with ClientSession() as session:
        transport = BackendTransport(session, args.url or config.BACKEND_URL)
        datasource = DataSourceWithBackend(args.datasource_id, transport)
        logger.debug("Running %s for datasource %s", args.command, args.datasource_id)

        if args.command == "test":
            result = await datasource.test_datasource()
            print(json.dumps(result.to_dict()))
            return 0 if result.ok else 1

        if args.command == "health":
            health = await datasource.call_health_check()
            print(
                json.dumps(
                    {
                        "status": health.status.value,
                        "message": health.message,
                        "details": health.details,
                    }
                )
            )
            return 0

        request = QueryRequest.from_dict(json.loads(args.file.read_text()))
        response = await datasource.query(request)
        output = {"data": frames_to_json(response.data)}
        if response.error:
            output["error"] = {"refId": response.error.ref_id, "message": response.error.message}
        print(json.dumps(output, indent=2))
        return 1 if response.error else 0


def run():
    logging.basicConfig(level=config.LOG_LEVEL)
    if config.SENTRY_DSN:
        sentry_sdk.init(**get_sentry_kwargs())
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
