"""Container healthcheck: verify the /health route and the SDL route.

Uses stdlib only. Exit code 0 indicates healthy; a schema that is still being
generated counts as healthy so slow catalogs do not restart the container.
"""

from __future__ import annotations

import json
import os
import sys
from typing import Final
from urllib.error import HTTPError
from urllib.request import Request, urlopen

BASE_URL: Final[str] = os.getenv("TRINO_GRAPHQL_HEALTHCHECK_URL", "http://127.0.0.1:8000")
USER_AGENT: Final[str] = "trino-graphql-mcp/healthcheck"


def _get(path: str) -> tuple[int, bytes]:
    req = Request(BASE_URL + path, headers={"User-Agent": USER_AGENT})  # noqa: S310
    try:
        with urlopen(req, timeout=4) as resp:  # noqa: S310 - fixed host/http
            return resp.status, resp.read()
    except HTTPError as exc:
        return exc.code, exc.read()


def main() -> int:
    try:
        status, body = _get("/health")
        if status != 200:
            print(f"unexpected status: {status}", file=sys.stderr)
            return 1
        data = json.loads(body.decode("utf-8"))
        if data.get("status") != "healthy":
            print(f"payload not healthy: {data}", file=sys.stderr)
            return 1
        if data.get("phase") != "READY":
            return 0

        status, body = _get("/schema.graphqls")
        if status != 200 or b"type Query" not in body:
            print(f"schema endpoint unhealthy: {status}", file=sys.stderr)
            return 1
        return 0
    except Exception as exc:
        print(f"healthcheck error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover - used by Docker
    raise SystemExit(main())
