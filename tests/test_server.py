from __future__ import annotations

from collections.abc import Iterator

import pytest
from conftest import FakeMetadataSource
from starlette.applications import Starlette
from starlette.routing import Route
from starlette.testclient import TestClient

from trino_graphql_mcp import server
from trino_graphql_mcp.schema_tools.cache import MemoryMetadataCache
from trino_graphql_mcp.services.schema_service import SchemaService
from trino_graphql_mcp.services.schema_service_manager import SchemaServiceManager

CATALOGS = {"db": {"shop": {"users": [("id", "integer"), ("name", "varchar")]}}}


def _app() -> Starlette:
    return Starlette(
        routes=[
            Route("/health", server.health_check, methods=["GET"]),
            Route("/schema.graphqls", server.schema_sdl, methods=["GET"]),
            Route("/graphql", server.graphql_endpoint, methods=["POST"]),
        ]
    )


@pytest.fixture
def source() -> FakeMetadataSource:
    return FakeMetadataSource(CATALOGS, rows=[{"id": 1, "name": "ada"}])


@pytest.fixture
def client(source: FakeMetadataSource) -> Iterator[TestClient]:
    SchemaServiceManager.reset_instance()
    SchemaServiceManager.get_instance().set_schema_service(
        SchemaService(source, MemoryMetadataCache())
    )
    yield TestClient(_app())
    SchemaServiceManager.reset_instance()


def test_graphql_query_runs_table_resolvers(
    client: TestClient, source: FakeMetadataSource
) -> None:
    response = client.post(
        "/graphql",
        json={
            "query": "query Users($n: Int) { db_shop_users(limit: $n) { id name } }",
            "variables": {"n": 5},
        },
    )
    assert response.status_code == 200
    assert response.json() == {"data": {"db_shop_users": [{"id": 1, "name": "ada"}]}}
    _, text, _params = source.calls[-1]
    assert text.endswith("LIMIT 5")


def test_graphql_discovery_fields(client: TestClient) -> None:
    response = client.post("/graphql", json={"query": '{ catalogs schemas(catalog: "db") }'})
    assert response.json() == {"data": {"catalogs": ["db"], "schemas": ["shop"]}}


def test_graphql_errors_are_reported_in_the_body(client: TestClient) -> None:
    response = client.post("/graphql", json={"query": "{ db_shop_users { missing } }"})
    assert response.status_code == 200
    body = response.json()
    assert body["data"] is None
    assert "missing" in body["errors"][0]["message"]


@pytest.mark.parametrize(
    "body",
    [b"not json", b"[1, 2]", b'{"query": ""}', b'{"query": "{ catalogs }", "variables": 3}'],
)
def test_malformed_graphql_requests_are_rejected(client: TestClient, body: bytes) -> None:
    response = client.post(
        "/graphql", content=body, headers={"content-type": "application/json"}
    )
    assert response.status_code == 400
    assert response.json()["errors"]


def test_schema_sdl_and_health(client: TestClient) -> None:
    sdl = client.get("/schema.graphqls")
    assert sdl.status_code == 200
    assert "type db_shop_users {" in sdl.text
    assert client.get("/health").json()["phase"] == "READY"


def test_graphql_unavailable_while_initializing() -> None:
    SchemaServiceManager.reset_instance()
    try:
        response = TestClient(_app()).post("/graphql", json={"query": "{ catalogs }"})
        assert response.status_code == 503
        assert "in progress" in response.json()["errors"][0]["message"]
    finally:
        SchemaServiceManager.reset_instance()
