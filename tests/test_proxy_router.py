"""
Tests for the proxy router - prefix routing through the full app.
"""
import json

import httpx
import pytest
from pytest_httpx import HTTPXMock


class TestProxyRouting:
    """Tests for /api/<resource>/* forwarding."""

    @pytest.mark.parametrize("path,backend", [
        ("/api/pokemon/charizard", "http://poke-api:3004"),
        ("/api/stats/bulbasaur", "http://stats-api:3002"),
        ("/api/images/squirtle", "http://images-api:3003"),
    ])
    def test_routes_by_prefix(self, client, httpx_mock: HTTPXMock, path, backend):
        httpx_mock.add_response(url=f"{backend}{path}", json={"from": backend})

        response = client.get(path)

        assert response.status_code == 200
        assert response.json() == {"from": backend}

    def test_query_string_preserved(self, client, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url="http://stats-api:3002/api/stats/pikachu?fields=attack&fields=hp")

        client.get("/api/stats/pikachu?fields=attack&fields=hp")

        assert httpx_mock.get_request().url.query == b"fields=attack&fields=hp"

    def test_bare_prefix_is_proxied(self, client, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url="http://poke-api:3004/api/pokemon", json=[])

        response = client.get("/api/pokemon")

        assert response.status_code == 200

    def test_host_header_not_forwarded(self, client, httpx_mock: HTTPXMock):
        """The backend must see its own host, not the gateway's."""
        httpx_mock.add_response(url="http://poke-api:3004/api/pokemon/pikachu")

        client.get("/api/pokemon/pikachu", headers={"X-Request-Id": "abc"})

        request = httpx_mock.get_request()
        assert request.headers["host"] == "poke-api:3004"
        assert request.headers["x-request-id"] == "abc"

    def test_post_body_forwarded(self, client, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url="http://stats-api:3002/api/stats/compare", method="POST", status_code=201)

        response = client.post("/api/stats/compare", json={"names": ["pikachu", "raichu"]})

        assert response.status_code == 201
        request = httpx_mock.get_request()
        assert request.method == "POST"
        assert json.loads(request.content) == {"names": ["pikachu", "raichu"]}

    def test_backend_error_status_relayed(self, client, httpx_mock: HTTPXMock):
        httpx_mock.add_response(
            url="http://poke-api:3004/api/pokemon/missingno",
            status_code=404,
            json={"error": "Pokemon not found"},
        )

        response = client.get("/api/pokemon/missingno")

        assert response.status_code == 404
        assert response.json()["error"] == "Service unavailable"
        assert response.json()["service"] == "poke_api"

    def test_backend_down_returns_503(self, client, httpx_mock: HTTPXMock):
        httpx_mock.add_exception(
            httpx.ConnectError("Connection refused"),
            url="http://images-api:3003/api/images/5?q=1"
        )

        response = client.get("/api/images/5?q=1")
        data = response.json()

        assert response.status_code == 503
        assert data["error"] == "Service unavailable"
        assert data["service"] == "images_api"
        assert "Connection refused" in data["message"]
        assert "timestamp" in data

    def test_unknown_resource_returns_404(self, client):
        response = client.get("/api/moves/1")

        assert response.status_code == 404
        assert response.json()["error"] == "Route not found"

    def test_repeated_headers_relayed_both_ways(self, client, httpx_mock: HTTPXMock):
        httpx_mock.add_response(
            url="http://poke-api:3004/api/pokemon/pikachu",
            headers=[("set-cookie", "session=1; Path=/"), ("set-cookie", "theme=dark; Path=/")],
            json={"id": 25},
        )

        response = client.get("/api/pokemon/pikachu", headers=[("x-tag", "a"), ("x-tag", "b")])

        assert response.headers.get_list("set-cookie") == ["session=1; Path=/", "theme=dark; Path=/"]
        assert httpx_mock.get_request().headers.get_list("x-tag") == ["a", "b"]

    def test_backend_redirect_followed(self, client, httpx_mock: HTTPXMock):
        httpx_mock.add_response(
            url="http://poke-api:3004/api/pokemon/Pikachu",
            status_code=301,
            headers={"location": "/api/pokemon/pikachu"},
        )
        httpx_mock.add_response(url="http://poke-api:3004/api/pokemon/pikachu", json={"id": 25})

        response = client.get("/api/pokemon/Pikachu")

        assert response.status_code == 200
        assert response.json() == {"id": 25}
