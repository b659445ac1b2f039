"""
Tests for the service registry and proxy route resolution.
"""
import pytest

from pokegateway.errors import ConfigurationError
from pokegateway.services.registry import PROXY_ROUTES, ServiceRegistry, resolve_route


class TestServiceRegistry:
    """Tests for ServiceRegistry."""

    def test_lookup(self, registry):
        assert registry.url_for("poke_api") == "http://poke-api:3004"
        assert registry["stats_api"] == "http://stats-api:3002"
        assert len(registry) == 3

    def test_preserves_order(self, registry):
        assert list(registry) == ["poke_api", "stats_api", "images_api"]

    def test_strips_trailing_slash(self):
        registry = ServiceRegistry({"poke_api": "http://poke-api:3004/"})
        assert registry.url_for("poke_api") == "http://poke-api:3004"

    def test_unknown_service_raises(self, registry):
        with pytest.raises(ConfigurationError, match="not registered"):
            registry.url_for("moves_api")

    def test_require_passes_for_known_names(self, registry):
        registry.require(PROXY_ROUTES.values())

    def test_require_lists_missing_names(self, registry):
        with pytest.raises(ConfigurationError, match="moves_api"):
            registry.require(["poke_api", "moves_api"])

    def test_empty_registry_rejected(self):
        with pytest.raises(ConfigurationError, match="No backend services"):
            ServiceRegistry({})

    @pytest.mark.parametrize("url", ["", "poke-api:3004", "/relative", "ftp://poke-api"])
    def test_invalid_url_rejected(self, url):
        with pytest.raises(ConfigurationError, match="invalid base URL"):
            ServiceRegistry({"poke_api": url})

    def test_is_read_only(self, registry):
        with pytest.raises(TypeError):
            registry["poke_api"] = "http://elsewhere"

    def test_configuration_error_is_value_error(self):
        assert issubclass(ConfigurationError, ValueError)


class TestResolveRoute:
    """Tests for resolve_route."""

    @pytest.mark.parametrize("path,expected", [
        ("/api/pokemon/pikachu", "poke_api"),
        ("/api/pokemon", "poke_api"),
        ("/api/stats/bulbasaur", "stats_api"),
        ("/api/images/squirtle/front", "images_api"),
    ])
    def test_known_prefixes(self, path, expected):
        assert resolve_route(path) == expected

    @pytest.mark.parametrize("path", ["/api/moves/1", "/api/statsfoo", "/poke/search", "/"])
    def test_unknown_paths(self, path):
        assert resolve_route(path) is None

    def test_longest_prefix_wins(self):
        routes = {"/api": "a", "/api/special": "b"}
        assert resolve_route("/api/special/1", routes) == "b"
        assert resolve_route("/api/other", routes) == "a"
