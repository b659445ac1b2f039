"""
Application configuration from environment variables.
"""
from typing import Dict

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

from pokegateway.errors import ConfigurationError


class AppConfig(BaseSettings):
    poke_api_url: str
    stats_api_url: str
    images_api_url: str
    # Per-call timeouts in seconds
    proxy_timeout_seconds: float = 30.0
    search_timeout_seconds: float = 5.0
    health_timeout_seconds: float = 5.0
    log_level: str = "DEBUG"
    log_json: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )

    def service_urls(self) -> Dict[str, str]:
        """Backend name -> base URL, in registry order."""
        return {
            "poke_api": self.poke_api_url,
            "stats_api": self.stats_api_url,
            "images_api": self.images_api_url,
        }


@lru_cache
def get_config() -> AppConfig:
    return AppConfig()


def load_config() -> AppConfig:
    """
    Load configuration, turning missing or malformed settings into a ConfigurationError.
    """
    try:
        return get_config()
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]).upper() for err in e.errors() if err.get("loc"))
        raise ConfigurationError(f"Invalid gateway configuration: {fields or e}") from e
