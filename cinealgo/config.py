"""
Runtime configuration.
Base URLs of the catalog and algorithm APIs come from the environment (prefix CINEALGO_)
or a local .env file, falling back to the service's local development defaults.
"""

from pydantic import field_validator  # strip trailing slashes once at load time
from pydantic_settings import BaseSettings, SettingsConfigDict  # env-driven settings

# Local defaults used when no environment override is present
DEFAULT_CATALOG_URL = "http://localhost:8080/api/peliculas"  # movie catalog endpoints
DEFAULT_ALGORITHM_URL = "http://localhost:8080/api/algoritmos"  # algorithm endpoints


class Settings(BaseSettings):
	model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", env_prefix="CINEALGO_", extra="ignore")

	catalog_api_url: str = DEFAULT_CATALOG_URL
	algorithm_api_url: str = DEFAULT_ALGORITHM_URL
	request_timeout_s: float = 60.0  # per-request timeout passed to requests
	status_duration_s: float = 3.0  # status notification auto-clear delay

	@field_validator('catalog_api_url', 'algorithm_api_url')
	@classmethod
	def _strip_trailing_slash(cls, value: str) -> str:
		return value.rstrip('/')
