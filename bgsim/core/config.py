"""Environment-based configuration for the local simulation API.

Values come from environment variables (optionally loaded from a ``.env``
file). The service always binds to the loopback interface; only the port
is configurable.
"""

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


LOOPBACK_HOST = "127.0.0.1"
DEFAULT_PORT = 32123
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class ServiceConfig:
    """Configuration for the local API service.

    Attributes:
        port: TCP port on the loopback interface.
        log_level: Root logging level.
        log_to_file: Whether rotating JSON log files are written.
        cards_path: JSON card definitions for the bundled catalog.
        simulator: Import path (``module:callable``) of the combat simulator.
        live_game: Import path (``module:callable``) of the live game reader.
        cors_origins: Browser origins allowed to call the API cross-origin.
    """

    port: int = DEFAULT_PORT
    log_level: str = DEFAULT_LOG_LEVEL
    log_to_file: bool = True
    cards_path: str | None = None
    simulator: str | None = None
    live_game: str | None = None
    cors_origins: tuple[str, ...] = ()

    @property
    def host(self) -> str:
        return LOOPBACK_HOST

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        """Create config from environment variables.

        Environment variables (all optional):
            BGSIM_PORT: Listening port (default: 32123)
            BGSIM_LOG_LEVEL: Logging level (default: INFO)
            BGSIM_LOG_TO_FILE: "true" or "false" (default: "true")
            BGSIM_CARDS_PATH: Card definitions JSON file
            BGSIM_SIMULATOR: Simulator factory import path
            BGSIM_LIVE_GAME: Live game reader factory import path
            BGSIM_CORS_ORIGINS: Comma-separated allowed origins

        Returns:
            ServiceConfig from environment.
        """
        log_to_file = os.getenv("BGSIM_LOG_TO_FILE", "true").lower() in ("true", "1", "yes")
        origins = os.getenv("BGSIM_CORS_ORIGINS", "")

        return cls(
            port=int(os.getenv("BGSIM_PORT", str(DEFAULT_PORT))),
            log_level=os.getenv("BGSIM_LOG_LEVEL", DEFAULT_LOG_LEVEL),
            log_to_file=log_to_file,
            cards_path=os.getenv("BGSIM_CARDS_PATH") or None,
            simulator=os.getenv("BGSIM_SIMULATOR") or None,
            live_game=os.getenv("BGSIM_LIVE_GAME") or None,
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
        )


@lru_cache(maxsize=1)
def get_service_config() -> ServiceConfig:
    """Load the service configuration once per process."""
    return ServiceConfig.from_env()


def clear_config_cache() -> None:
    """Clear the cached configuration.

    Useful for testing when environment variables change.
    """
    get_service_config.cache_clear()
