# runtime settings, read from the environment once
import os
from dataclasses import dataclass
from typing import Mapping, Optional


@dataclass(frozen=True)
class Settings:
    """
    Fields:
      - api_url: base url of the storefront backend
      - api_timeout: seconds before a request is abandoned
      - auth_header: request header carrying the stored token
      - storage_path: sqlite file standing in for browser storage
      - log_file: optional file that receives a copy of all log records
      - debug: enables debug level logging
    """

    api_url: str = "http://127.0.0.1:8888"
    api_timeout: float = 5.0
    auth_header: str = "X-User-Token"
    storage_path: str = "data/storage.sqlite"
    log_file: Optional[str] = None
    debug: bool = False


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if env is None else env
    defaults = Settings()

    try:
        timeout = float(env.get("STOREFRONT_API_TIMEOUT", defaults.api_timeout))
    except ValueError:
        timeout = defaults.api_timeout

    return Settings(
        api_url=env.get("STOREFRONT_API_URL", defaults.api_url).rstrip("/"),
        api_timeout=timeout,
        auth_header=env.get("STOREFRONT_AUTH_HEADER", defaults.auth_header),
        storage_path=env.get("STOREFRONT_STORAGE_PATH", defaults.storage_path),
        log_file=env.get("STOREFRONT_LOG_FILE") or None,
        debug=bool(env.get("DEBUG")),
    )


settings = load_settings()
