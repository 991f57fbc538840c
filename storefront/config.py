"""Client configuration read from the environment."""
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

DEFAULT_API_URL = "http://localhost:5000/api"
DEFAULT_TIMEOUT = 10.0
DEFAULT_TOKEN_TTL_DAYS = 7
DEFAULT_TOKEN_PATH = Path.home() / ".storefront" / "token.json"
DEFAULT_MEDIA_UPLOAD_URL = "https://api.cloudinary.com/v1_1/{cloud_name}/image/upload"
DEFAULT_MEDIA_FOLDER = "groceryweb/products/general"


@dataclass(frozen=True)
class Settings:
    """Resolved client settings."""
    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT
    token_path: Path = DEFAULT_TOKEN_PATH
    token_ttl_days: int = DEFAULT_TOKEN_TTL_DAYS
    media_upload_url: str = DEFAULT_MEDIA_UPLOAD_URL
    media_folder: str = DEFAULT_MEDIA_FOLDER


def _get_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def load_settings() -> Settings:
    """Build settings from environment variables, falling back to defaults."""
    token_path = os.environ.get("STOREFRONT_TOKEN_PATH")
    return Settings(
        api_url=os.environ.get("STOREFRONT_API_URL", DEFAULT_API_URL).rstrip("/"),
        timeout=_get_float("STOREFRONT_API_TIMEOUT", DEFAULT_TIMEOUT),
        token_path=Path(token_path).expanduser() if token_path else DEFAULT_TOKEN_PATH,
        token_ttl_days=_get_int("STOREFRONT_TOKEN_TTL_DAYS", DEFAULT_TOKEN_TTL_DAYS),
        media_upload_url=os.environ.get("STOREFRONT_MEDIA_UPLOAD_URL", DEFAULT_MEDIA_UPLOAD_URL),
        media_folder=os.environ.get("STOREFRONT_MEDIA_FOLDER", DEFAULT_MEDIA_FOLDER),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get process-wide settings (cached)."""
    return load_settings()
