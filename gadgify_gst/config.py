"""
config.py: Gadgify GST service settings.

Usage:
    from gadgify_gst.config import settings
    print(settings.gst_cache_ttl_seconds)

Every field has a working default: the static-table fallback path needs no
environment variables at all. Only the app layer (main.py) reads the module
singleton: the resolver, cache and providers take explicit arguments.
"""
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Silently ignore any extra env vars
    )

    # --- Rate cache ---
    gst_cache_ttl_seconds: int = 86400   # 24 hours

    # --- External rate providers ---
    # Comma-separated, tried in order. Empty string disables live lookups.
    gst_providers: str = "shunyatech,amagin"
    gst_provider_timeout_seconds: float = 5.0
    shunyatech_base_url: str = "https://api.shunyatech.com"
    amagin_base_url: str = "https://gstapi.amagin.com"
    gst_user_agent: str = "Gadgify-ecommerce/1.0"

    # --- Bulk resolution ---
    gst_batch_size: int = 5              # max concurrent provider lookups

    # --- CORS ---
    # Comma-separated list of allowed frontend origins
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    # --- Application ---
    debug: bool = False
    app_version: str = "0.1.0"

    @property
    def cors_origins_list(self) -> List[str]:
        """Split comma-separated CORS origins into a list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def gst_providers_list(self) -> List[str]:
        """Provider names in lookup order, lowercased."""
        return [p.strip().lower() for p in self.gst_providers.split(",") if p.strip()]


# Module-level singleton: import this from the app layer
settings = Settings()
