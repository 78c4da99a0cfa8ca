from functools import lru_cache
from typing import List, Literal
import os
from pydantic_settings import BaseSettings, SettingsConfigDict
from dealcatalog.domain.services.constants import CATALOG_TTL_S

EnvName = Literal["development", "production"]

DEFAULT_UPSTREAM_URLS = "https://aldi-web-scraper.onrender.com/products"

def _env_file_for(app_env: EnvName) -> str:
    return ".env.development" if app_env == "development" else ".env.production"

def _split_csv(raw: str) -> List[str]:
    return [v.strip() for v in raw.split(",") if v.strip()]

class Settings(BaseSettings):

    # Core
    APP_ENV: EnvName = "development"
    APP_NAME: str = "DiscountCatalog"
    DEBUG: bool = False
    GIT_SHA: str = "unknown"

    # Upstream scrapers (CSV, registration order matters for dedup)
    UPSTREAM_URLS: str = DEFAULT_UPSTREAM_URLS
    upstream_timeout_s: float = 20.0           # per-source bound, covers connect + body

    # Catalog cache config
    catalog_ttl_s: int = CATALOG_TTL_S         # 4 hours
    keep_stale_on_total_failure: bool = False  # False = publish empty when every source fails

    # CORS (CSV); empty means "*"
    ALLOWED_ORIGINS: str = ""

    # pydantic-settings config will be set dynamically in the factory below
    model_config = SettingsConfigDict(env_file=None, case_sensitive=True)

    @property
    def upstream_urls(self) -> List[str]:
        return _split_csv(self.UPSTREAM_URLS)

    @property
    def allowed_origins(self) -> List[str]:
        return _split_csv(self.ALLOWED_ORIGINS) or ["*"]

@lru_cache
def get_settings() -> Settings:
    """
    Factory that chooses the right .env file based on APP_ENV.
    Cache makes it cheap to inject via FastAPI dependencies.
    """
    app_env: EnvName = os.getenv("APP_ENV", "development")  # earliest switch
    env_file = _env_file_for(app_env)
    return Settings(
                _env_file=env_file,  # load .env.development or .env.production
                _env_file_encoding="utf-8"
    )
