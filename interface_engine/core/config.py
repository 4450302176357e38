# File: /interface_engine/core/config.py | Version: 2.0 | Title: Central App Settings (Pydantic v2)
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # --- Database ---
    DATABASE_URL: str = "sqlite:///./interface_engine.db"

    # --- API behavior toggles ---
    ENABLE_STD_ERRORS: bool = (
        False  # set True in .env to enable standardized error responses
    )

    # Development-time diagnostics (config fallbacks, sizing corrections)
    DEV_MODE: bool = False

    # --- Data-store calls ---
    QUERY_TIMEOUT_SECONDS: float = 15.0  # 0 disables the per-call deadline
    AUTO_CREATE_MISSING_TABLES: bool = True

    # --- Row loading ---
    DEFAULT_PAGE_SIZE: int = 100
    CLIENT_SORT_FETCH_LIMIT: int = 2000  # rows fetched when sorting in-process

    # v2-style config
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()
