# 📦 settings.py

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


# ─────────────────────────────
# Settings
class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "FindMyTherapy Matching"
    version: str = "1.1.0"
    host: str = "0.0.0.0"
    port: int = 8000
    prometheus_port: int = 0  # 0 = no metrics server

    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    therapist_table: str = "therapist_profiles"
    preferences_table: str = "matching_preferences"

    candidate_pool_cap: int = 500
    fetch_retries: int = 3
    fetch_delay: float = 2.0
    preferences_ttl_days: int = 30
    default_limit: int = 10
    matching_config_path: Optional[str] = None
    weights_profile: str = "default"

settings = Settings()
