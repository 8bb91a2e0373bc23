from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "TalentInsight Hub"
    app_env: str = "development"
    app_host: str = "127.0.0.1"
    app_port: int = 5000
    log_level: str = "INFO"

    database_url: str = ""
    db_user: str = ""
    db_password: str = ""
    db_host: str = ""
    db_port: int = 5432
    db_name: str = ""
    db_sslmode: str = ""
    data_dir: Path = Path("./data")

    cors_origins: str = ""

    placeholder_email_domain: str = "example.csv.com"
    default_total_interviews: int = 1
    historical_import_source: str = "CSV_Upload"
    attribute_type_overrides_json: str = ""

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, value: str) -> str:
        allowed = {"development", "staging", "production", "test"}
        if value not in allowed:
            raise ValueError(f"app_env must be one of {sorted(allowed)}")
        return value

    @field_validator("default_total_interviews")
    @classmethod
    def validate_total_interviews(cls, value: int) -> int:
        if value < 1:
            raise ValueError("default_total_interviews must be at least 1")
        return value

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def resolved_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        if self.db_host:
            url = URL.create(
                "postgresql+psycopg",
                username=self.db_user or None,
                password=self.db_password or None,
                host=self.db_host,
                port=self.db_port,
                database=self.db_name or None,
            )
            return url.render_as_string(hide_password=False)
        return f"sqlite:///{self.data_dir / 'talentinsight.db'}"

    @property
    def attribute_type_overrides(self) -> dict[str, str]:
        if not self.attribute_type_overrides_json.strip():
            return {}
        payload = json.loads(self.attribute_type_overrides_json)
        if not isinstance(payload, dict):
            raise ValueError("attribute_type_overrides_json must be a JSON object")
        return {str(key): str(value) for key, value in payload.items()}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
