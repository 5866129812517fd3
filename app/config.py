"""Application configuration loaded from config.yaml + environment variables."""

from __future__ import annotations

import yaml
from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.yaml"


def _load_yaml() -> dict:
    if _CONFIG_PATH.exists():
        with open(_CONFIG_PATH) as f:
            return yaml.safe_load(f) or {}
    return {}


_yaml = _load_yaml()


class LedgerConfig(BaseSettings):
    rpc_url: str = "http://127.0.0.1:8545"
    contract_address: str = ""
    abi_path: str = ""
    private_key: str = ""
    gas_price_wei: int = 20_000_000_000
    gas_limit: int = 6_721_975
    call_timeout_seconds: float = 120.0
    receipt_poll_seconds: float = 0.5

    model_config = SettingsConfigDict(env_prefix="LEDGER_", env_file=".env", extra="ignore")


class StorageConfig(BaseSettings):
    url: str = ""
    anon_key: str = ""
    bucket: str = "property-images"
    timeout_seconds: float = 30.0

    model_config = SettingsConfigDict(env_prefix="SUPABASE_", env_file=".env", extra="ignore")


class SearchConfig(BaseSettings):
    earth_radius_km: float = 6371.0
    default_radius_km: float = 5.0
    push_down_distance: bool = True


class LoggingConfig(BaseSettings):
    level: str = "INFO"
    format: str = "standard"

    model_config = SettingsConfigDict(env_prefix="LOG_", extra="ignore")


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///data/properties.db"
    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


def _section(cls: type[BaseSettings], values: dict) -> BaseSettings:
    """Build one section from YAML values, skipping keys the environment already sets."""
    from_env = cls().model_fields_set
    return cls(**{k: v for k, v in values.items() if k not in from_env})


def get_settings() -> Settings:
    """Build Settings from YAML defaults; environment variables take precedence."""
    y = _yaml
    env = Settings()
    db_url = env.database_url
    if "database_url" not in env.model_fields_set:
        db_url = (y.get("database") or {}).get("url", db_url)
    return Settings(
        database_url=db_url,
        ledger=_section(LedgerConfig, y.get("ledger") or {}),
        storage=_section(StorageConfig, y.get("storage") or {}),
        search=_section(SearchConfig, y.get("search") or {}),
        logging=_section(LoggingConfig, y.get("logging") or {}),
    )
