"""Settings module with unified configuration precedence: CLI > ENV > CONFIG FILE."""

from __future__ import annotations

import os
import tomllib
from enum import Enum
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from .chains import ALL_CHAINS, ChainId

load_dotenv()

CONFIG_ENV_VAR = "BALANCE_BENCH_CONFIG"

SECRET_FIELDS = {
    "bitquery_api_key",
    "blockchair_api_key",
    "covalenthq_api_key",
    "debank_access_key",
    "moralis_api_key",
    "zerion_user_key",
    "zerion_user_pass",
}

DEFAULT_PROVIDERS = ["ankr", "bitquery", "covalenthq", "moralis"]


class OutputFormat(str, Enum):
    TABLE = "table"
    JSON = "json"


class BenchmarkSettings(BaseSettings):
    """Single source of truth for configuration. Values may come from:
    - CLI (init kwargs)
    - ENV / .env (prefixed with BALANCE_BENCH_)
    - Config file (TOML), lowest precedence

    Do not read os.environ or files elsewhere in the codebase.
    """

    # --- benchmark scope ---
    benchmark_chains: list[ChainId] = Field(default_factory=lambda: list(ALL_CHAINS))
    providers: list[str] = Field(default_factory=lambda: list(DEFAULT_PROVIDERS))

    # --- public keys ---
    dataset_dir: Path | None = None
    skip_test_addresses: bool = False
    limit_public_keys: int | None = Field(default=None, gt=0)

    # --- throttling and retries ---
    min_sleep_ms: int = Field(default=500, ge=0)
    max_attempts: int = Field(default=2, ge=1)
    request_timeout: float = Field(default=60.0, gt=0)

    # --- output ---
    output_format: OutputFormat = OutputFormat.TABLE
    output_path: Path | None = None

    # --- logging ---
    log_level: str = "INFO"

    # --- provider credentials (env / CLI only) ---
    bitquery_api_key: SecretStr | None = None
    blockchair_api_key: SecretStr | None = None
    covalenthq_api_key: SecretStr | None = None
    debank_access_key: SecretStr | None = None
    moralis_api_key: SecretStr | None = None
    zerion_user_key: SecretStr | None = None
    zerion_user_pass: SecretStr | None = None

    model_config = SettingsConfigDict(
        env_prefix="BALANCE_BENCH_",
        env_file=".env",
        extra="ignore",  # ignore unknown keys in env/config file
    )

    @field_validator("providers", mode="after")
    @classmethod
    def validate_providers(cls, v: list[str]) -> list[str]:
        """Normalize provider names and reject unknown ones."""
        from .providers import PROVIDER_REGISTRY

        normalized = [name.lower() for name in v]
        unknown = [name for name in normalized if name not in PROVIDER_REGISTRY]
        if unknown:
            raise ValueError(
                f"Unknown provider(s) {', '.join(unknown)}. "
                f"Available: {', '.join(PROVIDER_REGISTRY.keys())}"
            )
        return normalized

    @field_validator("log_level", mode="after")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.upper()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Custom config-file source with explicit precedence: CLI > ENV > FILE."""
        env_cfg = os.environ.get(CONFIG_ENV_VAR)
        cfg_path = Path(env_cfg) if env_cfg else None

        return (
            init_settings,  # CLI (highest)
            env_settings,  # ENV
            dotenv_settings,  # .env
            TomlConfigSource(settings_cls, cfg_path),  # CONFIG (lowest)
            file_secret_settings,  # optional secrets dir
        )

    def as_safe_dict(self) -> dict[str, Any]:
        """Return the config as a JSON-friendly dict with secrets redacted."""
        data = self.model_dump(mode="json")
        for key in SECRET_FIELDS:
            if data.get(key):
                data[key] = "***redacted***"
        return data

    def secret(self, name: str) -> str:
        """Return the plain value of a credential, or an empty string if unset."""
        value: SecretStr | None = getattr(self, name)
        return value.get_secret_value() if value is not None else ""


class TomlConfigSource(PydanticBaseSettingsSource):
    """Reads settings from a TOML file (top-level or a [balance_bench] table)."""

    def __init__(self, settings_cls: type[BaseSettings], path: Path | None):
        super().__init__(settings_cls)
        self._path = path

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return None, "", False

    def _resolve_path(self) -> Path | None:
        if self._path:
            return self._path
        local_config = Path("balance-bench.toml")
        user_config = Path.home() / ".config" / "balance-bench" / "config.toml"
        if local_config.exists():
            return local_config
        if user_config.exists():
            return user_config
        return None

    def __call__(self) -> dict[str, Any]:
        path = self._resolve_path()
        if path is None or not path.exists():
            return {}

        with path.open("rb") as f:
            data = tomllib.load(f)
        body = data.get("balance_bench", data)
        if not isinstance(body, dict):
            return {}

        for key in SECRET_FIELDS:
            if key in body:
                raise ValueError(
                    f"Security violation: '{key}' found in TOML config file. "
                    f"Secrets must only be provided via environment variables or CLI flags."
                )

        return body
