"""
Application settings with environment-based configuration.

Priority (highest to lowest):
1. Environment variables (from .env or system)
2. Environment-specific YAML config file (development.yaml, test.yaml)
3. Default YAML config file (default.yaml)
4. Pydantic defaults
"""

import os
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from solders.pubkey import Pubkey  # type: ignore


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Seeds and rent parameters are part of the program's identity: changing
    them changes every derived address and account cost.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow",
    )

    # Application
    APP_NAME: str = "Troqueur"
    APP_VERSION: str = "0.1.0"
    ENV: str = Field(default="development", description="Environment name")

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_JSON: bool = Field(default=True, description="Emit JSON log records")

    # Escrow program
    ESCROW_PROGRAM_ID: str = Field(
        default="DGEX1Zf94mjrPHNLiutYTdwfdBBvsXk8BBHF2kFeBPyy",
        description="Program id used for address derivation and ownership",
    )
    STATE_SEED: str = Field(default="state", min_length=1, max_length=32)
    AUTHORITY_SEED: str = Field(default="authority", min_length=1, max_length=32)
    VAULT_SEED: str = Field(default="vault", min_length=1, max_length=32)
    ALLOW_SEED_REUSE: bool = Field(
        default=False,
        description="Allow Initialize on an escrow address that was closed",
    )

    # Rent
    ACCOUNT_STORAGE_OVERHEAD: int = Field(default=128, ge=0)
    LAMPORTS_PER_BYTE_YEAR: int = Field(default=3480, ge=0)
    EXEMPTION_THRESHOLD_YEARS: float = Field(default=2.0, ge=0.0)

    @property
    def program_id(self) -> Pubkey:
        """Escrow program id as a public key."""
        return Pubkey.from_string(self.ESCROW_PROGRAM_ID)

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"Invalid LOG_LEVEL. Must be one of: {allowed}")
        return v_upper

    @field_validator("ESCROW_PROGRAM_ID")
    @classmethod
    def validate_program_id(cls, v: str) -> str:
        """Validate program id is a base58 public key."""
        try:
            Pubkey.from_string(v)
        except Exception as e:
            raise ValueError(f"Invalid ESCROW_PROGRAM_ID: {e}")
        return v


PROJECT_ROOT = Path(__file__).resolve().parents[3]
CONFIG_DIR = PROJECT_ROOT / "config"

# environment -> (dotenv file, YAML overlay)
ENVIRONMENTS = {
    "production": (".env.production", "production.yaml"),
    "development": (".env.development", "development.yaml"),
    "test": (".env.test", "test.yaml"),
}


def _read_yaml(path: Path) -> dict:
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def load_config(
    config_file: Optional[str] = None,
    env_file: Optional[str] = None,
    env: Optional[str] = None,
) -> Settings:
    """
    Load configuration from YAML files and environment variables.

    Priority: ENV vars > environment-specific YAML > default YAML > defaults

    Args:
        config_file: Optional YAML overlay filename in config/
        env_file: Optional .env filename (e.g., ".env.test")
        env: Optional environment name override (e.g., "development", "test")

    Returns:
        Settings instance

    Raises:
        ValidationError: If a value fails validation
    """
    environment = env or os.getenv("ENV", "development")
    default_env_file, default_overlay = ENVIRONMENTS.get(
        environment, ENVIRONMENTS["development"]
    )

    env_file_path = PROJECT_ROOT / (env_file or default_env_file)
    if env_file_path.exists():
        load_dotenv(env_file_path, override=True)

    merged = _read_yaml(CONFIG_DIR / "default.yaml")
    merged.update(_read_yaml(CONFIG_DIR / (config_file or default_overlay)))

    # Environment variables win over YAML values
    overrides = {k: v for k, v in merged.items() if k not in os.environ}
    return Settings(**overrides)


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or initialize global settings singleton."""
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def override_settings(new_settings: Settings) -> None:
    """Override global settings (for testing)."""
    global _settings
    _settings = new_settings


def reset_settings() -> None:
    """Reset settings to force re-initialization (for testing)."""
    global _settings
    _settings = None
