"""
Configuration management for the accreditation verifier

Loads settings from:
1. config/config.yaml
2. Environment variables (.env, ``ACCREDIT_`` prefix)
3. Default values
"""

from pathlib import Path
from typing import Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Load environment variables
load_dotenv()


class AccreditSettings(BaseSettings):
    """Central configuration for the verification service."""

    model_config = SettingsConfigDict(
        env_prefix="ACCREDIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Scraping proxy ---
    scraper_api_key: str = Field(default="")
    scraper_api_url: str = Field(default="http://api.scraperapi.com")
    scraping_strategy: Literal["proxy", "direct"] = "proxy"
    proxy_country_code: str | None = None
    fetch_timeout: float = 30.0
    render_timeout: float = 60.0

    # --- Storage ---
    # Empty means the in-memory store (tests, demos)
    database_url: str = Field(default="")

    # --- API Settings ---
    api_key: str = Field(default="")
    cors_origins: str = "http://localhost:3000"  # Comma-separated string
    demo_mode: bool = False
    verify_rate_limit: int = 20

    # --- Logging ---
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def scraping_configured(self) -> bool:
        """True when live directory lookups can run at all."""
        return self.scraping_strategy == "direct" or bool(self.scraper_api_key)

    @classmethod
    def from_yaml(cls, yaml_path: str | Path = "config/config.yaml") -> "AccreditSettings":
        """Load configuration from YAML file"""
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            return cls()

        with open(yaml_path) as f:
            config_data = yaml.safe_load(f) or {}

        return cls(**config_data)


# Global configuration instance
_config: Optional[AccreditSettings] = None


def get_config() -> AccreditSettings:
    """Get or create global configuration instance"""
    global _config
    if _config is None:
        _config = AccreditSettings.from_yaml()
    return _config


def reload_config(yaml_path: Optional[str | Path] = None) -> AccreditSettings:
    """Reload configuration from file"""
    global _config
    _config = AccreditSettings.from_yaml(yaml_path) if yaml_path else AccreditSettings.from_yaml()
    return _config
