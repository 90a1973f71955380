"""
Configuration management for the XCH wallet engine.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

from xchwallet.constants import ADDRESS_PREFIX_MAINNET


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="XCHWALLET_", env_file=".env", env_file_encoding="utf-8", case_sensitive=False
    )

    api_url: str = "https://api.chiacloudwallet.example/v1"
    jwt_token: str = ""
    synthetic_public_key: str = ""
    request_timeout: float = 30.0

    log_level: str = "INFO"

    address_prefix: str = ADDRESS_PREFIX_MAINNET

    default_fee: int = 0  # mojos


def get_settings() -> Settings:
    return Settings()
