from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GateSettings(BaseSettings):
    """Configuration for a gate deployed in front of a protected subdomain."""

    model_config = SettingsConfigDict(
        env_prefix="GATE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Equus Subdomain Gate"
    debug: bool = False

    # Central accounts API used for token and grant verification
    main_api_url: str = "http://localhost:8000"
    verification_timeout_seconds: float = 5.0

    # Host header (without port) -> protected resource id
    resource_hosts: dict[str, str] = {
        "ai-trl.equussystems.co": "ai-trl",
        "ai-tutor.equussystems.co": "ai-tutot",
    }

    # Token sources, checked in this order before the Bearer header
    subdomain_cookie_name: str = "equus_subdomain_auth"
    auth_cookie_name: str = "auth_token"

    # Links rendered on denial pages
    main_site_url: str = "http://localhost:3000"
    login_url: str = "http://localhost:3000/auth/signin"

    @field_validator("resource_hosts")
    @classmethod
    def normalize_hosts(cls, v: dict[str, str]) -> dict[str, str]:
        return {host.strip().lower(): resource for host, resource in v.items()}

    @field_validator("main_api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


@lru_cache
def get_gate_settings() -> GateSettings:
    return GateSettings()
