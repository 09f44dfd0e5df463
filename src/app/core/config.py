from functools import lru_cache

from pydantic import ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "Equus Accounts API"
    app_env: str = "development"  # development, testing, production
    debug: bool = False
    enable_openapi: bool = True  # Set to False in production

    # Security
    log_user_emails: bool = False  # Set to False in production for GDPR compliance
    csp_production: str = "default-src 'self'; frame-ancestors 'none'"

    # Database
    database_url: str
    database_pool_size: int = 5
    database_max_overflow: int = 10

    # Auth tokens (access and refresh are signed with independent secrets)
    jwt_access_secret_key: str
    jwt_refresh_secret_key: str
    jwt_algorithm: str = "HS256"
    access_token_expire_hours: int = 24
    remember_me_expire_days: int = 7
    refresh_token_expire_days: int = 7
    email_verification_expire_hours: int = 24
    password_reset_expire_hours: int = 1

    # Password hashing
    argon2_time_cost: int = 3
    argon2_memory_cost: int = 65536
    argon2_parallelism: int = 1

    # Lockout
    max_login_attempts: int = 5
    lockout_minutes: int = 30

    # Cookies
    access_cookie_name: str = "auth_token"
    refresh_cookie_name: str = "refresh_token"
    cookie_domain: str | None = None  # e.g. ".equussystems.co" to share with subdomains

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Metrics
    metrics_api_key: str | None = None  # If set, /metrics requires this key

    # Rate limiting (slowapi, in-memory)
    rate_limit_enabled: bool = False

    # Email (Resend)
    resend_api_key: str | None = None  # If not set, emails are logged but not sent
    email_from: str = "noreply@example.com"
    admin_emails: list[str] = []
    email_send_timeout_seconds: int = 10
    email_max_attempts: int = 3
    email_retry_backoff_seconds: float = 1.0
    app_url: str = "http://localhost:3000"  # Frontend URL for emailed links

    # Bootstrap
    initial_admin_email: str | None = None
    initial_admin_password: str | None = None

    # Token cleanup
    token_cleanup_interval_minutes: int = 60  # 0 disables the periodic cleanup
    used_token_retention_hours: int = 24

    # Analytics
    analytics_enabled: bool = True  # Request tracking middleware; /analytics/track stays on
    analytics_session_cookie_name: str = "session_id"
    analytics_session_max_age_seconds: int = 86400
    analytics_retention_days: int = 90  # 0 keeps events forever

    @field_validator("jwt_access_secret_key", "jwt_refresh_secret_key")
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        if v == "change-this-to-a-secure-random-string":
            raise ValueError(
                "JWT secrets must be changed from the default value. "
                "Generate a secure secret with: openssl rand -hex 32"
            )
        if len(v) < 32:
            raise ValueError("JWT secrets must be at least 32 characters")
        return v

    @field_validator("jwt_refresh_secret_key")
    @classmethod
    def validate_distinct_secrets(cls, v: str, info: ValidationInfo) -> str:
        if v == info.data.get("jwt_access_secret_key"):
            raise ValueError("JWT_REFRESH_SECRET_KEY must differ from JWT_ACCESS_SECRET_KEY")
        return v

    @field_validator("cors_origins")
    @classmethod
    def validate_cors_origins(cls, v: list[str]) -> list[str]:
        """Validate CORS origins - reject wildcards when credentials are used."""
        for origin in v:
            if origin == "*":
                raise ValueError(
                    "CORS wildcard '*' is not allowed when allow_credentials=True. "
                    "Specify explicit origins instead."
                )
        return v

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()
