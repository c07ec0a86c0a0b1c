"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly,
in particular the JWT signing material.
"""

from functools import lru_cache

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database connection settings.

    Environment variables:
        GATEWAY_DB_HOST: Database host (default: localhost)
        GATEWAY_DB_PORT: Database port (default: 5432)
        GATEWAY_DB_DATABASE: Database name (default: gateway)
        GATEWAY_DB_USERNAME: Database user (default: gateway)
        GATEWAY_DB_PASSWORD: Database password (required in production)
        GATEWAY_DB_POOL_MIN_CONNECTIONS: Minimum connections in pool (default: 2)
        GATEWAY_DB_POOL_MAX_CONNECTIONS: Maximum connections in pool (default: 10)
    """

    model_config = SettingsConfigDict(
        env_prefix="GATEWAY_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="gateway", description="Database name")
    username: str = Field(default="gateway", description="Database username")
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Database password",
    )
    pool_min_connections: int = Field(
        default=2,
        description="Minimum connections in pool",
        ge=1,
        le=100,
    )
    pool_max_connections: int = Field(
        default=10,
        description="Maximum connections in pool",
        ge=1,
        le=100,
    )

    @model_validator(mode="after")
    def validate_pool_settings(self) -> "DatabaseSettings":
        """Validate pool max >= min."""
        if self.pool_max_connections < self.pool_min_connections:
            raise ValueError(
                f"pool_max_connections ({self.pool_max_connections}) must be >= "
                f"pool_min_connections ({self.pool_min_connections})"
            )
        return self

    @property
    def connection_string(self) -> str:
        """Generate a connection string (without password for logging)."""
        return f"postgresql://{self.username}@{self.host}:{self.port}/{self.database}"


class JWTSettings(BaseSettings):
    """Token signing and validation settings.

    Exactly one signing mode is active per process. Symmetric mode signs
    with ``secret_key`` (HS256); certificate mode loads a PKCS#12 bundle
    from ``rsa_private_key_path`` (RS256). The key material itself is
    checked when the signing key provider is built at startup.

    Environment variables:
        GATEWAY_JWT_USE_RSA_CERTIFICATE: Select certificate mode (default: false)
        GATEWAY_JWT_RSA_PRIVATE_KEY_PATH: Path to the .pfx/.p12 bundle
        GATEWAY_JWT_RSA_CERTIFICATE_PASSWORD: Passphrase for the bundle
        GATEWAY_JWT_SECRET_KEY: Shared secret, at least 32 characters
        GATEWAY_JWT_ISSUER: Issuer claim, matched exactly on validation
        GATEWAY_JWT_AUDIENCE: Audience claim, matched exactly on validation
        GATEWAY_JWT_ACCESS_TOKEN_EXPIRATION_MINUTES: Access token lifetime (default: 60)
        GATEWAY_JWT_REFRESH_TOKEN_EXPIRATION_DAYS: Refresh token lifetime (default: 7)
    """

    model_config = SettingsConfigDict(
        env_prefix="GATEWAY_JWT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    use_rsa_certificate: bool = Field(
        default=False,
        description="Sign with a certificate-backed RSA key instead of a shared secret",
    )
    rsa_private_key_path: str | None = Field(
        default=None,
        description="Path to the PKCS#12 certificate bundle",
    )
    rsa_certificate_password: SecretStr | None = Field(
        default=None,
        description="Passphrase protecting the certificate bundle",
    )
    secret_key: SecretStr = Field(
        default=SecretStr(""),
        description="Shared HMAC secret for symmetric mode",
    )
    issuer: str = Field(default="tenant-gateway", description="Token issuer")
    audience: str = Field(
        default="tenant-gateway-clients",
        description="Token audience",
    )
    access_token_expiration_minutes: int = Field(
        default=60,
        description="Access token lifetime in minutes",
        ge=1,
    )
    refresh_token_expiration_days: int = Field(
        default=7,
        description="Refresh token lifetime in days",
        ge=1,
    )


class TenantResolutionSettings(BaseSettings):
    """Names of the request signals that carry the tenant.

    Environment variables:
        GATEWAY_TENANCY_CLAIM_NAME: Token claim holding the tenant id (default: tenant_id)
        GATEWAY_TENANCY_HEADER_NAME: Request header (default: X-Tenant-Id)
        GATEWAY_TENANCY_ROUTE_PARAMETER: Path parameter (default: tenant)
        GATEWAY_TENANCY_QUERY_PARAMETER: Query string parameter (default: tenant)
    """

    model_config = SettingsConfigDict(
        env_prefix="GATEWAY_TENANCY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    claim_name: str = Field(default="tenant_id", min_length=1)
    header_name: str = Field(default="X-Tenant-Id", min_length=1)
    route_parameter: str = Field(default="tenant", min_length=1)
    query_parameter: str = Field(default="tenant", min_length=1)


class LockoutSettings(BaseSettings):
    """Account lockout policy applied by the credential verifier.

    Environment variables:
        GATEWAY_LOCKOUT_MAX_FAILED_ATTEMPTS: Failures before lockout (default: 5)
        GATEWAY_LOCKOUT_LOCKOUT_MINUTES: Lockout duration (default: 5)
    """

    model_config = SettingsConfigDict(
        env_prefix="GATEWAY_LOCKOUT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_failed_attempts: int = Field(default=5, ge=1)
    lockout_minutes: int = Field(default=5, ge=1)


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_prefix="GATEWAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="Tenant Gateway API", description="Application name")
    debug: bool = Field(
        default=False,
        description="Debug mode; attaches exception details to error responses",
    )
    log_level: str = Field(default="INFO", description="Minimum log level")

    @property
    def database(self) -> DatabaseSettings:
        """Get database settings."""
        return get_database_settings()

    @property
    def jwt(self) -> JWTSettings:
        """Get token settings."""
        return get_jwt_settings()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Get cached database settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return DatabaseSettings()


@lru_cache
def get_jwt_settings() -> JWTSettings:
    """Get cached token settings."""
    return JWTSettings()


@lru_cache
def get_tenant_resolution_settings() -> TenantResolutionSettings:
    """Get cached tenant resolution settings."""
    return TenantResolutionSettings()


@lru_cache
def get_lockout_settings() -> LockoutSettings:
    """Get cached lockout policy settings."""
    return LockoutSettings()
