"""Application settings loaded from environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict

DB_POOL_SIZE_DEFAULT = 5
DB_MAX_OVERFLOW_DEFAULT = 10
DB_PORT_DEFAULT = 5432
HTTP_TIMEOUT_DEFAULT = 10.0
STORE_TIMEOUT_DEFAULT = 10.0
CUSTOM_TOKEN_TTL_DEFAULT = 3600
FIREBASE_AUDIENCE = (
    "https://identitytoolkit.googleapis.com/"
    "google.identity.identitytoolkit.v1.IdentityToolkit"
)


class DatabaseSettings(BaseSettings):
    """PostgreSQL connection settings for the IdP key store."""

    model_config = SettingsConfigDict(env_prefix="TOKENBRIDGE_DB_")

    url: str = ""
    host: str = "localhost"
    port: int = DB_PORT_DEFAULT
    user: str = "tokenbridge"
    password: str = "tokenbridge"
    database: str = "tokenbridge"
    pool_size: int = DB_POOL_SIZE_DEFAULT
    max_overflow: int = DB_MAX_OVERFLOW_DEFAULT

    @property
    def async_url(self) -> str:
        """Build async connection URL, honouring an explicit override."""
        if self.url:
            return self.url
        return (
            f"postgresql+asyncpg://{self.user}:{self.password}"
            f"@{self.host}:{self.port}/{self.database}"
        )


class IdpSettings(BaseSettings):
    """Identity provider endpoints, client credentials, and verification knobs."""

    model_config = SettingsConfigDict(env_prefix="TOKENBRIDGE_IDP_")

    authority: str = "https://login.microsoftonline.com"
    tenant_id: str = "common"
    client_id: str = ""
    client_secret: str = ""
    redirect_uri: str = ""
    nonce: str = "42"
    algorithm: str = "RS256"
    verify_audience: bool = False
    leeway_seconds: int = 0
    http_timeout: float = HTTP_TIMEOUT_DEFAULT
    store_timeout: float = STORE_TIMEOUT_DEFAULT
    issuer_uri: str = ""
    jwks_uri: str = ""

    @property
    def tenant_base(self) -> str:
        return f"{self.authority.rstrip('/')}/{self.tenant_id}"

    @property
    def issuer(self) -> str:
        """Expected ``iss`` claim of id-tokens from this tenant."""
        return self.issuer_uri or f"{self.tenant_base}/v2.0"

    @property
    def keys_uri(self) -> str:
        """JWKS endpoint advertised by the tenant."""
        return self.jwks_uri or f"{self.tenant_base}/discovery/v2.0/keys"

    @property
    def authorize_uri(self) -> str:
        return f"{self.tenant_base}/oauth2/v2.0/authorize"

    @property
    def token_uri(self) -> str:
        return f"{self.tenant_base}/oauth2/v2.0/token"


class IssuerSettings(BaseSettings):
    """Downstream custom-token signing credentials."""

    model_config = SettingsConfigDict(env_prefix="TOKENBRIDGE_ISSUER_")

    service_account_email: str = ""
    private_key_pem: str = ""
    private_key_encryption_key: str = ""
    audience: str = FIREBASE_AUDIENCE
    token_ttl: int = CUSTOM_TOKEN_TTL_DEFAULT


class AppSettings(BaseSettings):
    """Process-level settings for the HTTP surface."""

    model_config = SettingsConfigDict(env_prefix="TOKENBRIDGE_")

    internal_token: str = ""
    cors_origins: str = ""
    log_level: str = "INFO"

    def get_cors_origin_list(self) -> list[str]:
        """Parse comma-separated CORS origins."""
        if not self.cors_origins:
            return []
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
