from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # Service
    service_name: str = "post-scheduler"
    debug: bool = False
    public_base_url: str = "http://localhost:8000"
    io_timeout_seconds: float = 10.0
    publish_timeout_seconds: float = 30.0

    # Database
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "post_scheduler"
    db_user: str = "dbadmin"
    db_password: str = ""

    # Delivery queue (Upstash QStash)
    qstash_url: str = "https://qstash.upstash.io"
    qstash_token: str = ""
    qstash_current_signing_key: str = ""
    qstash_next_signing_key: str = ""
    qstash_retries: int | None = None  # Queue default when unset

    # Publishing platform (X/Twitter app credentials)
    twitter_api_key: str = ""
    twitter_api_secret: str = ""

    # Authentication
    auth_enabled: bool = False  # Disable in development
    cognito_user_pool_id: str | None = None
    cognito_client_id: str | None = None
    cognito_region: str = "us-east-1"

    @property
    def database_url(self) -> str:
        return f"postgresql+asyncpg://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    @property
    def callback_url(self) -> str:
        """Public URL the delivery queue calls at fire time."""
        return f"{self.public_base_url.rstrip('/')}/api/v1/webhooks/qstash/publish"

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
