from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server
    PORT: int = 3000

    # E-mail transport: "smtp", "http" or "console"
    EMAIL_TRANSPORT: str = "smtp"
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_STARTTLS: bool = True
    EMAIL_FROM: str = ""
    EMAIL_WEBHOOK_URL: str | None = None
    DISPATCH_TIMEOUT_SECONDS: float = 30.0

    # Business identity (rendered into notifications)
    BUSINESS_EMAIL: str = "imageinboxe3@gmail.com"
    BUSINESS_NAME: str = "E3 Achievement"
    BUSINESS_PHONE: str = "269-924-7247"
    BUSINESS_ADDRESS: str = "331 West Jackson St., Battle Creek"
    BUSINESS_TAGLINE: str = "Education • Entrepreneurship • Empowerment"

    # Rate limiting: "memory", "redis" or "disabled"
    RATE_LIMIT_BACKEND: str = "memory"
    RATE_LIMIT_MAX: int = 5
    RATE_LIMIT_WINDOW_SECONDS: int = 15 * 60
    REDIS_URL: str = "redis://localhost:6379/0"

    # Set only behind a reverse proxy that appends the client to X-Forwarded-For
    TRUST_PROXY: bool = False

    # Privacy
    IP_HASH_SALT: str = "change-me-in-production"

    # CORS
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:8000"

    # App
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    @property
    def allowed_origins_list(self) -> list[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    @property
    def log_level(self) -> str:
        return "DEBUG" if self.DEBUG else self.LOG_LEVEL

    @property
    def sender_address(self) -> str:
        """Address used in the From header; falls back to the SMTP login."""
        return self.EMAIL_FROM or self.SMTP_USERNAME


settings = Settings()
