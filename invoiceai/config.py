from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    # Application settings
    app_name: str = "InvoiceAI"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"

    # Database settings
    database_url: str

    # Security settings
    secret_key: str
    session_max_age_seconds: int = 60 * 60 * 24 * 7

    # CORS settings
    allowed_origins: list[str] = ["http://localhost:5173", "http://localhost:8000"]

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Language model (OpenAI-compatible chat completions API)
    openai_api_key: str | None = None
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-5"
    openai_max_completion_tokens: int = 2048
    openai_timeout_seconds: float = 60.0

    # Email transport (Resend REST API)
    resend_api_key: str | None = None
    resend_api_url: str = "https://api.resend.com"
    resend_from_email: str = "InvoiceAI <noreply@invoiceai.com>"
    email_timeout_seconds: float = 15.0

    # Hosted identity provider tokens (HS256 JWT)
    identity_provider_secret: str | None = None
    identity_provider_audience: str | None = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


settings = Settings()
