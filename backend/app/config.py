# app/config.py
import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file


def _csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseModel):
    # General app settings
    APP_NAME: str = os.getenv("APP_NAME", "Whisper Box API")
    env: str = os.getenv("ENV", "dev")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Host & Port settings
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))

    # CORS origins for frontend
    CORS_ORIGINS: list[str] = _csv(os.getenv(
        "CORS_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173",
    ))

    # Document/user store; an empty value is a fatal startup error
    database_url: str = os.getenv("DATABASE_URL", "")

    # Sessions
    jwt_secret: str = os.getenv("JWT_SECRET", "dev-secret")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))

    # Verification codes
    verify_code_ttl_minutes: int = int(os.getenv("VERIFY_CODE_TTL_MINUTES", "60"))

    # Resend API Settings (verification mail)
    resend_api_key: str | None = os.getenv("RESEND_API_KEY")
    resend_api_url: str = os.getenv("RESEND_API_URL", "https://api.resend.com/emails")
    mail_from: str = os.getenv("MAIL_FROM", "onboarding@resend.dev")

    # OpenAI-compatible completion API (message suggestions)
    openai_api_key: str | None = os.getenv("OPENAI_API_KEY")
    openai_api_url: str = os.getenv("OPENAI_API_URL", "https://api.openai.com/v1/chat/completions")
    suggestion_model: str = os.getenv("SUGGESTION_MODEL", "gpt-4o-mini")

settings = Settings()  # Instantiate configuration
