"""Application configuration via environment variables."""

from pathlib import Path
from pydantic_settings import BaseSettings

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    database_url: str = "sqlite:///./warranty_check.db"
    encryption_key: str = ""  # Fernet key; generate with: python -m warrantycheck.cli generate-key
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:5173"]

    # Auth
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440  # 24 hours
    otp_resend_cooldown_seconds: int = 60

    # InControl
    incontrol_base_url: str = "https://api.ic.peplink.com"
    upstream_timeout: float = 30.0
    report_window_days: int = 90

    # System mail relay (OTP delivery)
    smtp_host: str = ""
    smtp_port: int = 465
    smtp_user: str = ""
    smtp_pass: str = ""
    smtp_from: str = "Peplink OTP <noreply@example.com>"

    model_config = {"env_prefix": "WC_", "env_file": ".env", "frozen": True}


settings = Settings()
