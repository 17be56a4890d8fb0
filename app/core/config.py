from pydantic_settings import BaseSettings
from typing import Optional, List, Dict
import os

class Settings(BaseSettings):
    # Application
    APP_NAME: str = "HealthConnect+"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    TESTING: bool = os.getenv("TESTING", "0").lower() in ("1", "true", "t", "yes", "y")

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./healthconnect.db")
    TEST_DATABASE_URL: str = os.getenv("TEST_DATABASE_URL", "sqlite:///./test.db")

    # Redis (server-side sessions)
    REDIS_URL: str = "redis://localhost:6379"

    # Sessions
    SESSION_COOKIE_NAME: str = "healthconnect_session"
    SESSION_EXPIRE_SECONDS: int = 60 * 60 * 24
    SESSION_COOKIE_SECURE: bool = False

    # Email settings (for notifications)
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    EMAIL_FROM: str = "HealthConnect+ <no-reply@healthconnect.com>"

    # SMS settings (Twilio)
    TWILIO_ACCOUNT_SID: Optional[str] = None
    TWILIO_AUTH_TOKEN: Optional[str] = None
    TWILIO_PHONE_NUMBER: Optional[str] = None
    TWILIO_API_BASE: str = "https://api.twilio.com/2010-04-01"

    # Consultations
    CONSULTATION_PRICES: Dict[str, int] = {
        "instant": 499,
        "scheduled": 299,
        "emergency": 999,
    }
    MAX_CONSULTATION_AMOUNT: int = 1000
    CURRENCY: str = "INR"

    # CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8080", "http://testserver"]

    @property
    def get_database_url(self):
        """Return the appropriate database URL based on if we're testing"""
        if self.TESTING:
            return self.TEST_DATABASE_URL
        return self.DATABASE_URL

    @property
    def email_configured(self) -> bool:
        return bool(self.SMTP_HOST and self.SMTP_USER and self.SMTP_PASSWORD)

    @property
    def sms_configured(self) -> bool:
        return bool(
            self.TWILIO_ACCOUNT_SID
            and self.TWILIO_AUTH_TOKEN
            and self.TWILIO_PHONE_NUMBER
        )

    model_config = {"env_file": ".env", "case_sensitive": True, "extra": "ignore"}

# Create settings instance
settings = Settings()
