from pydantic_settings import BaseSettings
from typing import List, Optional
import os

class Settings(BaseSettings):
    OPENAI_API_KEY: Optional[str] = None
    RENTALGUARD_MODEL: str = "gpt-4.1-mini"
    INFERENCE_TEMPERATURE: float = 0.2
    INFERENCE_MAX_OUTPUT_TOKENS: int = 700

    PAGE_FETCH_TIMEOUT: float = 12.0         # connect/read timeout and overall budget
    PAGE_FETCH_MAX_BYTES: int = 2_000_000
    PAGE_TEXT_MAX_CHARS: int = 24000
    USER_AGENT: str = "RentalGuard/1.0 (+https://housetective.com)"

    ALLOWED_ORIGINS: str = "*"
    FIREBASE_PROJECT_ID: Optional[str] = None
    GOOGLE_APPLICATION_CREDENTIALS: Optional[str] = None
    LOG_LEVEL: str = "INFO"

    @property
    def origins(self) -> List[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

settings = Settings(_env_file=os.getenv("ENV_FILE", ".env"), _env_file_encoding="utf-8")
