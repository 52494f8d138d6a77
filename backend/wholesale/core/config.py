from typing import List, Union
import logging

from pydantic import AnyHttpUrl, Field, validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

class Settings(BaseSettings):
    PROJECT_NAME: str = "Wholesale Ordering"
    API_V1_STR: str = "/api/v1"

    # Admin status changes require this token; set it via .env in production
    ADMIN_TOKEN: str = Field(
        default="dev-only-admin-token-please-change",
        description="Token expected in the X-Admin-Token header"
    )

    # CORS
    BACKEND_CORS_ORIGINS: List[Union[str, AnyHttpUrl]] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    @validator("BACKEND_CORS_ORIGINS", pre=True)
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # Database
    SQLITE_DATABASE_URI: str = "sqlite:///./wholesale.db"

    # Orders
    ORDER_NUMBER_PREFIX: str = "ORD"
    ORDER_NUMBER_MAX_ATTEMPTS: int = 5

    # Largest quantity accepted on a single cart line
    MAX_LINE_QUANTITY: int = 1_000_000

    # Seconds a commit waits for another commit on the same account
    CREDIT_LOCK_TIMEOUT_SECONDS: float = 10.0

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    class Config:
        case_sensitive = True
        env_file = ".env"


settings = Settings()
logger.info(f"Loaded settings: API_V1_STR={settings.API_V1_STR}, CORS={settings.BACKEND_CORS_ORIGINS}")
