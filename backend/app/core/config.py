from pydantic_settings import BaseSettings
from typing import List, Any
import json


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


def parse_secret_list(v: str) -> List[str]:
    """Parse a comma-separated list of secrets, ignoring blanks"""
    if not v:
        return []
    return [item.strip() for item in v.split(',') if item.strip()]


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "Hackhub Event Platform"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    SECRET_KEY: str
    API_VERSION: str = "v1"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800  # 30 minutes
    DB_ECHO: bool = False

    # ==========================================
    # Authentication
    # ==========================================
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24 hours
    BCRYPT_ROUNDS: int = 12  # 4 for dev (fast), 12 for prod (secure)

    # ==========================================
    # Gate QR tokens
    # ==========================================
    QR_SECRET: str
    # Older secrets still accepted during rotation (comma-separated)
    QR_PREVIOUS_SECRETS_STR: str = ""
    QR_TOKEN_MAX_AGE_HOURS: int = 24

    @property
    def QR_PREVIOUS_SECRETS(self) -> List[str]:
        """Parse rotated-out QR secrets from comma-separated string"""
        return parse_secret_list(self.QR_PREVIOUS_SECRETS_STR)

    # Entity IDs look like OF-2026-A7F3
    ENTITY_ID_PREFIX: str = "OF"
    ENTITY_ID_MAX_ATTEMPTS: int = 5

    # ==========================================
    # Investment market
    # ==========================================
    STARTING_BALANCE: int = 1000000
    TEAM_MAX_SIZE: int = 4
    CLUSTER_DEFAULT_MAX_TEAMS: int = 10

    # ==========================================
    # CORS (stored as comma-separated string, parsed to list)
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://127.0.0.1:3000"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    # ==========================================
    # Rate Limiting
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_GATE_SCAN: str = "120/minute"  # gate scanners burst at doors
    RATE_LIMIT_STORAGE_URI: str = "memory://"  # redis://host:6379/1 in production

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


# Create settings instance
settings = Settings()
