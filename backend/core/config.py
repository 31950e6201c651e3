import os
from typing import List, Literal
from dotenv import load_dotenv
import logging


logging.basicConfig(level=logging.INFO)

# Load environment variables from .env file located in the backend directory.
# Environment variables explicitly set (e.g., by Docker Compose) take precedence.
BASE_DIR = os.path.dirname(os.path.dirname(__file__))
ENV_PATH = os.path.join(BASE_DIR, '.env')
load_dotenv(ENV_PATH)


def parse_cors(value: str) -> List[str]:
    """
    Parses CORS origins. Accepts comma-separated string or list-like string.
    Example: "http://localhost,http://127.0.0.1" → ["http://localhost", "http://127.0.0.1"]
    If the value is empty, a default list of common development origins is provided.
    """
    if not value:
        return [
            "http://localhost:3000",  # React dev server
            "http://127.0.0.1:3000",
            "http://localhost:5173",
        ]
    if isinstance(value, str):
        value = value.strip()
        if value.startswith("[") and value.endswith("]"):
            return [i.strip().strip('"').strip("'") for i in value[1:-1].split(",")]
        return [i.strip() for i in value.split(",")]
    raise ValueError("Invalid CORS format")


class Settings:
    # --- General Environment Settings ---
    DOMAIN: str = os.getenv('DOMAIN', 'localhost')
    # ENVIRONMENT determines application behavior (e.g., table bootstrap, debug echo).
    ENVIRONMENT: Literal["local", "staging",
                         "production"] = os.getenv('ENVIRONMENT', 'local')

    # --- PostgreSQL Database Configuration ---
    POSTGRES_USER: str = os.getenv('POSTGRES_USER', 'haggle')
    POSTGRES_PASSWORD: str = os.getenv('POSTGRES_PASSWORD', 'haggle_password')
    POSTGRES_SERVER: str = os.getenv('POSTGRES_SERVER', 'postgres')
    POSTGRES_PORT: int = int(os.getenv('POSTGRES_PORT', 5432))
    POSTGRES_DB: str = os.getenv('POSTGRES_DB', 'haggle_db')

    # Full database URL. Takes precedence over the individual components when set.
    POSTGRES_DB_URL: str = os.getenv('POSTGRES_DB_URL', "")

    # --- Security Settings ---
    # SECRET_KEY signs the bearer tokens issued by the identity service.
    SECRET_KEY: str = os.getenv('SECRET_KEY', '')
    ALGORITHM: str = os.getenv('ALGORITHM', "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(
        os.getenv('ACCESS_TOKEN_EXPIRE_MINUTES', 30))

    # --- Logging ---
    LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO')
    # "json" or "simple"
    LOG_FORMAT: str = os.getenv('LOG_FORMAT', 'json')

    # --- CORS Configuration ---
    RAW_CORS_ORIGINS: str = os.getenv('BACKEND_CORS_ORIGINS', '')
    BACKEND_CORS_ORIGINS: List[str] = parse_cors(RAW_CORS_ORIGINS)

    @property
    def is_local(self) -> bool:
        return self.ENVIRONMENT == "local"

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        """
        Constructs the SQLAlchemy database URI.
        A full POSTGRES_DB_URL wins over the individual components.
        """
        if self.POSTGRES_DB_URL:
            return self.POSTGRES_DB_URL

        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )


def validate_settings(config: "Settings") -> List[str]:
    """Return human readable warnings for settings that need attention."""
    warnings = []
    if not config.SECRET_KEY:
        warnings.append("SECRET_KEY is not set; bearer tokens cannot be verified")
    elif len(config.SECRET_KEY) < 32:
        warnings.append("SECRET_KEY is shorter than 32 characters")
    if config.ENVIRONMENT not in ("local", "staging", "production"):
        warnings.append(f"Unknown ENVIRONMENT '{config.ENVIRONMENT}'")
    if config.LOG_FORMAT not in ("json", "simple"):
        warnings.append(f"Unknown LOG_FORMAT '{config.LOG_FORMAT}', falling back to json")
    return warnings


# Instantiate the settings object to be used throughout the application
settings = Settings()
