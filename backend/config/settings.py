from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    """
    Application settings and configuration management.
    Loads environment variables from .env file.
    """

    # ============ API Configuration ============
    API_TITLE: str = "Employee Portal"
    API_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # ============ Server Configuration ============
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    LOG_LEVEL: str = "INFO"
    """Root logging level configured in main.py"""

    # ============ Database Configuration ============
    DATABASE_URL: str = "sqlite:///./employees.db"
    """SQLAlchemy database URL (MySQL, PostgreSQL or SQLite)"""

    # ============ JWT Authentication Configuration ============
    SECRET_KEY: str = "your-secret-key-change-in-production"
    """Secret key for JWT token signing - change in production"""

    ALGORITHM: str = "HS256"
    """JWT algorithm for token encoding"""

    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    """JWT token expiration time in minutes (7 days)"""

    # ============ Credential Configuration ============
    BCRYPT_ROUNDS: int = 12
    """bcrypt cost factor used for new password hashes"""

    EMPLOYEE_CODE_MAX_ATTEMPTS: int = 100
    """Upper bound on employee code draws before giving up"""

    LOG_FAILED_LOGIN_ATTEMPTS: bool = True
    """Whether failed logins (unknown code, wrong password) are written to login_attempts"""

    # ============ Upload Configuration ============
    UPLOAD_DIR: str = "static/uploads"
    """Directory where profile images are stored"""

    MAX_UPLOAD_SIZE: int = 5 * 1024 * 1024
    """Maximum profile image size in bytes (5MB)"""

    # ============ CORS Configuration ============
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",  # React dev server
        "http://localhost:5173",  # Vite dev server
        "http://localhost:8000",  # Same origin
    ]
    """Allowed origins for CORS requests"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

# Create global settings instance
settings = Settings()
