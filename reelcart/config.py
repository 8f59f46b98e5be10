import os
from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    # 🎯 Application
    APP_NAME: str = "Reelcart API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False  # ⚠️ Must be False in production
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 2880  # 2 days

    # 🌐 Server
    HOST: str = '0.0.0.0'
    PORT: int = 8000

    # 🗄️ Database
    DATABASE_URL: str  # ⚠️ No default, must come from env
    DB_ECHO: bool = False

    # 🔒 CORS
    ALLOWED_ORIGINS: str = "http://localhost:5173,http://localhost:5174"

    # 📦 Upload staging
    UPLOAD_DIR: str = 'uploads'
    MAX_THUMBNAIL_SIZE: int = 5 * 1024 * 1024  # 5MB
    ALLOWED_THUMBNAIL_TYPES: str = "image/jpeg,image/png,image/gif,image/webp"

    # ☁️ S3 Configuration
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[str] = None
    AWS_REGION: str = "us-east-1"
    AWS_BUCKET_NAME: Optional[str] = None

    # 🔐 Admin Account
    FIRST_SUPERUSER_EMAIL: Optional[str] = None
    FIRST_SUPERUSER_PASSWORD: Optional[str] = None

    # 🔐 Security Headers
    HTTPS_ONLY: bool = False

    # 📊 Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = 'ignore'

    @property
    def allowed_origins_list(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into list"""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(',') if origin.strip()]

    @property
    def allowed_thumbnail_types(self) -> List[str]:
        return [t.strip() for t in self.ALLOWED_THUMBNAIL_TYPES.split(',') if t.strip()]

    @property
    def is_s3_enabled(self) -> bool:
        """Check if the S3 bucket is configured"""
        return bool(self.AWS_BUCKET_NAME)

    @property
    def upload_dir_path(self) -> str:
        return os.path.abspath(self.UPLOAD_DIR)

settings = Settings()
