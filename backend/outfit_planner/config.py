"""
Configuration management for the outfit planner backend
"""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

"""Application settings and configuration"""
class Settings:

    # Database Configuration
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./outfit_planner.db")

    # Frontend URL (for CORS)
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:4200")
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "")

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "production")

    # Google Gemini Configuration (generative recommender)
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.0-flash-lite")
    RECOMMENDER_TIMEOUT: float = float(os.getenv("RECOMMENDER_TIMEOUT", "30"))
    RECOMMENDER_TEMPERATURE: float = float(os.getenv("RECOMMENDER_TEMPERATURE", "0.3"))

    # Planner behaviour
    PLANNER_HORIZON_DAYS: int = int(os.getenv("PLANNER_HORIZON_DAYS", "7"))
    DAILY_ALTERNATIVES: int = int(os.getenv("DAILY_ALTERNATIVES", "2"))
    # "drop" removes ids the wardrobe does not know, "reject" fails the suggestion
    UNKNOWN_ITEM_POLICY: str = os.getenv("UNKNOWN_ITEM_POLICY", "drop").lower()

    # Cloudinary Configuration (item image URLs)
    CLOUDINARY_CLOUD_NAME: str = os.getenv("CLOUDINARY_CLOUD_NAME", "")
    CLOUDINARY_API_KEY: str = os.getenv("CLOUDINARY_API_KEY", "")
    CLOUDINARY_API_SECRET: str = os.getenv("CLOUDINARY_API_SECRET", "")
    USE_CLOUDINARY: bool = os.getenv("USE_CLOUDINARY", "false").lower() == "true"

    @property
    def allowed_origins(self) -> list:
        """CORS origins, preferring the comma-separated CORS_ORIGINS list"""
        if self.CORS_ORIGINS:
            return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]
        return ["http://localhost:4200", self.FRONTEND_URL]

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() in ("development", "dev", "local")

    """Check if Cloudinary is properly configured"""
    @property
    def cloudinary_configured(self) -> bool:
        return bool(
            self.CLOUDINARY_CLOUD_NAME
            and self.CLOUDINARY_API_KEY
            and self.CLOUDINARY_API_SECRET
        )

settings = Settings()
