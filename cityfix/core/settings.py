"""
Core settings and environment variables for CityFix Insights.
Uses pydantic-settings for type-safe environment variable loading.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Create a .env file in the root directory to configure these.
    """

    # Application
    APP_NAME: str = "CityFix Insights"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS - Admin console URLs allowed to access this API
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Firebase Realtime Database (report store)
    FIREBASE_DATABASE_URL: Optional[str] = None
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None  # Path to service account JSON
    REPORTS_PATH: str = "reports"

    # Mock store for local development without Firebase credentials
    USE_MOCK_DB: bool = False
    MOCK_DB_PATH: str = "./mock_db.json"

    # Geocoding
    # - Chain order: nominatim -> bigdatacloud -> google (only with key) -> offline
    GEOCODE_CACHE_PRECISION: int = 4  # ~11 m
    GEOCODING_TIMEOUT_SECONDS: float = 15.0
    NOMINATIM_USER_AGENT: str = "cityfix-insights/1.0"
    NOMINATIM_MIN_INTERVAL_SECONDS: float = 1.0  # Nominatim usage policy: 1 req/s
    BIGDATACLOUD_ENABLED: bool = True
    GOOGLE_MAPS_API_KEY: Optional[str] = None

    # Clustering
    CLUSTER_GRID_PRECISION: int = 1  # one decimal degree, ~11 km
    CLUSTER_SERVICE_URL: Optional[str] = None  # e.g. https://cluster.example.org/cluster
    CLUSTER_SERVICE_TIMEOUT_SECONDS: float = 15.0

    # Enrichment
    ENRICHMENT_BATCH_SIZE: int = 3
    ENRICHMENT_BATCH_DELAY_SECONDS: float = 1.0
    ENRICHMENT_LOOKUP_TIMEOUT_SECONDS: float = 45.0  # whole provider chain for one point

    # Re-aggregation guard
    AGGREGATION_MIN_INTERVAL_SECONDS: float = 2.0

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"

    @property
    def cors_origins_list(self):
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


# Global settings instance
settings = Settings()
