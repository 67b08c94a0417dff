"""Configuration management for the Record Tagging Service"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Service Configuration
    SERVICE_NAME: str = "Record Tagging Service"

    # Logging Configuration
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # MongoDB Configuration
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DATABASE: str = "WAVBackendAPI"
    MONGODB_TIMEOUT_MS: int = 30000
    PATIENTS_COLLECTION: str = "patients"
    CONTACTS_COLLECTION: str = "contact_users"
    ANCILLARIES_COLLECTION: str = "ancillary_users"
    TAG_CATALOG_COLLECTION: str = "tag_catalog"

    # Backfill Configuration
    BACKFILL_BATCH_SIZE: int = 100
    BACKFILL_CONCURRENCY: int = 1

    # Tagging Rules
    ORGANIZATION_DOMAIN: str = "doctoralliance.com"

    # Access Control
    ADMIN_ROLE: str = "Admin"
    ACCESS_ALLOW_SAME_DOMAIN: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
