"""Library configuration settings.

All configuration values are loaded from environment variables (.env file).
Storage coordinates are resolved into a validated StorageConfig once, at the
edge, so URL building never has to look at the environment itself.
"""

from dataclasses import dataclass
from typing import Optional

from pydantic_settings import BaseSettings


class ConfigurationError(Exception):
    """Raised when required deployment configuration is missing."""
    pass


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    # Object storage - REQUIRED for URL building
    AWS_REGION: str = ""
    AWS_S3_BUCKET: str = ""

    # CDN in front of the bucket (optional)
    CDN_DOMAIN: Optional[str] = None

    # Processing limits
    MAX_IMAGE_SIZE: int = 10 * 1024 * 1024  # 10MB
    MAX_ORIGINAL_DIMENSION: int = 4096
    # Pixel count past which originals are rejected. Pillow's own bomb guard
    # (2 x PIL.Image.MAX_IMAGE_PIXELS) still rejects anything beyond it
    MAX_IMAGE_PIXELS: int = 89_478_485

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


@dataclass(frozen=True)
class StorageConfig:
    """Object storage coordinates used to build public URLs."""
    region: str
    bucket: str
    cdn_domain: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.region or not self.bucket:
            raise ConfigurationError(
                "AWS_REGION and AWS_S3_BUCKET environment variables are required"
            )

    @classmethod
    def from_settings(cls, source: Settings) -> "StorageConfig":
        """Build a validated storage config from settings.

        Args:
            source: Loaded settings

        Returns:
            StorageConfig

        Raises:
            ConfigurationError: If region or bucket is missing
        """
        return cls(
            region=source.AWS_REGION,
            bucket=source.AWS_S3_BUCKET,
            cdn_domain=source.CDN_DOMAIN or None,
        )

    @property
    def base_url(self) -> str:
        """Public base URL for objects in the bucket."""
        if self.cdn_domain:
            return f"https://{self.cdn_domain}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com"


def get_settings() -> Settings:
    """Load settings from the current environment.

    Returns:
        Settings: Freshly loaded settings
    """
    return Settings()


def get_storage_config() -> StorageConfig:
    """Get the storage config for the current environment.

    Raises:
        ConfigurationError: If region or bucket is missing
    """
    return StorageConfig.from_settings(get_settings())


settings = Settings()
