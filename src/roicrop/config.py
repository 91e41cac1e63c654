"""roicrop configuration using pydantic-settings.

All configuration is strongly typed and supports environment variables
and .env files.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigError(Exception):
    """Raised when a configuration value is missing or invalid.

    The message names the environment variable to fix, e.g.
    "DISPLAY_WIDTH must be positive, got 0. Set it in .env file or
    DISPLAY_WIDTH environment variable."
    """

    def __init__(self, key_name: str, detail: str) -> None:
        """Initialize configuration error.

        Args:
            key_name: Name of the offending setting (also its env var).
            detail: What is wrong with the current value.
        """
        self.key_name = key_name
        self.detail = detail
        message = (
            f"{key_name} {detail}. "
            f"Set it in .env file or {key_name} environment variable."
        )
        super().__init__(message)


class Settings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "console"  # "console" or "json"

    # Selection
    MIN_REGION_SIZE: float = 5.0  # Display units; both sides must exceed it

    # Display surface
    DISPLAY_WIDTH: int = 800  # Fit-to-width display used by the CLI

    # Crop artifacts
    CROP_FORMAT: str = "PNG"
    MAX_CROP_DIMENSION: int = 10000  # 0 disables the guard

    # Mask overlay
    MASK_OPACITY: float = 0.5

    def require_positive(self, key_name: str) -> float:
        """Get a numeric setting, raising ConfigError unless it is > 0.

        Args:
            key_name: Attribute name of the setting.

        Returns:
            The setting value.

        Raises:
            ConfigError: If the value is zero or negative.
        """
        value = getattr(self, key_name)
        if value <= 0:
            raise ConfigError(key_name, f"must be positive, got {value}")
        return value

    def require_opacity(self) -> float:
        """Get MASK_OPACITY, raising ConfigError unless it is within [0, 1]."""
        if not 0.0 <= self.MASK_OPACITY <= 1.0:
            raise ConfigError(
                "MASK_OPACITY", f"must be between 0 and 1, got {self.MASK_OPACITY}"
            )
        return self.MASK_OPACITY


# Singleton instance for import convenience
settings = Settings()
