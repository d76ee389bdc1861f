"""Environment-backed settings for the repository and logging."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

STORAGE_BACKENDS = ("memory", "json")

# Fields that must be non-empty strings for each backend
REQUIRED_FIELDS = {
    "memory": (),
    "json": ("DATA_DIR",),
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="OPNAME_", env_file=".env", extra="ignore")

    # ==============================
    # Storage
    # ==============================
    STORAGE_BACKEND: str = "memory"
    DATA_DIR: str = "data"

    # ==============================
    # Logging
    # ==============================
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    @property
    def missing_fields(self) -> list[str]:
        """Required fields for the chosen backend that are blank."""
        required = REQUIRED_FIELDS.get(self.STORAGE_BACKEND.lower())
        if required is None:
            return ["STORAGE_BACKEND"]
        missing = []
        for name in required:
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                missing.append(name)
        return missing

    @property
    def is_configured(self) -> bool:
        """Whether every required field is a non-empty string."""
        return not self.missing_fields


@lru_cache
def get_settings() -> Settings:
    """Cached settings loader (once per process)."""
    return Settings()


__all__ = ["Settings", "get_settings", "STORAGE_BACKENDS"]
