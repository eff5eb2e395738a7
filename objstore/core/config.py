"""Storage connection configuration.

Values are read from environment-variable style keys::

    AWS_ENDPOINT           S3/MinIO endpoint URL (required)
    AWS_ACCESS_KEY_ID      access key (required)
    AWS_SECRET_ACCESS_KEY  secret key (required)
    AWS_REGION             region (default: us-east-1)
    AWS_PART_SIZE          multipart part size in bytes (default: 5 MiB)
    AWS_MAX_CONCURRENCY    parallel part uploads (default: 4)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from pydantic import (
    AnyUrl,
    BaseModel,
    ConfigDict,
    Field,
    PositiveInt,
    TypeAdapter,
    ValidationError,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_REGION = "us-east-1"
DEFAULT_PART_SIZE = 5 * 1024 * 1024
DEFAULT_MAX_CONCURRENCY = 4


@dataclass(frozen=True, slots=True)
class Credentials:
    """Static access key pair."""

    access_key_id: str
    secret_access_key: str

    def __repr__(self) -> str:
        return f"Credentials(access_key_id={self.access_key_id!r}, secret_access_key='***')"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Finished connection settings for a storage wrapper."""

    endpoint: str
    credentials: Credentials
    region: str = DEFAULT_REGION
    part_size: int = DEFAULT_PART_SIZE
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY


_URL = TypeAdapter(AnyUrl)


def _check_endpoint(value: str) -> str:
    """Require an absolute URL with a host; the original string is kept as-is."""
    try:
        url = _URL.validate_python(value)
    except ValidationError as exc:
        raise ValueError(f"endpoint is not a valid URL: {exc.errors()[0]['msg']}") from exc
    if not url.host:
        raise ValueError("endpoint must be an absolute URI such as http://localhost:9000")
    return value


class StorageEnv(BaseModel):
    """Schema for the raw key-value input."""

    AWS_ENDPOINT: str = Field(min_length=1)
    AWS_REGION: str = Field(default=DEFAULT_REGION, min_length=1)
    AWS_ACCESS_KEY_ID: str = Field(min_length=1)
    AWS_SECRET_ACCESS_KEY: str = Field(min_length=1)
    AWS_PART_SIZE: PositiveInt = DEFAULT_PART_SIZE
    AWS_MAX_CONCURRENCY: PositiveInt = DEFAULT_MAX_CONCURRENCY

    model_config = ConfigDict(extra="ignore", frozen=True)

    @field_validator("AWS_ENDPOINT")
    @classmethod
    def _endpoint_is_uri(cls, value: str) -> str:
        return _check_endpoint(value)

    def to_config(self) -> StorageConfig:
        return StorageConfig(
            endpoint=self.AWS_ENDPOINT,
            region=self.AWS_REGION,
            credentials=Credentials(
                access_key_id=self.AWS_ACCESS_KEY_ID,
                secret_access_key=self.AWS_SECRET_ACCESS_KEY,
            ),
            part_size=self.AWS_PART_SIZE,
            max_concurrency=self.AWS_MAX_CONCURRENCY,
        )


class StorageSettings(BaseSettings):
    """Storage keys loaded from the process environment and ``.env``.

    Everything is optional here; required-ness is enforced by ``StorageEnv``
    so that both entry points report the same errors.
    """

    AWS_ENDPOINT: str | None = None
    AWS_REGION: str | None = None
    AWS_ACCESS_KEY_ID: str | None = None
    AWS_SECRET_ACCESS_KEY: str | None = None
    AWS_PART_SIZE: str | None = None
    AWS_MAX_CONCURRENCY: str | None = None

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")


def create_storage_config(values: Mapping[str, str]) -> StorageConfig:
    """Validate ``values`` and build a StorageConfig.

    Unknown keys are ignored, so a whole ``os.environ`` can be passed in.

    Raises:
        pydantic.ValidationError: listing every missing or malformed key.
    """
    return StorageEnv.model_validate(dict(values)).to_config()


def load_storage_config() -> StorageConfig:
    """Build a StorageConfig from the environment (and ``.env`` if present)."""
    settings = StorageSettings()
    return create_storage_config(settings.model_dump(exclude_none=True))


__all__ = [
    "Credentials",
    "StorageConfig",
    "StorageEnv",
    "StorageSettings",
    "create_storage_config",
    "load_storage_config",
]
