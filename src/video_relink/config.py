import os

from pydantic import BaseModel, Field, ValidationError, field_validator

from video_relink.exceptions import ConfigurationError

PRODUCTION_API_HOST = "https://api.sanity.io"
STAGING_API_HOST = "https://api.sanity.work"
DEFAULT_DATASET = "production"


def _default_api_version() -> str:
    return os.getenv("SANITY_API_VERSION", "vX")


class StoreSettings(BaseModel):
    """Connection settings for the hosted content store."""

    project_id: str = Field(min_length=1)
    token: str = Field(min_length=1)
    dataset: str = Field(default=DEFAULT_DATASET, min_length=1)
    api_version: str = Field(default_factory=_default_api_version)
    prod: bool = False
    timeout: float | None = None

    @field_validator("api_version")
    @classmethod
    def _prefix_version(cls, value: str) -> str:
        value = value.strip()
        return value if value.startswith("v") else f"v{value}"

    @property
    def api_host(self) -> str:
        return PRODUCTION_API_HOST if self.prod else STAGING_API_HOST

    @property
    def project_host(self) -> str:
        """Project-scoped host, e.g. ``https://abc123.api.sanity.io``."""
        scheme, _, host = self.api_host.partition("://")
        return f"{scheme}://{self.project_id}.{host}"


def build_settings(**values: object) -> StoreSettings:
    """Validate raw option values into ``StoreSettings``.

    Raises ``ConfigurationError`` with the pydantic message on invalid input.
    """
    try:
        return StoreSettings.model_validate(values)
    except ValidationError as exc:
        raise ConfigurationError(str(exc)) from exc
