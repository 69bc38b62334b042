"""Reality Data API client configuration.

Options can be built in code, loaded from YAML, or left at their defaults,
which target the public production endpoint. The ``IMJS_URL_PREFIX``
environment variable (e.g. ``"qa-"``) selects another deployment by prefixing
the API hostname.
"""

import enum
import os
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

import yaml
from pydantic import BaseModel, Field, field_validator


DEFAULT_BASE_URL = "https://api.bentley.com/realitydata"
URL_PREFIX_ENV = "IMJS_URL_PREFIX"


class ApiVersion(str, enum.Enum):
    """Reality Data API version, negotiated through the Accept media type."""
    V1 = "v1"


class RealityDataClientOptions(BaseModel):
    """Connection options for RealityDataAccessClient."""

    base_url: str = DEFAULT_BASE_URL
    version: ApiVersion = ApiVersion.V1
    url_prefix: Optional[str] = Field(default_factory=lambda: os.environ.get(URL_PREFIX_ENV) or None)
    timeout: float = 30.0  # seconds, applied to the owned httpx client

    @field_validator('base_url')
    def validate_base_url(cls, v):
        parts = urlsplit(v)
        if parts.scheme not in {'http', 'https'} or not parts.netloc:
            raise ValueError(f"base_url must be an absolute http(s) URL, got {v!r}")
        return v.rstrip('/')

    @field_validator('timeout')
    def validate_timeout(cls, v):
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    def resolved_base_url(self) -> str:
        """Base URL with the deployment prefix applied to the hostname."""
        if not self.url_prefix:
            return self.base_url
        parts = urlsplit(self.base_url)
        return urlunsplit(
            (parts.scheme, self.url_prefix + parts.netloc, parts.path, parts.query, parts.fragment)
        )

    @property
    def accept_media_type(self) -> str:
        return f"application/vnd.bentley.{self.version.value}+json"

    @classmethod
    def from_yaml(cls, path: Path) -> 'RealityDataClientOptions':
        """Load from a specific YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    @classmethod
    def from_yaml_string(cls, yaml_str: str) -> 'RealityDataClientOptions':
        """Load from YAML string."""
        data = yaml.safe_load(yaml_str) or {}
        return cls(**data)

    def to_yaml_string(self) -> str:
        """Export to YAML string."""
        data = self.model_dump(mode="json", exclude_none=True)
        return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)


__all__ = [
    "ApiVersion",
    "RealityDataClientOptions",
    "DEFAULT_BASE_URL",
    "URL_PREFIX_ENV",
]
