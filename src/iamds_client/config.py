"""
IAMDS client configuration.

Provides environment presets and the settings the ``ApiClient`` reads at
construction time.
"""

import os
import platform
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Environment(str, Enum):
    sandbox = "sandbox"
    production = "production"
    qa = "qa"
    other = "other"


# Base URLs for different environments
BASE_URLS = {
    Environment.production: "https://api.avalara.com",
    Environment.sandbox: "https://api.sbx.avalara.com",
    Environment.qa: "https://api.qa.avalara.com",
}

# OpenID Connect issuers used to discover the OAuth2 token endpoint
IDENTITY_URLS = {
    Environment.production: "https://identity.avalara.com",
    Environment.sandbox: "https://ai-sbx.avlr.sh",
    Environment.qa: "https://ai-awsfqa.avlr.sh",
}

CLIENT_NAME = "PythonRestClient"


class Configuration(BaseModel):
    """
    Settings shared by every call made through one ``ApiClient``.

    Credentials are picked in this order: OAuth2 client credentials
    (``client_id``), basic auth (``username``/``password``), bearer
    ``access_token``, raw ``api_key``.
    """

    environment: Environment = Environment.sandbox
    base_url: Optional[str] = Field(None, description="Overrides the environment preset")
    identity_url: Optional[str] = None

    app_name: str = "iamds-client"
    app_version: str = "1.0"
    machine_name: str = Field(default_factory=platform.node)

    timeout: float = Field(30.0, gt=0, description="Request timeout in seconds")
    default_headers: Dict[str, str] = Field(default_factory=dict)

    access_token: Optional[str] = None
    api_key: Optional[str] = None
    api_key_prefix: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    token_url: Optional[str] = None
    required_scopes: Optional[str] = Field(
        None, description="Overrides the scopes declared by each operation"
    )

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _resolve_urls(self) -> "Configuration":
        if self.environment == Environment.other:
            if not self.base_url:
                raise ValueError("base_url is required when environment is 'other'")
        if self.base_url:
            self.base_url = self.base_url.rstrip("/")
        else:
            self.base_url = BASE_URLS[self.environment]
        if self.identity_url is None and self.environment in IDENTITY_URLS:
            self.identity_url = IDENTITY_URLS[self.environment]
        return self

    def client_header(self, sdk_version: str) -> str:
        """Value of the ``X-Avalara-Client`` identification header."""
        return f"{self.app_name}; {self.app_version}; {CLIENT_NAME}; {sdk_version}; {self.machine_name}"

    @classmethod
    def from_env(cls, prefix: str = "IAMDS_", **overrides) -> "Configuration":
        """
        Build a configuration from environment variables.

        Each field maps to ``{prefix}{FIELD_NAME}``, e.g. ``IAMDS_CLIENT_ID``.
        Explicit keyword overrides win over the environment.

        Example:
            >>> os.environ["IAMDS_ENVIRONMENT"] = "production"
            >>> Configuration.from_env().base_url
            'https://api.avalara.com'
        """
        values = {}
        for name in cls.model_fields:
            if name == "default_headers":
                continue
            raw = os.environ.get(f"{prefix}{name.upper()}")
            if raw:
                values[name] = raw
        values.update(overrides)
        return cls(**values)


__all__ = ["Configuration", "Environment", "BASE_URLS", "IDENTITY_URLS"]
