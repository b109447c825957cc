"""Provider configuration."""

import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from typing_extensions import Self

from dynaquery.exceptions import ConfigurationError

DEFAULT_API_VERSION = "2012-08-10"


class ProviderConfig(BaseModel):
    """Connection settings for a DynamoDB provider.

    Attributes:
        region: The AWS region to connect to.
        endpoint_url: Override the service endpoint (e.g. DynamoDB Local).
        api_version: The DynamoDB API version to request.

    """

    model_config = ConfigDict(frozen=True)

    region: str = Field(min_length=1)
    endpoint_url: str | None = None
    api_version: str = DEFAULT_API_VERSION

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Self:
        """Create a configuration from environment variables.

        Reads AWS_REGION (falling back to AWS_DEFAULT_REGION) and
        DYNAMODB_ENDPOINT_URL.

        Raises:
            ConfigurationError: If no region is configured.

        """
        env = os.environ if environ is None else environ

        region = env.get("AWS_REGION") or env.get("AWS_DEFAULT_REGION")
        if not region:
            raise ConfigurationError(
                "AWS_REGION or AWS_DEFAULT_REGION environment variable is required"
            )

        return cls(
            region=region,
            endpoint_url=env.get("DYNAMODB_ENDPOINT_URL") or None,
        )

    def client_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for creating a boto3/aioboto3 DynamoDB client."""
        kwargs: dict[str, Any] = {
            "region_name": self.region,
            "api_version": self.api_version,
        }
        if self.endpoint_url is not None:
            kwargs["endpoint_url"] = self.endpoint_url
        return kwargs


__all__ = [
    "DEFAULT_API_VERSION",
    "ProviderConfig",
]
