"""Tests for ProviderConfig."""

import pydantic
import pytest

from dynaquery.config import DEFAULT_API_VERSION, ProviderConfig
from dynaquery.exceptions import ConfigurationError


class TestProviderConfigFromEnv:
    """Test reading configuration from the environment."""

    def test_region_from_aws_region(self) -> None:
        config = ProviderConfig.from_env({"AWS_REGION": "eu-west-1", "AWS_DEFAULT_REGION": "us-east-1"})

        assert config.region == "eu-west-1"
        assert config.endpoint_url is None

    def test_region_falls_back_to_default_region(self) -> None:
        config = ProviderConfig.from_env({"AWS_DEFAULT_REGION": "us-east-2"})

        assert config.region == "us-east-2"

    def test_endpoint_url(self) -> None:
        config = ProviderConfig.from_env(
            {"AWS_REGION": "us-east-1", "DYNAMODB_ENDPOINT_URL": "http://localhost:8000"}
        )

        assert config.endpoint_url == "http://localhost:8000"

    def test_missing_region_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="AWS_REGION"):
            ProviderConfig.from_env({"DYNAMODB_ENDPOINT_URL": "http://localhost:8000"})

    def test_reads_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AWS_REGION", "ap-south-1")

        assert ProviderConfig.from_env().region == "ap-south-1"


class TestProviderConfigClientKwargs:
    """Test client keyword arguments."""

    def test_without_endpoint(self) -> None:
        config = ProviderConfig(region="us-east-1")

        assert config.client_kwargs() == {
            "region_name": "us-east-1",
            "api_version": DEFAULT_API_VERSION,
        }

    def test_with_endpoint(self) -> None:
        config = ProviderConfig(region="us-east-1", endpoint_url="http://localhost:8000")

        assert config.client_kwargs()["endpoint_url"] == "http://localhost:8000"

    def test_empty_region_is_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            ProviderConfig(region="")
