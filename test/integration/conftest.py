from collections.abc import Generator
from os import environ

from moto import mock_aws
from pytest import fixture

from dynaquery.config import ProviderConfig
from dynaquery.provider import DynamoProvider
from dynaquery.tables import Table


@fixture(scope="session", autouse=True)
def aws_credentials() -> None:
    environ["AWS_ACCESS_KEY_ID"] = "testing"
    environ["AWS_SECRET_ACCESS_KEY"] = "testing"  # noqa: S105
    environ["AWS_SECURITY_TOKEN"] = "testing"  # noqa: S105
    environ["AWS_SESSION_TOKEN"] = "testing"  # noqa: S105
    environ["AWS_DEFAULT_REGION"] = "us-east-1"


@fixture
def provider() -> Generator[DynamoProvider, None, None]:
    """A started provider talking to moto's in-memory DynamoDB."""
    with mock_aws():
        with DynamoProvider(ProviderConfig(region="us-east-1")) as provider:
            yield provider


@fixture
def orders_provider(
    provider: DynamoProvider,
    orders_table: Table,
) -> Generator[DynamoProvider, None, None]:
    """A provider with the orders table created."""
    provider.create_table(orders_table)

    yield provider

    provider.delete_table(orders_table)
