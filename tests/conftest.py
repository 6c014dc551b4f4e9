import os

import pytest

from resource_checks.connectors import AwsConnection

TEST_ENVS = {
    'AWS_REGION': 'us-east-1',
    'AWS_DEFAULT_REGION': 'us-east-1',
    'AWS_ACCESS_KEY_ID': 'testing',
    'AWS_SECRET_ACCESS_KEY': 'testing',
    'AWS_SECURITY_TOKEN': 'testing',
    'AWS_SESSION_TOKEN': 'testing',
    'CHECKS_DEBUG': 'false',
}


def pytest_configure(config):
    os.environ.update(TEST_ENVS)
    os.environ.pop('AWS_ENDPOINT_URL', None)


@pytest.fixture
def connection() -> AwsConnection:
    return AwsConnection()
