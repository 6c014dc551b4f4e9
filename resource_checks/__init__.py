"""Read-only AWS resource checks for compliance assertions"""

from .connectors import (
    AwsConnection,
    CloudTrailTrail,
    IamRole,
    ResourceCheckError,
    ConfigurationError,
    ProviderError,
    AmbiguousMatchError,
)

__version__ = '1.0.0'

__all__ = [
    'AwsConnection', 'CloudTrailTrail', 'IamRole', 'ResourceCheckError',
    'ConfigurationError', 'ProviderError', 'AmbiguousMatchError',
]
