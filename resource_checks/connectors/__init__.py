from .errors import ResourceCheckError, ConfigurationError, ProviderError, AmbiguousMatchError
from .aws import AwsConnection, CloudTrailTrail, IamRole
from .base import AwsResourceBase

__all__ = [
    'ResourceCheckError', 'ConfigurationError', 'ProviderError', 'AmbiguousMatchError',
    'AwsConnection', 'AwsResourceBase', 'CloudTrailTrail', 'IamRole',
]
