from .config import CheckConfig
from .schema import CallResult, CallStatus, LookupResult, LookupStatus, TrailAttributes, RoleAttributes
from .connection import AwsConnection
from .cloudtrail_trail import CloudTrailTrail
from .iam_role import IamRole

__all__ = [
    'CheckConfig', 'CallResult', 'CallStatus', 'LookupResult', 'LookupStatus',
    'TrailAttributes', 'RoleAttributes', 'AwsConnection', 'CloudTrailTrail', 'IamRole',
]
