"""
Resource Check Schema
Result types for provider calls and the projected attribute records
for every inspected AWS resource (CloudTrail trails, IAM roles)
"""

from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Optional, Dict, Any, Iterable, Mapping
from datetime import datetime
from enum import Enum

from resource_checks.connectors.errors import ProviderError

# ============================================================================
# ENUMS - Call / Lookup classification
# ============================================================================

class CallStatus(str, Enum):
    """How a single provider call ended"""
    SUCCESS = "success"
    NOT_FOUND = "not_found"
    FAILED = "failed"

class LookupStatus(str, Enum):
    """What the existence-determining call found"""
    FOUND = "found"
    NOT_FOUND = "not_found"

# ============================================================================
# RESULTS - Explicit outcome of a provider call
# ============================================================================

@dataclass(frozen=True)
class CallResult:
    """
    Outcome of one SDK call

    Example:
        CallResult(status=CallStatus.SUCCESS, data={'IsLogging': True, ...})
        CallResult(status=CallStatus.NOT_FOUND, error=ProviderError(...))
    """

    status: CallStatus
    """success, not_found or failed"""

    data: Dict[str, Any] = field(default_factory=dict)
    """Response body as returned by boto3 (ResponseMetadata included)"""

    error: Optional[ProviderError] = None
    """Normalized error for not_found / failed results"""

    @property
    def ok(self) -> bool:
        return self.status == CallStatus.SUCCESS

    @property
    def not_found(self) -> bool:
        return self.status == CallStatus.NOT_FOUND

    @property
    def failed(self) -> bool:
        return self.status == CallStatus.FAILED

    def raise_for_failure(self) -> 'CallResult':
        """Raise the normalized error for failed calls, pass everything else through"""
        if self.failed:
            raise self.error
        return self

@dataclass(frozen=True)
class LookupResult:
    """Existence and raw record captured at construction"""

    status: LookupStatus
    record: Dict[str, Any] = field(default_factory=dict)

    @property
    def found(self) -> bool:
        return self.status == LookupStatus.FOUND

# ============================================================================
# HELPERS
# ============================================================================

def freeze(value: Any) -> Any:
    """Read-only copy of a provider value: dicts become mapping proxies, lists tuples"""
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    return value

def _serialize(value: Any) -> Any:
    """Make a projected value JSON friendly"""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {k: _serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_serialize(v) for v in value]
    return value

def _to_dict(record: Any) -> Dict[str, Any]:
    return {f.name: _serialize(getattr(record, f.name)) for f in fields(record)}

def _tags_to_dict(tags: Optional[Iterable[Mapping[str, str]]]) -> Optional[Mapping[str, str]]:
    """[{'Key': 'env', 'Value': 'prod'}] -> {'env': 'prod'}"""
    if tags is None:
        return None
    return MappingProxyType({tag['Key']: tag.get('Value') for tag in tags})

# ============================================================================
# CLOUDTRAIL TRAIL
# ============================================================================

@dataclass(frozen=True)
class TrailAttributes:
    """
    Projected view of a describe_trails record

    Every field is None when the trail does not exist or when the
    record simply does not carry the key.
    """

    trail_name: Optional[str] = None
    """Name of the trail as reported by CloudTrail"""

    trail_arn: Optional[str] = None
    home_region: Optional[str] = None
    s3_bucket_name: Optional[str] = None
    s3_key_prefix: Optional[str] = None
    sns_topic_arn: Optional[str] = None
    include_global_service_events: Optional[bool] = None
    is_multi_region_trail: Optional[bool] = None
    is_organization_trail: Optional[bool] = None
    log_file_validation_enabled: Optional[bool] = None
    has_custom_event_selectors: Optional[bool] = None

    cloud_watch_logs_log_group_arn: Optional[str] = None
    """e.g. arn:aws:logs:us-east-1:123456789012:log-group:trail-logs:*"""

    cloud_watch_logs_role_arn: Optional[str] = None

    kms_key_id: Optional[str] = None
    """KMS key ARN, only present when SSE-KMS is configured"""

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'TrailAttributes':
        return cls(
            trail_name=record.get('Name'),
            trail_arn=record.get('TrailARN'),
            home_region=record.get('HomeRegion'),
            s3_bucket_name=record.get('S3BucketName'),
            s3_key_prefix=record.get('S3KeyPrefix'),
            sns_topic_arn=record.get('SnsTopicARN'),
            include_global_service_events=record.get('IncludeGlobalServiceEvents'),
            is_multi_region_trail=record.get('IsMultiRegionTrail'),
            is_organization_trail=record.get('IsOrganizationTrail'),
            log_file_validation_enabled=record.get('LogFileValidationEnabled'),
            has_custom_event_selectors=record.get('HasCustomEventSelectors'),
            cloud_watch_logs_log_group_arn=record.get('CloudWatchLogsLogGroupArn'),
            cloud_watch_logs_role_arn=record.get('CloudWatchLogsRoleArn'),
            kms_key_id=record.get('KmsKeyId'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _to_dict(self)

# ============================================================================
# IAM ROLE
# ============================================================================

@dataclass(frozen=True)
class RoleAttributes:
    """Projected view of a get_role record"""

    role_name: Optional[str] = None
    role_id: Optional[str] = None
    arn: Optional[str] = None
    path: Optional[str] = None
    description: Optional[str] = None
    create_date: Optional[datetime] = None
    max_session_duration: Optional[int] = None

    assume_role_policy_document: Optional[Any] = None
    """Trust policy; boto3 hands it back already decoded"""

    permissions_boundary_type: Optional[str] = None
    permissions_boundary_arn: Optional[str] = None
    role_last_used_date: Optional[datetime] = None
    role_last_used_region: Optional[str] = None
    tags: Optional[Mapping[str, str]] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'RoleAttributes':
        boundary = record.get('PermissionsBoundary') or {}
        last_used = record.get('RoleLastUsed') or {}
        return cls(
            role_name=record.get('RoleName'),
            role_id=record.get('RoleId'),
            arn=record.get('Arn'),
            path=record.get('Path'),
            description=record.get('Description'),
            create_date=record.get('CreateDate'),
            max_session_duration=record.get('MaxSessionDuration'),
            assume_role_policy_document=freeze(record.get('AssumeRolePolicyDocument')),
            permissions_boundary_type=boundary.get('PermissionsBoundaryType'),
            permissions_boundary_arn=boundary.get('PermissionsBoundaryArn'),
            role_last_used_date=last_used.get('LastUsedDate'),
            role_last_used_region=last_used.get('Region'),
            tags=_tags_to_dict(record.get('Tags')),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _to_dict(self)
