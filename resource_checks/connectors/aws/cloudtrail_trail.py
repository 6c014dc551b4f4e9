"""
CloudTrail Trail check
Verifies settings for an individual AWS CloudTrail trail

    trail = CloudTrailTrail('main-trail')
    assert trail.exists
    assert trail.encrypted
    assert trail.log_file_validation_enabled
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from resource_checks.connectors.aws.schema import LookupResult, LookupStatus, TrailAttributes
from resource_checks.connectors.base import AwsResourceBase

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60

# arn:aws:logs:<region>:<account>:log-group:<name>:*
LOG_GROUP_ARN_MIN_SEGMENTS = 6
LOG_GROUP_NAME_SEGMENT = 6


class CloudTrailTrail(AwsResourceBase):
    """Single CloudTrail trail, looked up by name or ARN"""

    name = 'aws_cloudtrail_trail'
    SERVICE = 'cloudtrail'
    LOOKUP_KEY = 'trail_name'
    NOT_FOUND_CODES = ('TrailNotFoundException',)
    ATTRIBUTES = TrailAttributes

    def lookup(self) -> LookupResult:
        result = self._call('describe_trails', trailNameList=[self._key])
        if result.not_found:
            return LookupResult(status=LookupStatus.NOT_FOUND)
        return self._single_match('describe_trails', result.data.get('trailList', []))

    # ========================================================================
    # PROJECTED ATTRIBUTES
    # ========================================================================

    @property
    def trail_name(self) -> str:
        """The lookup key this check was built with"""
        return self._key

    @property
    def trail_arn(self) -> Optional[str]:
        return self.attributes.trail_arn

    @property
    def home_region(self) -> Optional[str]:
        return self.attributes.home_region

    @property
    def s3_bucket_name(self) -> Optional[str]:
        return self.attributes.s3_bucket_name

    @property
    def s3_key_prefix(self) -> Optional[str]:
        return self.attributes.s3_key_prefix

    @property
    def sns_topic_arn(self) -> Optional[str]:
        return self.attributes.sns_topic_arn

    @property
    def include_global_service_events(self) -> Optional[bool]:
        return self.attributes.include_global_service_events

    @property
    def is_multi_region_trail(self) -> Optional[bool]:
        return self.attributes.is_multi_region_trail

    @property
    def is_organization_trail(self) -> Optional[bool]:
        return self.attributes.is_organization_trail

    @property
    def has_custom_event_selectors(self) -> Optional[bool]:
        return self.attributes.has_custom_event_selectors

    @property
    def log_file_validation_enabled(self) -> Optional[bool]:
        return self.attributes.log_file_validation_enabled

    @property
    def cloud_watch_logs_log_group_arn(self) -> Optional[str]:
        return self.attributes.cloud_watch_logs_log_group_arn

    @property
    def cloud_watch_logs_role_arn(self) -> Optional[str]:
        return self.attributes.cloud_watch_logs_role_arn

    @property
    def kms_key_id(self) -> Optional[str]:
        return self.attributes.kms_key_id

    # ========================================================================
    # ALIASES
    # ========================================================================

    @property
    def multi_region_trail(self) -> Optional[bool]:
        return self.is_multi_region_trail

    @property
    def is_log_file_validation_enabled(self) -> Optional[bool]:
        return self.log_file_validation_enabled

    @property
    def has_log_file_validation_enabled(self) -> Optional[bool]:
        return self.log_file_validation_enabled

    # ========================================================================
    # DERIVED PREDICATES
    # ========================================================================

    @property
    def encrypted(self) -> Optional[bool]:
        """True when SSE-KMS is configured; no extra call"""
        if not self.exists:
            return None
        return self.kms_key_id is not None

    def _trail_status(self) -> Optional[Dict[str, Any]]:
        """Live get_trail_status; None if the trail vanished since lookup"""
        if not self.exists:
            return None
        result = self._call('get_trail_status', Name=self._key)
        if result.not_found:
            return None
        return result.data

    @property
    def logging(self) -> Optional[bool]:
        """Is the trail currently logging (live, never cached)"""
        status = self._trail_status()
        if status is None:
            return None
        return status.get('IsLogging')

    @property
    def delivered_logs_days_ago(self) -> Optional[int]:
        """Whole days since the last CloudWatch Logs delivery, floored"""
        status = self._trail_status()
        if status is None:
            return None

        delivered_at = status.get('LatestCloudWatchLogsDeliveryTime')
        if delivered_at is None:
            return None
        if delivered_at.tzinfo is None:
            delivered_at = delivered_at.replace(tzinfo=timezone.utc)

        elapsed = datetime.now(timezone.utc) - delivered_at
        # clock skew can put the timestamp slightly in the future
        return max(0, int(elapsed.total_seconds() // SECONDS_PER_DAY))

    @property
    def has_event_selector_mgmt_events_rw_type_all(self) -> Optional[bool]:
        """At least one event selector captures all read/write management events"""
        if not self.exists:
            return None

        result = self._call('get_event_selectors', TrailName=self._key)
        if result.not_found:
            return False

        for selector in result.data.get('EventSelectors', []):
            if selector.get('ReadWriteType') == 'All' and selector.get('IncludeManagementEvents') is True:
                return True
        return False

    def get_log_group_for_multi_region_active_mgmt_rw_all(self) -> Optional[str]:
        """
        Log group name when the trail is actively logging every read/write
        management event to CloudWatch Logs, otherwise None

        Gates run in order and stop at the first failure:
        exists -> log group ARN shape -> event selectors -> live status
        """
        if not self.exists:
            return None

        arn = self.cloud_watch_logs_log_group_arn
        if not arn:
            return None
        segments = arn.split(':')
        if len(segments) < LOG_GROUP_ARN_MIN_SEGMENTS:
            logger.debug(f"{self}: malformed log group ARN {arn}")
            return None

        if not self.has_event_selector_mgmt_events_rw_type_all:
            return None
        if self.logging is not True:
            return None

        if len(segments) <= LOG_GROUP_NAME_SEGMENT:
            return None
        return segments[LOG_GROUP_NAME_SEGMENT]

    # ========================================================================
    # OUTPUT
    # ========================================================================

    def to_dict(self, live: bool = False) -> Dict[str, Any]:
        data = {
            'resource': self.name,
            'trail_name': self.trail_name,
            'exists': self.exists,
            'attributes': self.attributes.to_dict(),
            'encrypted': self.encrypted,
        }
        if live:
            data['logging'] = self.logging
            data['delivered_logs_days_ago'] = self.delivered_logs_days_ago
            data['has_event_selector_mgmt_events_rw_type_all'] = self.has_event_selector_mgmt_events_rw_type_all
            data['log_group_for_multi_region_active_mgmt_rw_all'] = \
                self.get_log_group_for_multi_region_active_mgmt_rw_all()
        return data

    def __str__(self):
        return f"CloudTrail {self._key}"
