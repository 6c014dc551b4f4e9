"""
CloudTrail trail checks against stubbed CloudTrail responses.
"""
from datetime import datetime, timedelta, timezone

import pytest

from resource_checks.connectors import (
    AmbiguousMatchError,
    AwsConnection,
    CloudTrailTrail,
    ConfigurationError,
    ProviderError,
)

from .commons import (
    KMS_KEY_ARN,
    LOG_GROUP_ARN,
    TRAIL_NAME,
    describe_trails,
    event_selectors,
    not_found,
    trail_record,
    trail_status,
)

ALL_MGMT = {'ReadWriteType': 'All', 'IncludeManagementEvents': True}
READ_ONLY_MGMT = {'ReadWriteType': 'ReadOnly', 'IncludeManagementEvents': True}
ALL_NO_MGMT = {'ReadWriteType': 'All', 'IncludeManagementEvents': False}


def build(*stubs, record=None):
    """Trail backed by a stubbed connection; returns (trail, stubber)"""
    connection = AwsConnection()
    stubber = connection.stub('cloudtrail', [describe_trails(record or trail_record()), *stubs])
    return CloudTrailTrail(TRAIL_NAME, connection=connection), stubber


def build_missing(*stubs):
    connection = AwsConnection()
    stubber = connection.stub('cloudtrail', [describe_trails(), *stubs])
    return CloudTrailTrail(TRAIL_NAME, connection=connection), stubber


# --------------------------------------------------------- Construction
class TestConstruction:
    def test_bare_string_is_trail_name(self):
        trail, _ = build()
        assert trail.trail_name == TRAIL_NAME
        assert str(trail) == f"CloudTrail {TRAIL_NAME}"

    def test_options_mapping_with_stub_data(self):
        trail = CloudTrailTrail(
            {'trail_name': TRAIL_NAME},
            client_args={'region_name': 'eu-west-1'},
            stub_data=[describe_trails(trail_record())],
        )
        assert trail.exists
        assert trail.connection.client_args['region_name'] == 'eu-west-1'

    def test_keyword_options(self):
        trail = CloudTrailTrail(trail_name=TRAIL_NAME, stub_data=[describe_trails(trail_record())])
        assert trail.exists

    @pytest.mark.parametrize('opts', [None, {}, {'trail_name': ''}, {'trail_name': '   '}, {'trail_name': None}])
    def test_missing_trail_name_is_configuration_error(self, opts):
        with pytest.raises(ConfigurationError):
            CloudTrailTrail(opts)

    def test_unknown_option_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            CloudTrailTrail(trail_name=TRAIL_NAME, region='us-east-1')

    def test_configuration_error_issues_no_call(self):
        connection = AwsConnection()
        stubber = connection.stub('cloudtrail', [describe_trails(trail_record())])
        with pytest.raises(ConfigurationError):
            CloudTrailTrail(trail_name='', connection=connection)
        # describe_trails is still queued
        with pytest.raises(AssertionError):
            stubber.assert_no_pending_responses()

    def test_connection_with_client_args_is_configuration_error(self):
        connection = AwsConnection()
        stubber = connection.stub('cloudtrail', [describe_trails(trail_record())])
        with pytest.raises(ConfigurationError):
            CloudTrailTrail(TRAIL_NAME, connection=connection, client_args={'region_name': 'eu-west-1'})
        # describe_trails is still queued
        with pytest.raises(AssertionError):
            stubber.assert_no_pending_responses()

    def test_lookup_is_a_single_call(self):
        _, stubber = build()
        stubber.assert_no_pending_responses()

    def test_more_than_one_match_is_ambiguous(self):
        connection = AwsConnection()
        connection.stub('cloudtrail', [describe_trails(trail_record(), trail_record(Name='other-trail'))])
        with pytest.raises(AmbiguousMatchError) as exc:
            CloudTrailTrail(TRAIL_NAME, connection=connection)
        assert exc.value.operation == 'describe_trails'

    def test_throttling_on_lookup_raises_provider_error(self):
        connection = AwsConnection()
        connection.stub('cloudtrail', [{'method': 'describe_trails', 'error': 'ThrottlingException'}])
        with pytest.raises(ProviderError) as exc:
            CloudTrailTrail(TRAIL_NAME, connection=connection)
        assert exc.value.code == 'ThrottlingException'
        assert exc.value.service == 'cloudtrail'

    def test_trail_not_found_exception_on_lookup_means_missing(self):
        connection = AwsConnection()
        connection.stub('cloudtrail', [not_found('describe_trails', 'TrailNotFoundException')])
        trail = CloudTrailTrail(TRAIL_NAME, connection=connection)
        assert trail.exists is False


# --------------------------------------------------------- Projection
class TestAttributes:
    def setup_method(self):
        self.record = trail_record()
        self.trail, _ = build(record=self.record)

    def test_exists(self):
        assert self.trail.exists
        assert self.trail.is_existing

    def test_projected_attributes_match_raw_record(self):
        expected = {
            'trail_arn': 'TrailARN',
            'home_region': 'HomeRegion',
            's3_bucket_name': 'S3BucketName',
            's3_key_prefix': 'S3KeyPrefix',
            'include_global_service_events': 'IncludeGlobalServiceEvents',
            'is_multi_region_trail': 'IsMultiRegionTrail',
            'is_organization_trail': 'IsOrganizationTrail',
            'has_custom_event_selectors': 'HasCustomEventSelectors',
            'log_file_validation_enabled': 'LogFileValidationEnabled',
            'cloud_watch_logs_log_group_arn': 'CloudWatchLogsLogGroupArn',
            'cloud_watch_logs_role_arn': 'CloudWatchLogsRoleArn',
            'kms_key_id': 'KmsKeyId',
        }
        for attribute, key in expected.items():
            assert getattr(self.trail, attribute) == self.record[key], attribute

    def test_raw_is_read_only(self):
        assert self.trail.raw['Name'] == TRAIL_NAME
        with pytest.raises(TypeError):
            self.trail.raw['Name'] = 'changed'

    def test_attributes_are_frozen(self):
        with pytest.raises(AttributeError):
            self.trail.attributes.kms_key_id = None

    def test_projection_is_stable(self):
        assert self.trail.kms_key_id == self.trail.kms_key_id == KMS_KEY_ARN

    def test_missing_fields_project_as_none(self):
        trail, _ = build(record={'Name': TRAIL_NAME})
        assert trail.exists
        assert trail.kms_key_id is None
        assert trail.s3_bucket_name is None
        assert trail.log_file_validation_enabled is None

    @pytest.mark.parametrize('value', [True, False, None])
    def test_log_file_validation_aliases_agree(self, value):
        trail, _ = build(record=trail_record(LogFileValidationEnabled=value))
        assert trail.log_file_validation_enabled is value
        assert trail.is_log_file_validation_enabled is value
        assert trail.has_log_file_validation_enabled is value

    def test_multi_region_alias_agrees(self):
        trail, _ = build(record=trail_record(IsMultiRegionTrail=False))
        assert trail.multi_region_trail is trail.is_multi_region_trail is False


# --------------------------------------------------------- Missing trail
class TestMissingTrail:
    def setup_method(self):
        # nothing but the empty describe_trails is stubbed: any further call fails
        self.trail, self.stubber = build_missing()

    def test_does_not_exist(self):
        assert self.trail.exists is False
        assert self.trail.is_existing is False

    def test_attributes_are_none(self):
        for attribute in (
            'trail_arn', 'home_region', 's3_bucket_name', 'is_multi_region_trail',
            'log_file_validation_enabled', 'cloud_watch_logs_log_group_arn',
            'cloud_watch_logs_role_arn', 'kms_key_id', 'multi_region_trail',
            'has_log_file_validation_enabled',
        ):
            assert getattr(self.trail, attribute) is None, attribute

    def test_derived_accessors_are_unknown(self):
        assert self.trail.encrypted is None
        assert self.trail.logging is None
        assert self.trail.delivered_logs_days_ago is None
        assert self.trail.has_event_selector_mgmt_events_rw_type_all is None
        assert self.trail.get_log_group_for_multi_region_active_mgmt_rw_all() is None
        self.stubber.assert_no_pending_responses()


# --------------------------------------------------------- Derived predicates
class TestEncrypted:
    def test_encrypted_with_kms_key(self):
        trail, _ = build()
        assert trail.encrypted is True

    def test_not_encrypted_without_kms_key(self):
        trail, _ = build(record=trail_record(KmsKeyId=None))
        assert trail.encrypted is False


class TestLogging:
    def test_logging(self):
        trail, _ = build(trail_status(is_logging=True))
        assert trail.logging is True

    def test_logging_is_never_cached(self):
        trail, stubber = build(trail_status(is_logging=True), trail_status(is_logging=False))
        assert trail.logging is True
        assert trail.logging is False
        stubber.assert_no_pending_responses()

    def test_trail_deleted_after_lookup_is_unknown(self):
        trail, _ = build(not_found('get_trail_status', 'TrailNotFoundException'))
        assert trail.logging is None

    def test_other_errors_propagate(self):
        trail, _ = build({'method': 'get_trail_status', 'error': 'AccessDeniedException'})
        with pytest.raises(ProviderError) as exc:
            trail.logging
        assert exc.value.code == 'AccessDeniedException'


class TestDeliveredLogsDaysAgo:
    def test_thirty_six_hours_is_one_day(self):
        delivered_at = datetime.now(timezone.utc) - timedelta(hours=36)
        trail, _ = build(trail_status(delivered_at=delivered_at))
        assert trail.delivered_logs_days_ago == 1

    def test_partial_days_are_truncated(self):
        delivered_at = datetime.now(timezone.utc) - timedelta(days=6, hours=23)
        trail, _ = build(trail_status(delivered_at=delivered_at))
        assert trail.delivered_logs_days_ago == 6

    def test_delivery_in_the_future_is_zero_days(self):
        delivered_at = datetime.now(timezone.utc) + timedelta(minutes=5)
        trail, _ = build(trail_status(delivered_at=delivered_at))
        assert trail.delivered_logs_days_ago == 0

    def test_no_delivery_is_unknown(self):
        trail, _ = build(trail_status())
        assert trail.delivered_logs_days_ago is None

    def test_trail_deleted_after_lookup_is_unknown(self):
        trail, _ = build(not_found('get_trail_status', 'TrailNotFoundException'))
        assert trail.delivered_logs_days_ago is None


class TestEventSelectors:
    def test_read_write_all_with_management_events(self):
        trail, _ = build(event_selectors(READ_ONLY_MGMT, ALL_MGMT))
        assert trail.has_event_selector_mgmt_events_rw_type_all is True

    @pytest.mark.parametrize('selectors', [(), (READ_ONLY_MGMT,), (ALL_NO_MGMT,)])
    def test_no_matching_selector(self, selectors):
        trail, _ = build(event_selectors(*selectors))
        assert trail.has_event_selector_mgmt_events_rw_type_all is False

    def test_trail_deleted_after_lookup_is_no_match(self):
        trail, _ = build(not_found('get_event_selectors', 'TrailNotFoundException'))
        assert trail.has_event_selector_mgmt_events_rw_type_all is False


class TestLogGroupForActiveManagementCapture:
    def test_returns_log_group_name(self):
        trail, stubber = build(event_selectors(ALL_MGMT), trail_status(is_logging=True))
        assert trail.get_log_group_for_multi_region_active_mgmt_rw_all() == 'trail-logs'
        stubber.assert_no_pending_responses()

    def test_no_log_group_arn(self):
        trail, _ = build(record=trail_record(CloudWatchLogsLogGroupArn=None))
        assert trail.get_log_group_for_multi_region_active_mgmt_rw_all() is None

    def test_short_arn_skips_event_selector_call(self):
        # get_event_selectors is not stubbed, calling it would raise
        trail, stubber = build(record=trail_record(CloudWatchLogsLogGroupArn='arn:aws:logs:us-east-1'))
        assert trail.get_log_group_for_multi_region_active_mgmt_rw_all() is None
        stubber.assert_no_pending_responses()

    def test_no_matching_selector_skips_status_call(self):
        trail, stubber = build(event_selectors(READ_ONLY_MGMT))
        assert trail.get_log_group_for_multi_region_active_mgmt_rw_all() is None
        stubber.assert_no_pending_responses()

    def test_not_logging(self):
        trail, _ = build(event_selectors(ALL_MGMT), trail_status(is_logging=False))
        assert trail.get_log_group_for_multi_region_active_mgmt_rw_all() is None

    def test_trail_deleted_mid_check(self):
        trail, _ = build(
            event_selectors(ALL_MGMT),
            not_found('get_trail_status', 'TrailNotFoundException'),
        )
        assert trail.get_log_group_for_multi_region_active_mgmt_rw_all() is None


# --------------------------------------------------------- Output
class TestToDict:
    def test_static_view(self):
        trail, stubber = build()
        data = trail.to_dict()
        assert data['exists'] is True
        assert data['encrypted'] is True
        assert data['attributes']['cloud_watch_logs_log_group_arn'] == LOG_GROUP_ARN
        assert 'logging' not in data
        stubber.assert_no_pending_responses()

    def test_live_view(self):
        trail, _ = build(
            trail_status(is_logging=True),
            trail_status(is_logging=True),
            event_selectors(ALL_MGMT),
            event_selectors(ALL_MGMT),
            trail_status(is_logging=True),
        )
        data = trail.to_dict(live=True)
        assert data['logging'] is True
        assert data['delivered_logs_days_ago'] is None
        assert data['has_event_selector_mgmt_events_rw_type_all'] is True
        assert data['log_group_for_multi_region_active_mgmt_rw_all'] == 'trail-logs'
