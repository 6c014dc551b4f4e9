"""
IAM Role check
Verifies settings for an individual IAM role
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from resource_checks.connectors.aws.schema import LookupResult, LookupStatus, RoleAttributes
from resource_checks.connectors.base import AwsResourceBase

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


class IamRole(AwsResourceBase):
    """Single IAM role, looked up by role name"""

    name = 'aws_iam_role'
    SERVICE = 'iam'
    LOOKUP_KEY = 'role_name'
    NOT_FOUND_CODES = ('NoSuchEntity',)
    ATTRIBUTES = RoleAttributes

    def lookup(self) -> LookupResult:
        # get_role answers with exactly one Role or NoSuchEntity
        result = self._call('get_role', RoleName=self._key)
        if result.not_found:
            logger.info(f"{self}: role not found")
            return LookupResult(status=LookupStatus.NOT_FOUND)
        role = result.data.get('Role')
        return self._single_match('get_role', [role] if role else [])

    # ========================================================================
    # PROJECTED ATTRIBUTES
    # ========================================================================

    @property
    def role_name(self) -> Optional[str]:
        return self.attributes.role_name

    @property
    def role_id(self) -> Optional[str]:
        return self.attributes.role_id

    @property
    def arn(self) -> Optional[str]:
        return self.attributes.arn

    @property
    def path(self) -> Optional[str]:
        return self.attributes.path

    @property
    def description(self) -> Optional[str]:
        return self.attributes.description

    @property
    def create_date(self) -> Optional[datetime]:
        return self.attributes.create_date

    @property
    def max_session_duration(self) -> Optional[int]:
        return self.attributes.max_session_duration

    @property
    def assume_role_policy_document(self) -> Optional[Any]:
        return self.attributes.assume_role_policy_document

    @property
    def permissions_boundary_type(self) -> Optional[str]:
        return self.attributes.permissions_boundary_type

    @property
    def permissions_boundary_arn(self) -> Optional[str]:
        return self.attributes.permissions_boundary_arn

    @property
    def role_last_used_date(self) -> Optional[datetime]:
        return self.attributes.role_last_used_date

    @property
    def role_last_used_region(self) -> Optional[str]:
        return self.attributes.role_last_used_region

    @property
    def tags(self) -> Optional[Mapping[str, str]]:
        return self.attributes.tags

    # ========================================================================
    # ALIASES
    # ========================================================================

    @property
    def has_permissions_boundary(self) -> Optional[bool]:
        if not self.exists:
            return None
        return self.permissions_boundary_arn is not None

    @property
    def is_permissions_boundary_set(self) -> Optional[bool]:
        return self.has_permissions_boundary

    # ========================================================================
    # DERIVED
    # ========================================================================

    @property
    def days_since_last_used(self) -> Optional[int]:
        """Whole days since the role was last assumed, None if never used"""
        last_used = self.role_last_used_date
        if last_used is None:
            return None
        if last_used.tzinfo is None:
            last_used = last_used.replace(tzinfo=timezone.utc)
        elapsed = datetime.now(timezone.utc) - last_used
        # clock skew can put the timestamp slightly in the future
        return max(0, int(elapsed.total_seconds() // SECONDS_PER_DAY))

    @property
    def inline_policy_names(self) -> Optional[List[str]]:
        """Live list_role_policies, all pages"""
        if not self.exists:
            return None
        result = self._paginate('list_role_policies', 'PolicyNames', RoleName=self._key)
        if result.not_found:
            return None
        return result.data['PolicyNames']

    @property
    def attached_policy_arns(self) -> Optional[List[str]]:
        """Live list_attached_role_policies, all pages"""
        if not self.exists:
            return None
        result = self._paginate('list_attached_role_policies', 'AttachedPolicies', RoleName=self._key)
        if result.not_found:
            return None
        return [policy['PolicyArn'] for policy in result.data['AttachedPolicies']]

    def has_attached_policy(self, policy_arn: str) -> Optional[bool]:
        arns = self.attached_policy_arns
        if arns is None:
            return None
        return policy_arn in arns

    # ========================================================================
    # OUTPUT
    # ========================================================================

    def to_dict(self, live: bool = False) -> Dict[str, Any]:
        data = {
            'resource': self.name,
            'role_name': self._key,
            'exists': self.exists,
            'attributes': self.attributes.to_dict(),
            'has_permissions_boundary': self.has_permissions_boundary,
            'days_since_last_used': self.days_since_last_used,
        }
        if live:
            data['inline_policy_names'] = self.inline_policy_names
            data['attached_policy_arns'] = self.attached_policy_arns
        return data

    def __str__(self):
        return f"IAM Role {self._key}"
