from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Union
import logging

from resource_checks.connectors.aws.connection import AwsConnection
from resource_checks.connectors.aws.schema import CallResult, LookupResult, LookupStatus, freeze
from resource_checks.connectors.errors import AmbiguousMatchError, ConfigurationError

logger = logging.getLogger(__name__)

RECOGNIZED_OPTIONS = ('client_args', 'stub_data', 'connection')


class AwsResourceBase(ABC):
    """
    Read-only inspection of a single AWS entity

    Subclasses set SERVICE, LOOKUP_KEY and NOT_FOUND_CODES and implement
    lookup(); construction runs that lookup exactly once.
    """

    name: str = 'aws_resource'
    SERVICE: str = ''
    LOOKUP_KEY: str = ''
    NOT_FOUND_CODES: tuple = ()
    ATTRIBUTES: type = None

    def __init__(self, opts: Union[str, Mapping[str, Any], None] = None, **kwargs):
        # Bare string is the lookup key
        if isinstance(opts, str):
            opts = {self.LOOKUP_KEY: opts}
        elif opts is not None and not isinstance(opts, Mapping):
            raise ConfigurationError(f"{type(self).__name__} expects a {self.LOOKUP_KEY} string or an options mapping")
        opts = {**(opts or {}), **kwargs}

        self.validate_parameters(opts, required=[self.LOOKUP_KEY])
        self._key: str = opts[self.LOOKUP_KEY]

        if opts.get('connection') is not None and opts.get('client_args') is not None:
            raise ConfigurationError(
                f"{type(self).__name__}: pass client_args to the AwsConnection, not alongside it"
            )
        self._connection = opts.get('connection') or AwsConnection(client_args=opts.get('client_args'))
        if opts.get('stub_data') is not None:
            self._connection.stub(self.SERVICE, opts['stub_data'])

        result = self.lookup()
        self._exists = result.found
        self._raw = freeze(result.record)
        self._attributes = self.ATTRIBUTES.from_record(self._raw)
        logger.debug(f"{self}: exists={self._exists}")

    # ========================================================================
    # PARAMETERS
    # ========================================================================

    def validate_parameters(self, opts: Mapping[str, Any], required: List[str]):
        """Fail fast on missing keys or unknown options, before any call"""
        allowed = set(required) | set(RECOGNIZED_OPTIONS)
        unknown = sorted(set(opts) - allowed)
        if unknown:
            raise ConfigurationError(f"{type(self).__name__}: unrecognized options {unknown}")
        for key in required:
            value = opts.get(key)
            if not isinstance(value, str) or not value.strip():
                raise ConfigurationError(f"{type(self).__name__}: '{key}' must be provided")

    # ========================================================================
    # LOOKUP
    # ========================================================================

    @abstractmethod
    def lookup(self) -> LookupResult:
        """Issue the single existence-determining call"""
        pass

    def _single_match(self, operation: str, records: List[Dict[str, Any]]) -> LookupResult:
        """Zero records -> not found, one -> found, more -> AmbiguousMatchError"""
        if not records:
            return LookupResult(status=LookupStatus.NOT_FOUND)
        if len(records) > 1:
            raise AmbiguousMatchError(
                message=f"'{self._key}' matched {len(records)} entities",
                service=self.SERVICE,
                operation=operation,
                code='AmbiguousMatch',
            )
        return LookupResult(status=LookupStatus.FOUND, record=records[0])

    def _call(self, operation: str, **params) -> CallResult:
        """Provider call on this resource's service; failures raise, not-found does not"""
        return self._connection.call(
            self.SERVICE, operation, not_found_codes=self.NOT_FOUND_CODES, **params
        ).raise_for_failure()

    def _paginate(self, operation: str, result_key: str, **params) -> CallResult:
        return self._connection.paginate(
            self.SERVICE, operation, result_key, not_found_codes=self.NOT_FOUND_CODES, **params
        ).raise_for_failure()

    # ========================================================================
    # EXISTENCE
    # ========================================================================

    @property
    def exists(self) -> bool:
        return self._exists

    @property
    def is_existing(self) -> bool:
        return self.exists

    @property
    def attributes(self):
        """Projected attribute record, frozen at construction"""
        return self._attributes

    @property
    def raw(self) -> Mapping[str, Any]:
        """Provider record exactly as captured at lookup time"""
        return self._raw

    @property
    def connection(self) -> AwsConnection:
        return self._connection

    @abstractmethod
    def to_dict(self, live: bool = False) -> Dict[str, Any]:
        """Attributes (and derived predicates when live) for JSON output"""
        pass
