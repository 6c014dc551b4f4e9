"""
AWS Connection
One handle per inspection session: owns the boto3 clients, the client
overrides and, for deterministic runs, the pre-seeded responses
"""

import logging
from typing import Dict, Any, List, Optional, Iterable

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from botocore.stub import Stubber

from resource_checks.connectors.aws.config import CheckConfig
from resource_checks.connectors.aws.schema import CallResult, CallStatus
from resource_checks.connectors.errors import ConfigurationError, ProviderError

logger = logging.getLogger(__name__)


def normalize_error(error: Exception, service: str, operation: str) -> ProviderError:
    """Turn any botocore failure into the single ProviderError shape"""
    if isinstance(error, ClientError):
        details = error.response.get('Error', {})
        return ProviderError(
            message=details.get('Message') or str(error),
            service=service,
            operation=operation,
            code=details.get('Code'),
        )
    return ProviderError(
        message=str(error),
        service=service,
        operation=operation,
        code=type(error).__name__,
    )


class AwsConnection:
    """
    Explicit provider-client handle passed to every resource

    Example:
        conn = AwsConnection(client_args={'region_name': 'eu-west-1'})
        trail = CloudTrailTrail('main-trail', connection=conn)

    stub_data entries queue canned responses on a botocore Stubber:
        {'method': 'get_trail_status', 'data': {'IsLogging': True}}
        {'method': 'get_trail_status', 'error': 'TrailNotFoundException'}
        {'client': 'iam', 'method': 'get_role', 'data': {...}}
    """

    def __init__(self, client_args: Optional[Dict[str, Any]] = None, session=None):
        if client_args is not None and not isinstance(client_args, dict):
            raise ConfigurationError("client_args must be a dict of boto3.client() keyword arguments")
        self.client_args = {**CheckConfig.get_client_args(), **(client_args or {})}
        self.session = session or boto3.session.Session()
        self._clients: Dict[str, Any] = {}
        self._stubbers: Dict[str, Stubber] = {}

    # ========================================================================
    # CLIENTS
    # ========================================================================

    def client(self, service: str):
        """Return the (cached) boto3 client for a service"""
        if service not in self._clients:
            logger.debug(f"Creating {service} client in {self.client_args.get('region_name')}")
            self._clients[service] = self.session.client(service, **self.client_args)
        return self._clients[service]

    @property
    def is_stubbed(self) -> bool:
        return bool(self._stubbers)

    def stub(self, service: str, stub_data: Iterable[Dict[str, Any]]) -> Stubber:
        """
        Queue pre-seeded responses for a service and activate the stubber

        Entries without a 'client' key belong to `service`.
        """
        if isinstance(stub_data, (str, bytes, dict)):
            raise ConfigurationError("stub_data must be a list of {'method': ..., 'data'|'error': ...} entries")

        for entry in stub_data:
            if not isinstance(entry, dict) or 'method' not in entry:
                raise ConfigurationError(f"Invalid stub_data entry: {entry!r}")
            stubber = self._stubber(entry.get('client', service))
            if 'error' in entry:
                stubber.add_client_error(
                    entry['method'],
                    service_error_code=entry['error'],
                    service_message=entry.get('message', ''),
                    http_status_code=entry.get('http_status_code', 400),
                )
            else:
                stubber.add_response(entry['method'], entry.get('data', {}), entry.get('expected_params'))

        return self._stubber(service)

    def _stubber(self, service: str) -> Stubber:
        if service not in self._stubbers:
            stubber = Stubber(self.client(service))
            stubber.activate()
            self._stubbers[service] = stubber
        return self._stubbers[service]

    # ========================================================================
    # CALLS
    # ========================================================================

    def call(
        self,
        service: str,
        operation: str,
        not_found_codes: Iterable[str] = (),
        **params
    ) -> CallResult:
        """
        Issue one SDK call and classify the outcome

        Never raises for provider failures: the caller pattern-matches
        on CallResult.status.
        """
        logger.debug(f"{service}.{operation}({params})")
        try:
            data = getattr(self.client(service), operation)(**params)
            return CallResult(status=CallStatus.SUCCESS, data=data)

        except ClientError as e:
            error = normalize_error(e, service, operation)
            if error.code in not_found_codes:
                logger.info(f"{service}.{operation}: entity not found ({error.code})")
                return CallResult(status=CallStatus.NOT_FOUND, error=error)
            logger.warning(f"{service}.{operation} failed: {error}")
            return CallResult(status=CallStatus.FAILED, error=error)

        except BotoCoreError as e:
            error = normalize_error(e, service, operation)
            logger.warning(f"{service}.{operation} failed: {error}")
            return CallResult(status=CallStatus.FAILED, error=error)

    def paginate(
        self,
        service: str,
        operation: str,
        result_key: str,
        not_found_codes: Iterable[str] = (),
        **params
    ) -> CallResult:
        """
        Walk every page of a paginated operation

        The merged items end up under data[result_key].
        """
        logger.debug(f"{service}.{operation}({params}) [paginated]")
        items: List[Any] = []
        try:
            paginator = self.client(service).get_paginator(operation)
            for page in paginator.paginate(**params):
                items.extend(page.get(result_key, []))
            return CallResult(status=CallStatus.SUCCESS, data={result_key: items})

        except ClientError as e:
            error = normalize_error(e, service, operation)
            if error.code in not_found_codes:
                logger.info(f"{service}.{operation}: entity not found ({error.code})")
                return CallResult(status=CallStatus.NOT_FOUND, error=error)
            logger.warning(f"{service}.{operation} failed: {error}")
            return CallResult(status=CallStatus.FAILED, error=error)

        except BotoCoreError as e:
            error = normalize_error(e, service, operation)
            logger.warning(f"{service}.{operation} failed: {error}")
            return CallResult(status=CallStatus.FAILED, error=error)
