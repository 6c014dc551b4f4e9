"""
Resource check error taxonomy

ConfigurationError  - caller forgot the lookup key or passed bad options
ProviderError       - AWS said no (auth, throttling, network, validation)
AmbiguousMatchError - a lookup key matched more than one entity

"Not found" is not an error here: it surfaces as exists == False.
"""

from typing import Dict, Optional


class ResourceCheckError(Exception):
    """Base class for every error raised by a resource check"""


class ConfigurationError(ResourceCheckError):
    """Raised before any network call when a resource is misconfigured"""


class ProviderError(ResourceCheckError):
    """Normalized failure reported by the cloud provider or its SDK"""

    def __init__(
        self,
        message: str,
        service: str = 'unknown',
        operation: str = 'unknown',
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.service = service
        self.operation = operation
        self.code = code

    def to_dict(self) -> Dict:
        return {
            'error': type(self).__name__,
            'service': self.service,
            'operation': self.operation,
            'code': self.code,
            'message': self.message,
        }

    def __str__(self):
        code = f" [{self.code}]" if self.code else ""
        return f"{self.service}.{self.operation}{code}: {self.message}"


class AmbiguousMatchError(ProviderError):
    """Lookup key matched more than one entity"""
