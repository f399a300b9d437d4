"""Domain exception hierarchy.

Every exception that can cross the broker boundary carries an HTTP status hint
and an optional OSB error code so the transport layer can map it verbatim.
"""

from typing import Any, Optional

CONCURRENCY_ERROR_CODE = "ConcurrencyError"
CONCURRENCY_ERROR_DESCRIPTION = "Concurrent modification not supported"


class DomainException(Exception):
    """Base exception for all broker domain errors."""

    http_status: int = 500
    error_code: Optional[str] = None

    def __init__(
        self,
        message: str,
        http_status: Optional[int] = None,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if http_status is not None:
            self.http_status = http_status
        if error_code is not None:
            self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to the OSB error body."""
        body: dict[str, Any] = {"description": self.message}
        if self.error_code:
            body["error"] = self.error_code
        return body


class ValidationError(DomainException):
    """Malformed or missing required request fields."""

    http_status = 400


class ConflictError(DomainException):
    """Duplicate creation or a superseded operation token."""

    http_status = 409
    error_code = CONCURRENCY_ERROR_CODE

    def __init__(self, message: str = CONCURRENCY_ERROR_DESCRIPTION, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class NotFoundError(DomainException):
    """Instance, binding or deployed resources could not be located."""

    http_status = 404


class GoneError(DomainException):
    """Operation against an instance or binding that no longer exists."""

    http_status = 410


class UpstreamError(DomainException):
    """Chart resolution, deployment or cluster listing failed."""

    http_status = 500

    def __init__(
        self,
        message: str,
        instance_id: Optional[str] = None,
        chart: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.instance_id = instance_id
        self.chart = chart


class ChartNotFoundError(UpstreamError):
    """Requested chart or chart version is not in the repository."""


class DeployError(UpstreamError):
    """The chart deployer failed to install or uninstall a release."""


class ClusterError(UpstreamError):
    """The cluster resource store rejected or failed a call."""


class CredentialProviderError(DomainException):
    """A credential provider's expectation about secrets or parameters was violated."""

    http_status = 500


class NoServicesError(CredentialProviderError):
    """No workload-exposing service was handed to the provider."""

    def __init__(self, message: str = "no services found", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class MissingPortsError(CredentialProviderError):
    """The selected service exposes no usable port."""

    def __init__(self, message: str = "no ports found", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class MissingSecretKeyError(CredentialProviderError):
    """None of the expected password keys exist in the secret data."""

    def __init__(self, message: str = "password not found in secret keys", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class SecretNotStringError(CredentialProviderError):
    """A secret value exists but is not a string."""

    def __init__(self, message: str = "password not a string", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class PrimaryServiceNotFoundError(CredentialProviderError):
    """No service could be identified as the primary of a replicated topology."""


class ParameterError(DomainException):
    """Base for parameter bag lookups."""

    http_status = 400

    def __init__(self, message: str, path: str = "", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.path = path


class ParameterNotFoundError(ParameterError):
    """A dotted path does not resolve in the parameter bag."""


class ParameterNotStringError(ParameterError):
    """A dotted path resolves to a value that is not a string."""


class OperationCancelledError(DomainException):
    """A background operation observed a cancellation request."""


class ConfigurationError(DomainException):
    """Invalid configuration or environment."""


class RecordStoreError(DomainException):
    """The operation record store failed."""


class RecordNotFoundError(RecordStoreError):
    """No record exists under the requested key."""

    http_status = 404


class RecordAlreadyExistsError(RecordStoreError):
    """A record with the requested key already exists."""

    http_status = 409
