"""Custom exceptions for the GitLab provider."""


class ProviderError(Exception):
    """Base exception for all provider errors."""


class ConfigurationError(ProviderError):
    """Configuration-related errors."""


class RegistrationError(ProviderError):
    """Resource table failed startup validation."""


class MalformedIdentifierError(ProviderError):
    """A persisted identifier does not match its resource's shape.

    Attributes:
        identifier: The offending identifier string
        expected: Human readable form of the expected shape
    """

    def __init__(self, message: str, identifier: str = "", expected: str = ""):
        super().__init__(message)
        self.identifier = identifier
        self.expected = expected


class MigrationError(ProviderError):
    """Persisted state could not be migrated to the current schema version."""


class AmbiguousLegacyStateError(MigrationError):
    """Legacy state populates none or several mutually exclusive fields.

    Attributes:
        fields: Names of the fields that were inspected
    """

    def __init__(self, message: str, fields: tuple[str, ...] = ()):
        super().__init__(message)
        self.fields = fields


class OperationCancelledError(ProviderError):
    """The operation context was cancelled or its deadline elapsed."""


class RemoteError(ProviderError):
    """GitLab API call failed.

    Attributes:
        status_code: HTTP status reported by GitLab, if any
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(RemoteError):
    """GitLab reports that the referenced object does not exist."""


class RemoteValidationError(RemoteError):
    """GitLab rejected the request payload."""


class RemoteTransientError(RemoteError):
    """Rate limiting, server-side or connection failure worth retrying."""


class PaginationError(RemoteError):
    """A list endpoint kept reporting further pages past the page limit."""


class DeletionTimeoutError(ProviderError):
    """A deleted object was still observable when the wait window closed."""
