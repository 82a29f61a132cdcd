"""Unit tests for custom exceptions."""

import pytest

from glprovider.core.exceptions import (
    AmbiguousLegacyStateError,
    ConfigurationError,
    DeletionTimeoutError,
    MalformedIdentifierError,
    MigrationError,
    NotFoundError,
    OperationCancelledError,
    PaginationError,
    ProviderError,
    RegistrationError,
    RemoteError,
    RemoteTransientError,
    RemoteValidationError,
)


class TestExceptionHierarchy:
    """Tests for exception hierarchy and inheritance."""

    def test_all_exceptions_inherit_from_provider_error(self) -> None:
        """Test that all custom exceptions inherit from ProviderError."""
        exceptions = [
            ConfigurationError,
            RegistrationError,
            MalformedIdentifierError,
            MigrationError,
            AmbiguousLegacyStateError,
            OperationCancelledError,
            RemoteError,
            NotFoundError,
            RemoteValidationError,
            RemoteTransientError,
            PaginationError,
            DeletionTimeoutError,
        ]

        for exc_class in exceptions:
            assert issubclass(exc_class, ProviderError)

    def test_remote_errors_share_a_base(self) -> None:
        for exc_class in (
            NotFoundError,
            RemoteValidationError,
            RemoteTransientError,
            PaginationError,
        ):
            assert issubclass(exc_class, RemoteError)

    def test_ambiguous_legacy_state_is_a_migration_error(self) -> None:
        with pytest.raises(MigrationError):
            raise AmbiguousLegacyStateError("ambiguous", fields=("project", "group"))


class TestExceptionAttributes:
    """Tests for the extra context carried by exceptions."""

    def test_remote_error_status_code(self) -> None:
        error = NotFoundError("Failed to get projects/1", status_code=404)

        assert error.status_code == 404
        assert str(error) == "Failed to get projects/1"

    def test_remote_error_without_status(self) -> None:
        assert RemoteTransientError("connection reset").status_code is None

    def test_malformed_identifier_context(self) -> None:
        error = MalformedIdentifierError("bad id", identifier="foo", expected="<a>:<b>")

        assert error.identifier == "foo"
        assert error.expected == "<a>:<b>"

    def test_ambiguous_fields(self) -> None:
        error = AmbiguousLegacyStateError("ambiguous", fields=("project", "group"))

        assert error.fields == ("project", "group")
