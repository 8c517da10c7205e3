"""Custom exceptions for credential handling."""


class CredentialsError(Exception):
    """Base exception for all credential-related errors."""

    pass


class CredentialsInvalidError(CredentialsError):
    """Raised when stored credentials are found but invalid or corrupted."""

    pass


class CredentialsStorageError(CredentialsError):
    """Raised when there's an error reading or writing credentials."""

    pass


class OAuthError(CredentialsError):
    """Base exception for OAuth-related errors."""

    pass


class OAuthTokenExchangeError(OAuthError):
    """Raised when exchanging an authorization code fails."""

    pass
