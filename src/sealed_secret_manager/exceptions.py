"""Custom exceptions for sealed-secret-manager.

This module defines the exception hierarchy used throughout the application
to provide meaningful error messages and proper error handling.
"""


class SecretManagerError(Exception):
    """Base exception for all sealed-secret-manager errors.

    All custom exceptions in this package inherit from this class,
    allowing the CLI to report any of them with a single except clause.
    """

    pass


class ValidationError(SecretManagerError):
    """Raised when operator input is malformed or incomplete.

    This can occur when:
    - A namespace or secret name is not a valid Kubernetes name
    - A --from-literal value is not in key=value form
    - A field key contains characters Kubernetes does not allow
    """

    pass


class MissingInputError(ValidationError):
    """Raised when the inputs required by a secret type are absent.

    For example a tls secret without both a certificate and a key,
    or a generic secret without any literal or file entries.
    """

    pass


class NoOpError(SecretManagerError):
    """Raised when an update is requested with nothing to change."""

    pass


class NotFoundError(SecretManagerError):
    """Raised when the manifest targeted by an update or delete does not exist."""

    pass


class GatewayError(SecretManagerError):
    """Raised when an external tool (kubeseal, kubectl) fails.

    This can occur when:
    - The binary is not installed or not in PATH
    - The sealing controller is unreachable
    - kubectl rejects the secret input
    - No sealing key has been fetched for the environment
    """

    pass


class StoreError(SecretManagerError):
    """Raised when a manifest file cannot be read, written or deleted."""

    pass


class ManifestParsingError(StoreError):
    """Raised when a manifest document cannot be parsed.

    This can occur when:
    - The file is not valid YAML
    - The file contains several YAML documents
    - The document is not a YAML mapping
    """

    pass


class ConfigurationError(SecretManagerError):
    """Raised when the runtime settings cannot be resolved.

    Typically the repository root cannot be located because the tool
    runs outside a git work tree and no explicit root was given.
    """

    pass
