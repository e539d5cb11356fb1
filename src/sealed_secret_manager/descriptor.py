"""Descriptor builder.

Turns validated command-line input into an immutable SecretDescriptor.
Nothing here touches the filesystem or external tools.
"""

import re
from collections.abc import Iterable
from pathlib import Path

from sealed_secret_manager.exceptions import MissingInputError, ValidationError
from sealed_secret_manager.models import (
    DockerPayload,
    Environment,
    FileSource,
    GenericPayload,
    KeySource,
    LiteralSource,
    SecretDescriptor,
    SecretType,
    TlsPayload,
)

# Kubernetes DNS subdomain name validation (RFC 1123)
_DNS_SUBDOMAIN_MAX_LENGTH = 253
_DNS_SUBDOMAIN_PATTERN = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$")

# Namespaces are DNS labels: no dots
_DNS_LABEL_MAX_LENGTH = 63
_DNS_LABEL_PATTERN = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")

# Valid keys for Secret data entries
_FIELD_KEY_MAX_LENGTH = 253
_FIELD_KEY_PATTERN = re.compile(r"^[-._a-zA-Z0-9]+$")


def validate_k8s_name(name: str) -> bool | str:
    """Validate a Kubernetes resource name (DNS subdomain).

    Args:
        name: The name to validate.

    Returns:
        True if valid, or an error message string if invalid.

    """
    if not name:
        return "Name cannot be empty"
    if len(name) > _DNS_SUBDOMAIN_MAX_LENGTH:
        return f"Name must be {_DNS_SUBDOMAIN_MAX_LENGTH} characters or less"
    if not _DNS_SUBDOMAIN_PATTERN.match(name):
        return "Name must consist of lowercase alphanumeric characters, '-' or '.', and must start and end with an alphanumeric character"
    return True


def validate_namespace(namespace: str) -> bool | str:
    """Validate a Kubernetes namespace (DNS label).

    Args:
        namespace: The namespace to validate.

    Returns:
        True if valid, or an error message string if invalid.

    """
    if not namespace:
        return "Namespace cannot be empty"
    if len(namespace) > _DNS_LABEL_MAX_LENGTH:
        return f"Namespace must be {_DNS_LABEL_MAX_LENGTH} characters or less"
    if not _DNS_LABEL_PATTERN.match(namespace):
        return "Namespace must consist of lowercase alphanumeric characters or '-', and must start and end with an alphanumeric character"
    return True


def validate_field_key(key: str) -> str:
    """Check that ``key`` is usable as a Secret field key and return it.

    Raises:
        ValidationError: If the key is empty, too long or has invalid characters.

    """
    if not key:
        raise ValidationError("Secret field key cannot be empty")
    if len(key) > _FIELD_KEY_MAX_LENGTH:
        raise ValidationError(f"Secret field key '{key[:32]}...' must be {_FIELD_KEY_MAX_LENGTH} characters or less")
    if not _FIELD_KEY_PATTERN.match(key):
        raise ValidationError(
            f"Invalid secret field key '{key}': only alphanumeric characters, '-', '_' and '.' are allowed"
        )
    return key


def parse_literal(entry: str) -> LiteralSource:
    """Parse a ``key=value`` literal entry.

    The value may itself contain '=' characters; only the first one separates
    the key.

    Raises:
        ValidationError: If the entry has no '=' or an invalid key.

    """
    key, sep, value = entry.partition("=")
    if not sep:
        raise ValidationError(f"Literal '{key}' must be in key=value format")
    return LiteralSource(key=validate_field_key(key), value=value)


def parse_file_source(entry: str) -> FileSource:
    """Parse a ``[key=]path`` file entry.

    Raises:
        ValidationError: If the path is empty or the key is invalid.

    """
    key, sep, path = entry.partition("=")
    if not sep:
        key, path = "", entry
    elif not key:
        raise ValidationError(f"File entry '{entry}' has an empty key; use [key=]path")
    if not path:
        raise ValidationError(f"File entry '{entry}' does not name a file")

    source = FileSource(path=Path(path).expanduser(), key=validate_field_key(key) if key else None)
    return source


def _require_valid(result: bool | str, what: str) -> None:
    if result is not True:
        raise ValidationError(f"Invalid {what}: {result}")


def build_descriptor(
    secret_type: SecretType,
    environment: Environment,
    namespace: str,
    name: str,
    *,
    sources: Iterable[KeySource] = (),
    cert_path: Path | None = None,
    key_path: Path | None = None,
    docker_server: str = "",
    docker_username: str = "",
    docker_password: str = "",
    docker_email: str = "",
    require_payload: bool = True,
) -> SecretDescriptor:
    """Build a SecretDescriptor from type-specific inputs.

    Only structural completeness is checked here. Whether a docker server or
    a certificate file is actually usable is left to kubectl.

    Args:
        secret_type: Kind of secret to describe.
        environment: Target environment.
        namespace: Kubernetes namespace.
        name: Secret name.
        sources: Literal and file key sources (generic secrets).
        cert_path: Certificate path (tls secrets).
        key_path: Private key path (tls secrets).
        docker_server: Registry server (docker secrets).
        docker_username: Registry username (docker secrets).
        docker_password: Registry password (docker secrets).
        docker_email: Registry email (docker secrets).
        require_payload: If False, skip the type-specific completeness checks.
            Update and delete only need the identity, plus whatever sources
            were given.

    Returns:
        The immutable descriptor.

    Raises:
        ValidationError: If the namespace or name is invalid.
        MissingInputError: If required type-specific inputs are absent.

    """
    _require_valid(validate_namespace(namespace), "namespace")
    _require_valid(validate_k8s_name(name), "secret name")

    payload: GenericPayload | TlsPayload | DockerPayload
    match secret_type:
        case SecretType.GENERIC:
            payload = GenericPayload(sources=tuple(sources))
            if require_payload and not payload.sources:
                raise MissingInputError(
                    "--from-file or --from-literal: at least one is required to create a generic secret"
                )
        case SecretType.TLS:
            if require_payload and (cert_path is None or key_path is None):
                raise MissingInputError("--cert-path and --key-path are both required for a tls secret")
            payload = TlsPayload(cert_path=cert_path, key_path=key_path)
        case SecretType.DOCKER:
            payload = DockerPayload(
                server=docker_server,
                username=docker_username,
                password=docker_password,
                email=docker_email,
            )

    return SecretDescriptor(
        environment=environment,
        namespace=namespace,
        name=name,
        secret_type=secret_type,
        payload=payload,
    )
