"""Data models for sealed-secret-manager.

This module provides the immutable secret descriptor and the enumerations
that select environments, operations and secret types.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from sealed_secret_manager.exceptions import ValidationError


class Environment(str, Enum):
    """Deployment environments, each with its own sealing key and secrets directory."""

    DEV = "dev"
    STAGE = "stage"
    QA = "qa"
    PROD = "prod"


class Operation(str, Enum):
    """Lifecycle operations; exactly one is performed per invocation."""

    FETCH_SEAL_KEY = "fetch-seal-key"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class SecretType(str, Enum):
    """Supported Kubernetes secret types.

    Inherits from str to allow direct use in string contexts
    (e.g., command-line arguments, YAML output).
    """

    GENERIC = "generic"
    TLS = "tls"
    DOCKER = "docker"

    @property
    def kubectl_kind(self) -> str:
        """Return the ``kubectl create secret`` subcommand for this type."""
        if self is SecretType.DOCKER:
            return "docker-registry"
        return self.value


@dataclass(frozen=True, slots=True)
class LiteralSource:
    """A literal ``key=value`` entry."""

    key: str
    value: str = field(repr=False)

    def as_kubectl_arg(self) -> str:
        return f"--from-literal={self.key}={self.value}"


@dataclass(frozen=True, slots=True)
class FileSource:
    """A file entry, optionally renamed with an explicit key.

    Attributes:
        path: Path to the file (or directory) holding the value.
        key: Field key to store the file under. Defaults to the file's base name.

    """

    path: Path
    key: str | None = None

    @property
    def resolved_key(self) -> str:
        """Return the field key; a directory without a key expands to one field per file."""
        if self.key:
            return self.key
        if self.path.is_dir():
            return f"{self.path.name}/*"
        return self.path.name

    def as_kubectl_arg(self) -> str:
        if self.key:
            return f"--from-file={self.key}={self.path}"
        return f"--from-file={self.path}"


KeySource = LiteralSource | FileSource


@dataclass(frozen=True, slots=True)
class GenericPayload:
    sources: tuple[KeySource, ...] = ()


@dataclass(frozen=True, slots=True)
class TlsPayload:
    cert_path: Path | None = None
    key_path: Path | None = None


@dataclass(frozen=True, slots=True)
class DockerPayload:
    server: str = ""
    username: str = ""
    password: str = field(default="", repr=False)
    email: str = ""


_PAYLOAD_TYPES: dict[SecretType, type] = {
    SecretType.GENERIC: GenericPayload,
    SecretType.TLS: TlsPayload,
    SecretType.DOCKER: DockerPayload,
}


@dataclass(frozen=True, slots=True)
class SecretDescriptor:
    """Canonical, unencrypted description of one secret to manage.

    The payload shape is determined by ``secret_type``; a mismatching
    payload is rejected at construction time.

    Attributes:
        environment: Target environment.
        namespace: Kubernetes namespace of the secret.
        name: Name of the secret.
        secret_type: Which kind of secret is described.
        payload: Type-specific inputs.

    """

    environment: Environment
    namespace: str
    name: str
    secret_type: SecretType
    payload: GenericPayload | TlsPayload | DockerPayload

    def __post_init__(self) -> None:
        expected = _PAYLOAD_TYPES[self.secret_type]
        if not isinstance(self.payload, expected):
            raise ValidationError(
                f"A {self.secret_type.value} secret requires a {expected.__name__}, "
                f"got {type(self.payload).__name__}"
            )

    @property
    def field_keys(self) -> list[str]:
        """Return the field keys this descriptor will produce, where they are known up front."""
        match self.payload:
            case GenericPayload(sources=sources):
                return [
                    source.key if isinstance(source, LiteralSource) else source.resolved_key for source in sources
                ]
            case TlsPayload():
                return ["tls.crt", "tls.key"]
            case _:
                return [".dockerconfigjson"]
