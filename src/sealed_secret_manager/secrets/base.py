"""Interfaces of the external collaborators.

The lifecycle manager only depends on these protocols; the kubectl and
kubeseal backed implementations live in ``creation`` and ``sealing``, and
tests substitute in-memory fakes.
"""

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, Protocol

from sealed_secret_manager.models import Environment, KeySource

Confirm = Callable[[str], bool]


class SecretObjectBuilder(Protocol):
    """Renders plaintext Kubernetes Secret documents."""

    def build_generic(self, namespace: str, name: str, sources: Sequence[KeySource]) -> bytes: ...

    def build_tls(self, namespace: str, name: str, cert_path: Path, key_path: Path) -> bytes: ...

    def build_docker_registry(
        self,
        namespace: str,
        name: str,
        server: str,
        username: str,
        password: str,
        email: str,
    ) -> bytes: ...


class SealingGateway(Protocol):
    """Encrypts plaintext Secrets against an environment's public sealing key."""

    def fetch_public_key(self, environment: Environment) -> bytes: ...

    def seal(self, plaintext: bytes, environment: Environment, *, allow_empty_data: bool) -> dict[str, Any]: ...
