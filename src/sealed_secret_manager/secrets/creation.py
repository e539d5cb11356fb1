"""Plaintext secret rendering with kubectl.

This module provides the kubectl-backed Secret Object Builder, which renders
generic, TLS and docker-registry secrets with a client-side dry run.
"""

import subprocess
from collections.abc import Sequence
from pathlib import Path

from icecream import ic

from sealed_secret_manager import console
from sealed_secret_manager.exceptions import GatewayError
from sealed_secret_manager.models import KeySource, LiteralSource, SecretType

# CLI flag constants for kubectl commands
_DRY_RUN_CLIENT = "--dry-run=client"

# Error message constants
_ERR_KUBECTL_NOT_FOUND = "{binary} not found; please install kubectl and ensure it's on PATH"
_ERR_SECRET_CREATION = "Failed to create {secret_type} secret (exit code {code}){details}"


class KubectlSecretBuilder:
    """Secret Object Builder backed by ``kubectl create secret``.

    Attributes:
        binary: kubectl executable to run.

    """

    def __init__(self, binary: str = "kubectl") -> None:
        self.binary: str = binary

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return f"KubectlSecretBuilder(binary={self.binary!r})"

    def _base_cmd(self, secret_type: SecretType, namespace: str, name: str) -> list[str]:
        return [
            self.binary,
            "create",
            "secret",
            secret_type.kubectl_kind,
            name,
            "--namespace",
            namespace,
            _DRY_RUN_CLIENT,
            "-o",
            "yaml",
        ]

    def _run(self, cmd: list[str], secret_type: SecretType) -> bytes:
        """Run a kubectl command and return its stdout.

        Raises:
            GatewayError: If kubectl is not found or the command fails.

        """
        try:
            result = subprocess.run(cmd, capture_output=True, check=True)
        except FileNotFoundError as err:
            raise GatewayError(_ERR_KUBECTL_NOT_FOUND.format(binary=self.binary)) from err
        except subprocess.CalledProcessError as err:
            stderr_msg = err.stderr.decode().strip() if err.stderr else ""
            error_details = f" - {stderr_msg}" if stderr_msg else ""
            raise GatewayError(
                _ERR_SECRET_CREATION.format(
                    secret_type=secret_type.value, code=err.returncode, details=error_details
                )
            ) from err
        return result.stdout

    def build_generic(self, namespace: str, name: str, sources: Sequence[KeySource]) -> bytes:
        """Render a generic secret from literal and file entries.

        An empty ``sources`` renders a secret without data, which an update
        needs when it only deletes fields.
        """
        console.step("Generating generic secret")
        base_cmd = self._base_cmd(SecretType.GENERIC, namespace, name)
        # Literal values are secret; only log the keys
        ic(base_cmd, [source.key if isinstance(source, LiteralSource) else str(source.path) for source in sources])
        cmd = [*base_cmd, *(source.as_kubectl_arg() for source in sources)]
        return self._run(cmd, SecretType.GENERIC)

    def build_tls(self, namespace: str, name: str, cert_path: Path, key_path: Path) -> bytes:
        """Render a TLS secret from a certificate and private key file."""
        console.step("Generating TLS secret")
        cmd = [
            *self._base_cmd(SecretType.TLS, namespace, name),
            "--cert",
            str(cert_path),
            "--key",
            str(key_path),
        ]
        ic(cmd)
        return self._run(cmd, SecretType.TLS)

    def build_docker_registry(
        self,
        namespace: str,
        name: str,
        server: str,
        username: str,
        password: str,
        email: str,
    ) -> bytes:
        """Render a docker-registry secret."""
        console.step("Generating docker-registry secret")
        cmd = [
            *self._base_cmd(SecretType.DOCKER, namespace, name),
            f"--docker-server={server}",
            f"--docker-username={username}",
            f"--docker-password={password}",
            f"--docker-email={email}",
        ]
        # Don't log cmd, it carries the registry password
        return self._run(cmd, SecretType.DOCKER)
