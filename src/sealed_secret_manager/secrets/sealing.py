"""Secret sealing with kubeseal.

This module provides the kubeseal-backed Sealing Gateway: it fetches an
environment's public sealing certificate from the controller and seals
plaintext secrets offline against the stored certificate.
"""

import subprocess
from collections.abc import Callable
from pathlib import Path
from typing import Any

from icecream import ic

from sealed_secret_manager import console
from sealed_secret_manager.config import Settings
from sealed_secret_manager.exceptions import GatewayError, ManifestParsingError
from sealed_secret_manager.models import Environment
from sealed_secret_manager.secrets.parsing import load_manifest

# CLI flag constants for kubeseal commands
_FORMAT_YAML = "--format=yaml"
_ALLOW_EMPTY_DATA = "--allow-empty-data"


class KubesealGateway:
    """Sealing Gateway backed by the kubeseal binary.

    Attributes:
        settings: Controller coordinates and binary location.
        cert_path_for: Resolves the stored certificate of an environment.

    """

    def __init__(self, settings: Settings, cert_path_for: Callable[[Environment], Path]) -> None:
        self.settings: Settings = settings
        self.cert_path_for: Callable[[Environment], Path] = cert_path_for

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return (
            f"KubesealGateway(binary={self.settings.kubeseal_binary!r}, "
            f"controller={self.settings.controller_namespace}/{self.settings.controller_name})"
        )

    def _run(self, cmd: list[str], what: str, *, input_data: bytes | None = None) -> bytes:
        """Run a kubeseal command and return its stdout.

        Raises:
            GatewayError: If kubeseal is not found or the command fails.

        """
        try:
            result = subprocess.run(cmd, input=input_data, capture_output=True, check=True)
        except FileNotFoundError as err:
            raise GatewayError(
                f"{self.settings.kubeseal_binary} not found. Please install kubeseal or ensure it's in your PATH. "
                "See: https://github.com/bitnami-labs/sealed-secrets#installation"
            ) from err
        except subprocess.CalledProcessError as err:
            stderr_msg = err.stderr.decode().strip() if err.stderr else ""
            error_details = f" - {stderr_msg}" if stderr_msg else ""
            raise GatewayError(f"Failed to {what} with kubeseal (exit code {err.returncode}){error_details}") from err
        return result.stdout

    def fetch_public_key(self, environment: Environment) -> bytes:
        """Download the controller's current public sealing certificate.

        The certificate is fetched through the current (or configured)
        Kubernetes context, which must point at the cluster of ``environment``.

        Args:
            environment: Environment the certificate is fetched for.

        Returns:
            The PEM encoded certificate.

        Raises:
            GatewayError: If kubeseal fails or returns nothing.

        """
        console.action(f"Downloading sealing certificate for {console.highlight(environment.value)}")
        cmd: list[str] = [
            self.settings.kubeseal_binary,
            "--controller-name",
            self.settings.controller_name,
            "--controller-namespace",
            self.settings.controller_namespace,
        ]
        if self.settings.context:
            cmd.append(f"--context={self.settings.context}")
        cmd.append("--fetch-cert")
        ic(cmd)

        with console.spinner("Fetching certificate..."):
            certificate = self._run(cmd, "fetch certificate")
        if not certificate.strip():
            raise GatewayError("kubeseal returned an empty certificate")
        return certificate

    def seal(self, plaintext: bytes, environment: Environment, *, allow_empty_data: bool) -> dict[str, Any]:
        """Seal a plaintext Secret document against the environment's certificate.

        Args:
            plaintext: YAML document of a Kubernetes Secret.
            environment: Environment whose stored certificate is used.
            allow_empty_data: Accept a Secret without data (pure deletion updates).

        Returns:
            The SealedSecret manifest as a mapping.

        Raises:
            GatewayError: If no certificate is stored, kubeseal fails, or its
                output is not a manifest.

        """
        cert_path = self.cert_path_for(environment)
        if not cert_path.is_file():
            raise GatewayError(
                f"No sealing certificate for '{environment.value}' at {cert_path}; "
                "run the fetch-seal-key operation first"
            )

        cmd: list[str] = [self.settings.kubeseal_binary, _FORMAT_YAML, f"--cert={cert_path}"]
        if allow_empty_data:
            cmd.append(_ALLOW_EMPTY_DATA)
        ic(cmd)

        console.step("Sealing secret")
        with console.spinner("Sealing secret with kubeseal..."):
            output = self._run(cmd, "seal secret", input_data=plaintext)

        try:
            return load_manifest(output, source="kubeseal output")
        except ManifestParsingError as err:
            raise GatewayError(str(err)) from err
