"""Lifecycle manager facade.

This module provides the LifecycleManager class which performs the four
operations (fetch-seal-key, create, update, delete) by composing the
descriptor, the external collaborators, the merge engine and the store.

Every precondition is checked before any external tool runs, and the manifest
on disk is only written once the complete result is known.
"""

from collections.abc import Iterable
from pathlib import Path
from typing import Any

from icecream import ic

from sealed_secret_manager import console
from sealed_secret_manager.exceptions import NoOpError, NotFoundError, ValidationError
from sealed_secret_manager.merge import encrypted_fields, merge_manifests
from sealed_secret_manager.models import (
    DockerPayload,
    Environment,
    GenericPayload,
    Operation,
    SecretDescriptor,
    SecretType,
    TlsPayload,
)
from sealed_secret_manager.secrets.base import Confirm, SealingGateway, SecretObjectBuilder
from sealed_secret_manager.store import ManifestStore

_GITOPS_HINT = "Push your change to the repository main branch and the deployment controller will take care of it"


class LifecycleManager:
    """Creates, updates and deletes sealed secret manifests.

    Attributes:
        store: Where manifests and sealing keys live.
        builder: Renders plaintext Secret documents.
        gateway: Seals plaintext Secrets and fetches sealing keys.
        confirm: Asked before every mutation; a False answer aborts.

    """

    def __init__(
        self,
        *,
        store: ManifestStore,
        builder: SecretObjectBuilder,
        gateway: SealingGateway,
        confirm: Confirm,
    ) -> None:
        self.store: ManifestStore = store
        self.builder: SecretObjectBuilder = builder
        self.gateway: SealingGateway = gateway
        self.confirm: Confirm = confirm

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return f"LifecycleManager(store={self.store!r}, gateway={self.gateway!r})"

    def _path_for(self, descriptor: SecretDescriptor) -> Path:
        return self.store.manifest_path(descriptor.environment, descriptor.namespace, descriptor.name)

    def _render(self, descriptor: SecretDescriptor) -> bytes:
        """Produce the plaintext Secret document for a descriptor."""
        match descriptor.payload:
            case GenericPayload(sources=sources):
                return self.builder.build_generic(descriptor.namespace, descriptor.name, sources)
            case TlsPayload(cert_path=cert_path, key_path=key_path):
                return self.builder.build_tls(descriptor.namespace, descriptor.name, cert_path, key_path)
            case DockerPayload(server=server, username=username, password=password, email=email):
                return self.builder.build_docker_registry(
                    descriptor.namespace, descriptor.name, server, username, password, email
                )
        raise ValidationError(f"Unsupported payload {type(descriptor.payload).__name__}")

    @staticmethod
    def _describe(descriptor: SecretDescriptor, path: Path, **extra: str) -> dict[str, str]:
        items = {
            "Environment": descriptor.environment.value,
            "Namespace": descriptor.namespace,
            "Name": descriptor.name,
            "Type": descriptor.secret_type.value,
            "Manifest": str(path),
        }
        items.update(extra)
        return items

    def fetch_seal_key(self, environment: Environment) -> Path:
        """Fetch the current public sealing key and store it for ``environment``.

        Re-running replaces the stored key with the latest one.

        Returns:
            Path of the stored key.

        """
        certificate = self.gateway.fetch_public_key(environment)
        path = self.store.write_key(environment, certificate)
        console.success(f"Sealing key saved to {console.highlight(str(path))}")
        return path

    def create(self, descriptor: SecretDescriptor) -> Path | None:
        """Seal a new secret and write its manifest.

        An existing manifest for the same identity is overwritten, which is how
        a secret is recreated from scratch.

        Args:
            descriptor: A fully built descriptor.

        Returns:
            The manifest path, or None if the operator declined.

        """
        path = self._path_for(descriptor)
        plaintext = self._render(descriptor)

        console.warning("You are going to create the following secret")
        console.summary_panel(
            "New Secret",
            self._describe(descriptor, path, Fields=", ".join(descriptor.field_keys) or "-"),
            border_style="yellow",
        )
        if self.store.exists(path):
            console.warning(f"{console.highlight(str(path))} already exists and will be replaced")
        if not self.confirm("Does it look good?"):
            console.warning("Aborted, nothing was written")
            return None

        sealed = self.gateway.seal(plaintext, descriptor.environment, allow_empty_data=False)
        self.store.write(path, sealed)

        console.success(f"The sealed secret was saved to {console.highlight(str(path))}")
        console.info(_GITOPS_HINT)
        return path

    def update(self, descriptor: SecretDescriptor, fields_to_delete: Iterable[str] = ()) -> Path | None:
        """Add, replace or remove fields of an existing manifest.

        Only the newly supplied sources are sealed; every other field of the
        existing manifest is carried forward as ciphertext.

        Args:
            descriptor: A generic descriptor; its sources may be empty.
            fields_to_delete: Field keys to remove from the manifest.

        Returns:
            The manifest path, or None if the operator declined.

        Raises:
            ValidationError: If the descriptor is not a generic secret.
            NoOpError: If there is nothing to add and nothing to delete.
            NotFoundError: If the manifest does not exist.

        """
        if descriptor.secret_type is not SecretType.GENERIC:
            raise ValidationError("Only generic secrets can be updated; use create to replace a tls or docker secret")
        deletions = list(dict.fromkeys(fields_to_delete))
        sources = descriptor.payload.sources
        if not sources and not deletions:
            raise NoOpError(
                "--from-file, --from-literal or -d/--fields-to-delete: at least one is required to update a secret"
            )
        path = self._path_for(descriptor)
        if not self.store.exists(path):
            raise NotFoundError(
                f"Secret manifest {path} does not exist; check the secret name or create it first"
            )

        console.summary_panel(
            "Update Secret",
            self._describe(
                descriptor,
                path,
                Set=", ".join(descriptor.field_keys) or "-",
                Delete=", ".join(deletions) or "-",
            ),
            border_style="yellow",
        )
        if not self.confirm(f"Do you want to update the {descriptor.name} secret?"):
            console.warning("Aborted, nothing was written")
            return None

        existing = self.store.read(path)
        plaintext = self._render(descriptor)
        fragment = self.gateway.seal(plaintext, descriptor.environment, allow_empty_data=True)
        merged = self._merge(existing, fragment, deletions)
        self.store.write(path, merged)

        console.success(f"The sealed secret {console.highlight(str(path))} was updated")
        console.info(_GITOPS_HINT)
        return path

    @staticmethod
    def _merge(existing: dict[str, Any], fragment: dict[str, Any], deletions: list[str]) -> dict[str, Any]:
        known = set(encrypted_fields(existing)) | set(encrypted_fields(fragment))
        for field in deletions:
            if field not in known:
                console.warning(f"Field {console.highlight(field)} is not in the secret, nothing to delete")
        merged = merge_manifests(existing, fragment, deletions)
        ic(encrypted_fields(merged))
        return merged

    def delete(self, descriptor: SecretDescriptor) -> Path | None:
        """Remove a manifest.

        Returns:
            The removed manifest path, or None if the operator declined.

        Raises:
            NotFoundError: If the manifest does not exist.

        """
        path = self._path_for(descriptor)
        if not self.store.exists(path):
            raise NotFoundError(
                f"Secret manifest {path} does not exist; check the secret name, "
                "it may have been created outside this repository"
            )

        console.warning(f"Deleting the secret {console.highlight(descriptor.name)}")
        if not self.confirm(f"Do you want to delete the {descriptor.name} secret?"):
            console.warning("Aborted, nothing was deleted")
            return None

        self.store.delete(path)
        console.success(f"The sealed secret file {console.highlight(str(path))} was deleted")
        console.info(_GITOPS_HINT)
        return path

    def run(
        self,
        operation: Operation,
        environment: Environment,
        descriptor: SecretDescriptor | None = None,
        fields_to_delete: Iterable[str] = (),
    ) -> Path | None:
        """Perform exactly one lifecycle operation.

        Raises:
            ValidationError: If a descriptor is needed but missing.

        """
        ic(operation, environment, descriptor)
        if operation is Operation.FETCH_SEAL_KEY:
            return self.fetch_seal_key(environment)
        if descriptor is None:
            raise ValidationError(f"The {operation.value} operation requires a namespace and a secret name")

        match operation:
            case Operation.CREATE:
                return self.create(descriptor)
            case Operation.UPDATE:
                return self.update(descriptor, fields_to_delete)
            case Operation.DELETE:
                return self.delete(descriptor)
        raise ValidationError(f"Unsupported operation {operation!r}")
