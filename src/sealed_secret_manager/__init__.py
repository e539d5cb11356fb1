"""sealed-secret-manager: lifecycle of sealed secret manifests in a GitOps repository.

This package builds Kubernetes secrets from operator input, seals them with
kubeseal and creates, merges or deletes the resulting SealedSecret manifests
so they can be committed and reconciled by a deployment controller.

Example usage:
    from sealed_secret_manager import LifecycleManager, ManifestStore, merge_manifests

    # Fold a freshly sealed fragment into an existing manifest
    merged = merge_manifests(existing, fragment, deletions={"old-key"})
"""

__version__ = "0.1.0"

from sealed_secret_manager.cli import cli
from sealed_secret_manager.core.manager import LifecycleManager
from sealed_secret_manager.descriptor import build_descriptor
from sealed_secret_manager.exceptions import (
    ConfigurationError,
    GatewayError,
    ManifestParsingError,
    MissingInputError,
    NoOpError,
    NotFoundError,
    SecretManagerError,
    StoreError,
    ValidationError,
)
from sealed_secret_manager.merge import merge_manifests
from sealed_secret_manager.models import Environment, Operation, SecretDescriptor, SecretType
from sealed_secret_manager.store import ManifestStore

__all__ = [
    # Version
    "__version__",
    # Main CLI
    "cli",
    # Core
    "LifecycleManager",
    "ManifestStore",
    "build_descriptor",
    "merge_manifests",
    # Models
    "Environment",
    "Operation",
    "SecretDescriptor",
    "SecretType",
    # Exceptions
    "SecretManagerError",
    "ValidationError",
    "MissingInputError",
    "NoOpError",
    "NotFoundError",
    "GatewayError",
    "StoreError",
    "ManifestParsingError",
    "ConfigurationError",
]
