"""External collaborators subpackage.

This package contains the kubectl Secret Object Builder, the kubeseal
Sealing Gateway, manifest (de)serialization and the confirmation prompts.
"""

from sealed_secret_manager.secrets.base import Confirm, SealingGateway, SecretObjectBuilder
from sealed_secret_manager.secrets.creation import KubectlSecretBuilder
from sealed_secret_manager.secrets.parsing import dump_manifest, load_manifest
from sealed_secret_manager.secrets.prompts import auto_approve, confirm
from sealed_secret_manager.secrets.sealing import KubesealGateway

__all__ = [
    # interfaces
    "Confirm",
    "SealingGateway",
    "SecretObjectBuilder",
    # implementations
    "KubectlSecretBuilder",
    "KubesealGateway",
    # parsing
    "load_manifest",
    "dump_manifest",
    # prompts
    "confirm",
    "auto_approve",
]
