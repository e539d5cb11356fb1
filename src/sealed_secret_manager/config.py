"""Runtime settings for sealed-secret-manager.

Settings are assembled by the CLI from command-line options, each of which
falls back to a ``SECRET_MANAGER_*`` environment variable.
"""

import subprocess
from dataclasses import dataclass
from pathlib import Path

from icecream import ic

from sealed_secret_manager.exceptions import ConfigurationError

DEFAULT_CONTROLLER_NAME = "sealed-secrets"
DEFAULT_CONTROLLER_NAMESPACE = "sealed-secrets"
DEFAULT_KUBESEAL_BINARY = "kubeseal"
DEFAULT_KUBECTL_BINARY = "kubectl"


@dataclass(frozen=True, slots=True)
class Settings:
    """Resolved configuration for one invocation.

    Attributes:
        root: Repository root holding ``manifests/`` and ``keys/``.
        controller_name: Name of the SealedSecrets controller service.
        controller_namespace: Namespace of the SealedSecrets controller.
        context: Kubernetes context used to fetch the sealing key (None: current context).
        kubeseal_binary: kubeseal executable.
        kubectl_binary: kubectl executable.

    """

    root: Path
    controller_name: str = DEFAULT_CONTROLLER_NAME
    controller_namespace: str = DEFAULT_CONTROLLER_NAMESPACE
    context: str | None = None
    kubeseal_binary: str = DEFAULT_KUBESEAL_BINARY
    kubectl_binary: str = DEFAULT_KUBECTL_BINARY


def find_repository_root(start: Path | None = None) -> Path:
    """Locate the top level of the git work tree containing ``start``.

    Args:
        start: Directory to search from. Defaults to the current directory.

    Returns:
        Absolute path of the repository root.

    Raises:
        ConfigurationError: If git is missing or ``start`` is not inside a work tree.

    """
    cmd = ["git", "rev-parse", "--show-toplevel"]
    ic(cmd)
    try:
        result = subprocess.run(
            cmd,
            cwd=start,
            capture_output=True,
            text=True,
            check=True,
        )
    except FileNotFoundError as err:
        raise ConfigurationError("git not found; install git or pass --root") from err
    except subprocess.CalledProcessError as err:
        raise ConfigurationError(
            "Not inside a git repository; run from the GitOps repository or pass --root"
        ) from err

    return Path(result.stdout.strip())
