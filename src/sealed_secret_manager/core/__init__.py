"""Core orchestration subpackage.

This package contains the LifecycleManager facade which performs the
fetch-seal-key, create, update and delete operations.
"""

from sealed_secret_manager.core.manager import LifecycleManager

__all__ = [
    "LifecycleManager",
]
