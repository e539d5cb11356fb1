"""Manifest store.

Maps an (environment, namespace, name) identity onto a file inside the
repository and reads, writes and deletes those files. Writes go through a
temporary file in the target directory followed by an atomic replace, so a
reader never sees a half-written manifest.
"""

import contextlib
import os
import stat
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

import yaml
from icecream import ic

from sealed_secret_manager.exceptions import StoreError
from sealed_secret_manager.models import Environment
from sealed_secret_manager.secrets.parsing import dump_manifest, load_manifest

_MANIFEST_SUFFIX = ".yaml"
_KEY_FILENAME = "seal.pem"


class ManifestStore:
    """File-backed storage for sealed manifests and sealing keys.

    Layout below ``root``::

        manifests/environments/<env>/secrets/<namespace>_<name>.yaml
        keys/<env>/seal.pem

    Namespaces and secret names cannot contain '_', so every identity gets
    its own file.

    Attributes:
        root: Repository root all paths are derived from.

    """

    def __init__(self, root: Path) -> None:
        self.root: Path = Path(root)

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return f"ManifestStore(root={str(self.root)!r})"

    def secrets_dir(self, environment: Environment) -> Path:
        return self.root / "manifests" / "environments" / environment.value / "secrets"

    def manifest_path(self, environment: Environment, namespace: str, name: str) -> Path:
        return self.secrets_dir(environment) / f"{namespace}_{name}{_MANIFEST_SUFFIX}"

    def key_path(self, environment: Environment) -> Path:
        return self.root / "keys" / environment.value / _KEY_FILENAME

    def exists(self, path: Path) -> bool:
        return path.is_file()

    def read(self, path: Path) -> dict[str, Any]:
        """Read and parse the manifest at ``path``.

        Raises:
            StoreError: If the file cannot be read.
            ManifestParsingError: If the file is not a single YAML mapping.

        """
        try:
            text = path.read_text()
        except OSError as err:
            raise StoreError(f"Cannot read manifest '{path}': {err.strerror}") from err
        return load_manifest(text, source=f"Manifest '{path}'")

    def write(self, path: Path, manifest: dict[str, Any]) -> Path:
        """Serialize ``manifest`` and atomically replace the file at ``path``.

        Serialization happens before anything touches the disk. On failure the
        temporary file is removed and the previous content of ``path`` is left
        as it was.

        Raises:
            StoreError: If the directory or file cannot be written.

        """
        if not isinstance(manifest, dict):
            raise StoreError(f"Refusing to write '{path}': manifest is not a mapping")
        try:
            content = dump_manifest(manifest)
        except yaml.YAMLError as err:
            raise StoreError(f"Cannot serialize manifest for '{path}': {err}") from err
        self._write_atomic(path, content.encode())
        return path

    def write_key(self, environment: Environment, key: bytes) -> Path:
        """Store the public sealing key of ``environment``, replacing any previous one."""
        path = self.key_path(environment)
        self._write_atomic(path, key)
        return path

    def delete(self, path: Path) -> None:
        """Remove the manifest at ``path``.

        Raises:
            StoreError: If the file cannot be removed.

        """
        try:
            path.unlink()
        except OSError as err:
            raise StoreError(f"Cannot delete manifest '{path}': {err.strerror}") from err

    @staticmethod
    def _write_atomic(path: Path, data: bytes) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as err:
            raise StoreError(f"Cannot create directory '{path.parent}': {err.strerror}") from err

        # Hidden name without the manifest suffix, never mistaken for a manifest
        tmp_path: Path | None = None
        try:
            with NamedTemporaryFile(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False) as tmp:
                tmp_path = Path(tmp.name)
                ic(tmp_path)
                tmp.write(data)
            os.chmod(tmp_path, _target_mode(path))
            os.replace(tmp_path, path)
        except OSError as err:
            if tmp_path is not None:
                with contextlib.suppress(OSError):
                    tmp_path.unlink(missing_ok=True)
            raise StoreError(f"Cannot write '{path}': {err.strerror}") from err


def _target_mode(path: Path) -> int:
    """Return the permission bits a write to ``path`` should end up with.

    An existing file keeps its mode; a new one gets the default the umask
    allows, as a plain shell redirect would.
    """
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask
