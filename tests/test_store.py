"""Tests for store.py and secrets/parsing.py modules."""

import os
import stat
from unittest.mock import patch

import pytest

from sealed_secret_manager.exceptions import ManifestParsingError, StoreError
from sealed_secret_manager.models import Environment
from sealed_secret_manager.secrets.parsing import dump_manifest, load_manifest
from sealed_secret_manager.store import ManifestStore


class TestPaths:
    """Tests for the on-disk layout."""

    def test_manifest_path(self, store, repo_root):
        """Test the manifest path is derived from the identity triple."""
        path = store.manifest_path(Environment.STAGE, "web", "app")
        assert path == repo_root / "manifests" / "environments" / "stage" / "secrets" / "web_app.yaml"

    def test_identities_do_not_collide(self, store):
        """Test dashes in namespace and name cannot produce the same file."""
        assert store.manifest_path(Environment.DEV, "a-b", "c") != store.manifest_path(Environment.DEV, "a", "b-c")

    def test_environments_are_separated(self, store):
        assert store.manifest_path(Environment.DEV, "web", "app") != store.manifest_path(
            Environment.PROD, "web", "app"
        )

    def test_key_path(self, store, repo_root):
        assert store.key_path(Environment.QA) == repo_root / "keys" / "qa" / "seal.pem"


class TestReadWrite:
    """Tests for reading, writing and deleting manifests."""

    def test_write_then_read(self, store):
        """Test a written manifest reads back equal, key order included."""
        path = store.manifest_path(Environment.DEV, "web", "app")
        manifest = {"kind": "SealedSecret", "metadata": {"name": "app"}, "spec": {"encryptedData": {"b": "1", "a": "2"}}}

        store.write(path, manifest)

        assert store.exists(path)
        read = store.read(path)
        assert read == manifest
        assert list(read["spec"]["encryptedData"]) == ["b", "a"]

    def test_write_replaces(self, store):
        path = store.manifest_path(Environment.DEV, "web", "app")
        store.write(path, {"v": 1})
        store.write(path, {"v": 2})
        assert store.read(path) == {"v": 2}

    def test_write_leaves_no_temp_files(self, store):
        """Test only the manifest remains in the secrets directory."""
        path = store.manifest_path(Environment.DEV, "web", "app")
        store.write(path, {"v": 1})
        assert [p.name for p in path.parent.iterdir()] == ["web_app.yaml"]

    def test_write_keeps_existing_mode(self, store):
        """Test rewriting a manifest keeps its permission bits."""
        path = store.manifest_path(Environment.DEV, "web", "app")
        store.write(path, {"v": 1})
        path.chmod(0o640)

        store.write(path, {"v": 2})

        assert stat.S_IMODE(path.stat().st_mode) == 0o640

    def test_new_manifest_follows_umask(self, store):
        """Test a new manifest gets the umask default instead of an owner-only mode."""
        path = store.manifest_path(Environment.DEV, "web", "app")
        previous = os.umask(0o022)
        try:
            store.write(path, {"v": 1})
        finally:
            os.umask(previous)

        assert stat.S_IMODE(path.stat().st_mode) == 0o644

    def test_failed_replace_keeps_original(self, store):
        """Test a failing write leaves the previous manifest and no temp file."""
        path = store.manifest_path(Environment.DEV, "web", "app")
        store.write(path, {"v": 1})

        with patch("sealed_secret_manager.store.os.replace", side_effect=OSError(13, "Permission denied")):
            with pytest.raises(StoreError, match="Permission denied"):
                store.write(path, {"v": 2})

        assert store.read(path) == {"v": 1}
        assert [p.name for p in path.parent.iterdir()] == ["web_app.yaml"]

    def test_failed_serialization_writes_nothing(self, store):
        """Test a manifest that cannot be serialized never reaches the disk."""
        path = store.manifest_path(Environment.DEV, "web", "app")
        store.write(path, {"v": 1})

        with pytest.raises(StoreError, match="Cannot serialize"):
            store.write(path, {"v": object()})

        assert store.read(path) == {"v": 1}

    def test_write_rejects_non_mapping(self, store):
        path = store.manifest_path(Environment.DEV, "web", "app")
        with pytest.raises(StoreError, match="not a mapping"):
            store.write(path, ["not", "a", "mapping"])  # type: ignore[arg-type]
        assert not path.exists()

    def test_read_missing(self, store):
        """Test reading a missing manifest raises StoreError."""
        with pytest.raises(StoreError, match="Cannot read"):
            store.read(store.manifest_path(Environment.DEV, "web", "missing"))

    def test_read_sample(self, store, sample_sealed_secret_yaml):
        path = store.manifest_path(Environment.DEV, "default", "test-secret")
        path.parent.mkdir(parents=True)
        path.write_text(sample_sealed_secret_yaml)

        manifest = store.read(path)
        assert manifest["spec"]["encryptedData"]["username"] == "AgBy8hCi..."

    def test_delete(self, store):
        path = store.manifest_path(Environment.DEV, "web", "app")
        store.write(path, {"v": 1})
        store.delete(path)
        assert not store.exists(path)

    def test_delete_missing(self, store):
        with pytest.raises(StoreError, match="Cannot delete"):
            store.delete(store.manifest_path(Environment.DEV, "web", "app"))

    def test_write_key_overwrites(self, store):
        """Test storing a sealing key replaces the previous one."""
        store.write_key(Environment.DEV, b"old")
        path = store.write_key(Environment.DEV, b"new")
        assert path.read_bytes() == b"new"

    def test_repr(self, repo_root):
        assert repr(ManifestStore(repo_root)) == f"ManifestStore(root={str(repo_root)!r})"


class TestParsing:
    """Tests for manifest (de)serialization."""

    def test_load_manifest(self, sample_sealed_secret_yaml):
        manifest = load_manifest(sample_sealed_secret_yaml, "sample")
        assert manifest["kind"] == "SealedSecret"

    def test_load_multiple_documents(self):
        """Test multi-document YAML is rejected."""
        with pytest.raises(ManifestParsingError, match="multiple YAML documents"):
            load_manifest("---\nkind: A\n---\nkind: B\n", "multi.yaml")

    def test_load_empty(self):
        with pytest.raises(ManifestParsingError, match="empty"):
            load_manifest("", "empty.yaml")

    def test_load_malformed(self):
        with pytest.raises(ManifestParsingError, match="malformed YAML"):
            load_manifest("apiVersion: v1\nmetadata: [:", "malformed.yaml")

    def test_load_list(self):
        with pytest.raises(ManifestParsingError, match="valid YAML mapping"):
            load_manifest("- kind: SealedSecret\n", "list.yaml")

    def test_dump_keeps_order(self):
        """Test serialization keeps key order and block style."""
        text = dump_manifest({"kind": "SealedSecret", "apiVersion": "v1", "spec": {"encryptedData": {"z": "1"}}})
        assert text.splitlines() == ["kind: SealedSecret", "apiVersion: v1", "spec:", "  encryptedData:", "    z: '1'"]
