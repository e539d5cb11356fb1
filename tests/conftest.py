"""Shared test fixtures for sealed-secret-manager tests."""

from pathlib import Path

import pytest
import yaml

from sealed_secret_manager.core.manager import LifecycleManager
from sealed_secret_manager.exceptions import GatewayError
from sealed_secret_manager.models import Environment, LiteralSource
from sealed_secret_manager.store import ManifestStore

FAKE_CERT = b"-----BEGIN CERTIFICATE-----\nZmFrZQ==\n-----END CERTIFICATE-----\n"


class FakeSecretBuilder:
    """In-memory Secret Object Builder rendering plain YAML secrets; generic builds can be made to fail."""

    def __init__(self, *, fail=False):
        self.fail = fail
        self.calls = []

    @staticmethod
    def _render(namespace, name, secret_type, data):
        return yaml.safe_dump(
            {
                "apiVersion": "v1",
                "kind": "Secret",
                "metadata": {"name": name, "namespace": namespace},
                "type": secret_type,
                "data": data or None,
            }
        ).encode()

    def build_generic(self, namespace, name, sources):
        self.calls.append(("generic", namespace, name, tuple(sources)))
        if self.fail:
            raise GatewayError("kubectl failed to create the secret: error: open missing.pem: no such file or directory")
        data = {}
        for source in sources:
            if isinstance(source, LiteralSource):
                data[source.key] = source.value
            else:
                data[source.resolved_key] = f"file:{source.path}"
        return self._render(namespace, name, "Opaque", data)

    def build_tls(self, namespace, name, cert_path, key_path):
        self.calls.append(("tls", namespace, name, cert_path, key_path))
        return self._render(
            namespace, name, "kubernetes.io/tls", {"tls.crt": f"file:{cert_path}", "tls.key": f"file:{key_path}"}
        )

    def build_docker_registry(self, namespace, name, server, username, password, email):
        self.calls.append(("docker", namespace, name, server, username, email))
        return self._render(
            namespace, name, "kubernetes.io/dockerconfigjson", {".dockerconfigjson": f"{server}:{username}:{password}"}
        )


class FakeSealingGateway:
    """In-memory Sealing Gateway; ciphertext is the plaintext prefixed with 'sealed:'."""

    def __init__(self, *, fail=False):
        self.fail = fail
        self.sealed = []
        self.fetched = []

    def fetch_public_key(self, environment):
        self.fetched.append(environment)
        if self.fail:
            raise GatewayError("controller unreachable")
        return FAKE_CERT

    def seal(self, plaintext, environment, *, allow_empty_data):
        self.sealed.append((environment, allow_empty_data))
        if self.fail:
            raise GatewayError("Failed to seal secret with kubeseal (exit code 1)")
        secret = yaml.safe_load(plaintext)
        data = secret.get("data") or {}
        if not data and not allow_empty_data:
            raise GatewayError("Secret has no data")
        return {
            "apiVersion": "bitnami.com/v1alpha1",
            "kind": "SealedSecret",
            "metadata": {
                "creationTimestamp": None,
                "name": secret["metadata"]["name"],
                "namespace": secret["metadata"]["namespace"],
            },
            "spec": {
                "encryptedData": {key: f"sealed:{value}" for key, value in data.items()},
                "template": {
                    "metadata": {
                        "creationTimestamp": None,
                        "name": secret["metadata"]["name"],
                        "namespace": secret["metadata"]["namespace"],
                    },
                    "type": secret["type"],
                },
            },
        }


class Approver:
    """Confirmation gate returning a fixed answer and recording the questions."""

    def __init__(self, answer):
        self.answer = answer
        self.questions = []

    def __call__(self, message):
        self.questions.append(message)
        return self.answer


@pytest.fixture
def repo_root(tmp_path) -> Path:
    """An empty GitOps repository root."""
    return tmp_path


@pytest.fixture
def store(repo_root):
    """Manifest store rooted in a temporary directory."""
    return ManifestStore(repo_root)


@pytest.fixture
def builder():
    return FakeSecretBuilder()


@pytest.fixture
def gateway():
    return FakeSealingGateway()


@pytest.fixture
def approve():
    return Approver(True)


@pytest.fixture
def manager(store, builder, gateway, approve):
    """LifecycleManager wired with in-memory collaborators that approves everything."""
    return LifecycleManager(store=store, builder=builder, gateway=gateway, confirm=approve)


@pytest.fixture
def sealed_key(store):
    """A stored sealing certificate for the dev environment."""
    return store.write_key(Environment.DEV, FAKE_CERT)


@pytest.fixture
def sample_sealed_secret_yaml():
    """Sample sealed secret YAML content."""
    return """apiVersion: bitnami.com/v1alpha1
kind: SealedSecret
metadata:
  name: test-secret
  namespace: default
spec:
  encryptedData:
    username: AgBy8hCi...
    password: AgCx91Dd...
  template:
    metadata:
      name: test-secret
      namespace: default
    type: Opaque
"""
