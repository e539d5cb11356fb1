"""Manifest parsing and serialization.

This module converts between YAML text and the mapping form of a
manifest that the merge engine works on.
"""

from typing import Any

import yaml

from sealed_secret_manager.exceptions import ManifestParsingError


def load_manifest(text: str | bytes, source: str) -> dict[str, Any]:
    """Parse a single-document YAML manifest.

    Args:
        text: The YAML document.
        source: Where the text came from, used in error messages.

    Returns:
        The parsed YAML document as a dictionary.

    Raises:
        ManifestParsingError: If the text is malformed YAML, contains multiple
            documents, is empty, or is not a YAML mapping.

    """
    try:
        docs = [doc for doc in yaml.safe_load_all(text) if doc is not None]
    except yaml.YAMLError as err:
        raise ManifestParsingError(f"{source} contains malformed YAML: {err}") from err

    if len(docs) > 1:
        raise ManifestParsingError(
            f"{source} contains multiple YAML documents. Only single document manifests are supported."
        )
    if not docs:
        raise ManifestParsingError(f"{source} is empty")
    result = docs[0]
    if not isinstance(result, dict):
        raise ManifestParsingError(
            f"{source} does not contain a valid YAML mapping. Expected a Kubernetes resource document."
        )
    return result


def dump_manifest(manifest: dict[str, Any]) -> str:
    """Serialize a manifest to block-style YAML, keeping key order."""
    return yaml.safe_dump(manifest, default_flow_style=False, sort_keys=False)
