"""Merge engine for sealed manifests.

An update seals only the newly supplied fields, so the resulting fragment has
to be folded into the manifest already on disk. The merge is a recursive,
right-biased union of mappings: anything that is not a mapping (scalars,
lists, ciphertext blobs) is a leaf and the incoming side wins. Field deletions
are applied afterwards and only ever touch the ``encryptedData`` mapping.

None of the functions here mutate their arguments.
"""

import copy
from collections.abc import Iterable, Mapping
from typing import Any

_ENCRYPTED_DATA = "encryptedData"


def deep_merge(base: Mapping[str, Any], incoming: Mapping[str, Any]) -> dict[str, Any]:
    """Merge ``incoming`` into ``base`` and return a new mapping.

    Keys keep the order of ``base``; keys only present in ``incoming`` are
    appended in their own order. A null incoming ``encryptedData`` means no
    new fields (kubeseal renders an empty one as null) and keeps the base
    mapping; any other null is an ordinary leaf and wins.

    Args:
        base: The existing document.
        incoming: The document whose values take precedence.

    Returns:
        A freshly allocated merged document.

    """
    merged: dict[str, Any] = {}
    for key, value in base.items():
        if key not in incoming:
            merged[key] = copy.deepcopy(value)
            continue
        other = incoming[key]
        if other is None and key == _ENCRYPTED_DATA:
            merged[key] = copy.deepcopy(value)
        elif isinstance(value, Mapping) and isinstance(other, Mapping):
            merged[key] = deep_merge(value, other)
        else:
            merged[key] = copy.deepcopy(other)

    for key, value in incoming.items():
        if key not in merged:
            merged[key] = copy.deepcopy(value)

    return merged


def _encrypted_data(manifest: Mapping[str, Any]) -> Any:
    """Return the encryptedData mapping of a manifest, or None.

    SealedSecrets keep it under ``spec``; bare fragments may carry it at the
    top level.
    """
    spec = manifest.get("spec")
    if isinstance(spec, Mapping) and _ENCRYPTED_DATA in spec:
        return spec[_ENCRYPTED_DATA]
    return manifest.get(_ENCRYPTED_DATA)


def encrypted_fields(manifest: Mapping[str, Any] | None) -> list[str]:
    """List the sealed field keys of a manifest."""
    if not manifest:
        return []
    data = _encrypted_data(manifest)
    if not isinstance(data, Mapping):
        return []
    return list(data)


def apply_deletions(manifest: Mapping[str, Any], fields: Iterable[str]) -> dict[str, Any]:
    """Return a copy of ``manifest`` without the given encrypted fields.

    Fields that are not present are ignored.
    """
    result = copy.deepcopy(dict(manifest))
    data = _encrypted_data(result)
    if isinstance(data, dict):
        for field in fields:
            data.pop(field, None)
    return result


def merge_manifests(
    existing: Mapping[str, Any] | None,
    incoming: Mapping[str, Any] | None,
    deletions: Iterable[str] = (),
) -> dict[str, Any]:
    """Merge a freshly sealed fragment into an existing manifest.

    Args:
        existing: Manifest currently on disk (None when there is none).
        incoming: Fragment produced by sealing the new key sources.
        deletions: Field keys to drop from the merged encryptedData.

    Returns:
        The merged manifest. Deletions win over incoming values.

    """
    merged = deep_merge(existing or {}, incoming or {})
    return apply_deletions(merged, deletions)
