"""An OCI image layout on disk whose index entries are addressed by reference."""

from __future__ import annotations

import dataclasses
import hashlib
import json
import os
from pathlib import Path
from typing import Any, BinaryIO, Callable

from hauler import consts
from hauler.artifacts import Descriptor, Hash, Manifest
from hauler.reference import Digest, Tag, parse

_MANIFEST_MEDIA_TYPES = frozenset(
    {
        consts.OCI_MANIFEST_SCHEMA1,
        consts.OCI_IMAGE_INDEX_SCHEMA,
        consts.DOCKER_MANIFEST_SCHEMA2,
        consts.DOCKER_MANIFEST_LIST_SCHEMA2,
    }
)


class DigestMismatchError(ValueError):
    """Raised when written content does not match its expected digest."""


class BlobWriter:
    """Writes a blob while hashing it; verifies the digest on close.

    Without a sink the content is discarded, but the digest is still checked.
    """

    def __init__(self, expected: Hash, sink: BinaryIO | None = None) -> None:
        self.expected = expected
        self._sink = sink
        self._hash = hashlib.new(expected.algorithm)
        self._closed = False

    def write(self, data: bytes) -> int:
        self._hash.update(data)
        if self._sink is not None:
            self._sink.write(data)
        return len(data)

    def _close_sink(self) -> None:
        if self._sink is not None:
            self._sink.close()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._close_sink()
        actual = Hash(self.expected.algorithm, self._hash.hexdigest())
        if actual != self.expected:
            raise DigestMismatchError(
                f"digest mismatch: expected {self.expected}, got {actual}"
            )

    def __enter__(self) -> BlobWriter:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.close()
        elif not self._closed:
            self._closed = True
            self._close_sink()


class OCIPusher:
    """Writes blobs into a store, registering the root manifest under a reference."""

    def __init__(self, store: OCIStore, ref: str, digest: str = "") -> None:
        self.store = store
        self.ref = ref
        self.digest = digest

    def push(self, desc: Descriptor) -> BlobWriter:
        """Return a writer for the blob described by ``desc``."""
        if desc.media_type in _MANIFEST_MEDIA_TYPES:
            if self.digest and self.digest == str(desc.digest):
                self.store.load_index()
                self.store._name_map[self.ref] = desc
                self.store.save_index()

        blob_path = self.store._ensure_blob(desc.digest.algorithm, desc.digest.hex)
        if blob_path.exists():
            return BlobWriter(desc.digest)
        return BlobWriter(desc.digest, open(blob_path, "wb"))


class OCIStore:
    """An OCI layout rooted at a directory, with an index keyed by reference."""

    def __init__(self, root: str | os.PathLike) -> None:
        self.root = Path(root)
        self.index: dict[str, Any] | None = None
        self._name_map: dict[str, Descriptor] = {}

    def _path(self, *elem: str) -> Path:
        return self.root.joinpath(*elem)

    def _store_descriptor(self, desc: Descriptor) -> None:
        annotations = desc.annotations or {}
        key = parse(annotations.get(consts.ANNOTATION_REF_NAME, ""))
        if str(key).strip() == "--":
            return
        kind = annotations.get(consts.KIND_ANNOTATION_NAME, "")
        if isinstance(key, Digest):
            self._name_map[f"{key.context()}-{kind}"] = desc
        elif isinstance(key, Tag):
            self._name_map[f"{key}-{kind}"] = desc

    def add_index(self, desc: Descriptor) -> None:
        """Add a descriptor, identified by its ref-name annotation, and save the index."""
        if consts.ANNOTATION_REF_NAME not in (desc.annotations or {}):
            raise ValueError(
                "descriptor must contain a reference from the annotation: "
                f"{consts.ANNOTATION_REF_NAME}"
            )
        self._store_descriptor(desc)
        self.save_index()

    def load_index(self) -> None:
        """Load the index from disk, starting an empty one when there is none."""
        try:
            with open(self._path(consts.IMAGE_INDEX_FILE), "rb") as fh:
                self.index = json.load(fh)
        except FileNotFoundError:
            self.index = {"schemaVersion": 2}
            return
        for entry in self.index.get("manifests") or []:
            self._store_descriptor(Descriptor.from_dict(entry))

    def save_index(self) -> None:
        """Write the index to disk, images ahead of signatures and attestations."""
        if self.index is None:
            self.load_index()
        descs = []
        for desc in self._name_map.values():
            ref_name = (desc.annotations or {}).get(consts.ANNOTATION_REF_NAME, "")
            annotations = dict(desc.annotations or {})
            annotations[consts.ANNOTATION_REF_NAME] = ref_name
            descs.append(dataclasses.replace(desc, annotations=annotations))

        descs.sort(
            key=lambda d: not d.annotations.get(consts.KIND_ANNOTATION_NAME, "").startswith(
                consts.KIND_ANNOTATION_IMAGE
            )
        )
        self.index["manifests"] = [d.to_dict() for d in descs]
        data = json.dumps(self.index, separators=(",", ":")).encode()
        self._path(consts.IMAGE_INDEX_FILE).write_bytes(data)

    def resolve(self, ref: str) -> tuple[str, Descriptor]:
        """Return the name and descriptor stored under ``ref``."""
        self.load_index()
        try:
            return ref, self._name_map[ref]
        except KeyError:
            raise KeyError(f"reference not found: {ref}") from None

    def fetcher(self, ref: str) -> OCIStore | None:
        """Return a fetcher for ``ref``, or None when it is unknown."""
        self.load_index()
        if ref not in self._name_map:
            return None
        return self

    def fetch(self, desc: Descriptor) -> BinaryIO:
        """Open the blob described by ``desc``."""
        return open(self._ensure_blob(desc.digest.algorithm, desc.digest.hex), "rb")

    def fetch_manifest(self, manifest: Manifest) -> BinaryIO:
        """Open the config blob of ``manifest``."""
        digest = manifest.config.digest
        return open(self._ensure_blob(digest.algorithm, digest.hex), "rb")

    def pusher(self, ref: str) -> OCIPusher:
        """Return a pusher; a ``ref@digest`` marks the digest of the root manifest."""
        self.load_index()
        base, _, digest = ref.partition("@")
        return OCIPusher(self, base, digest)

    def walk(self, fn: Callable[[str, Descriptor], Any]) -> None:
        """Call ``fn`` for every reference; failures are collected and raised together."""
        self.load_index()
        errors = []
        for key, desc in list(self._name_map.items()):
            try:
                fn(key, desc)
            except Exception as exc:
                errors.append(str(exc))
        if errors:
            raise RuntimeError("; ".join(errors))

    def _ensure_blob(self, algorithm: str, hex_digest: str) -> Path:
        directory = self._path(consts.IMAGE_BLOBS_DIR, algorithm)
        directory.mkdir(parents=True, exist_ok=True)
        return directory / hex_digest