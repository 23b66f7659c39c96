"""A content store: an OCI layout that artifacts are added to and copied from."""

from __future__ import annotations

import json
import os
import shutil
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable

from hauler import consts
from hauler.artifacts import OCI, Descriptor, Hash, OCICollection
from hauler.cache import Cache, oci_cache
from hauler.layer import Layer, StaticLayer
from hauler.oci import OCIStore

_MANIFEST_TYPES = frozenset({consts.OCI_MANIFEST_SCHEMA1, consts.DOCKER_MANIFEST_SCHEMA2})
_INDEX_TYPES = frozenset({consts.OCI_IMAGE_INDEX_SCHEMA, consts.DOCKER_MANIFEST_LIST_SCHEMA2})


def _remove_all(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()


def _children(desc: Descriptor, data: bytes) -> list[Descriptor]:
    if desc.media_type in _MANIFEST_TYPES:
        doc = json.loads(data)
        found = []
        if doc.get("config"):
            found.append(Descriptor.from_dict(doc["config"]))
        found.extend(Descriptor.from_dict(d) for d in doc.get("layers") or [])
        return found
    if desc.media_type in _INDEX_TYPES:
        doc = json.loads(data)
        return [Descriptor.from_dict(d) for d in doc.get("manifests") or []]
    return []


class Layout(OCIStore):
    """An OCI layout store with an optional layer cache."""

    def __init__(self, root: str | os.PathLike, cache: Cache | None = None) -> None:
        super().__init__(root)
        self._cache = cache
        self.load_index()

    def add_oci(self, oci: OCI, ref: str) -> Descriptor:
        """Write an artifact's manifest, config and layers and index it under ``ref``."""
        if self._cache is not None:
            oci = oci_cache(oci, self._cache)

        manifest = oci.manifest()
        mdata = manifest.to_json()
        self._write_blob_data(mdata)

        self._write_blob_data(oci.raw_config())

        layers = oci.layers()
        if layers:
            with ThreadPoolExecutor() as pool:
                futures = [pool.submit(self._write_layer, layer) for layer in layers]
                for future in futures:
                    future.result()

        desc = Descriptor(
            media_type=manifest.media_type,
            size=len(mdata),
            digest=Hash.of(mdata),
            annotations={
                consts.KIND_ANNOTATION_NAME: consts.KIND_ANNOTATION_IMAGE,
                consts.ANNOTATION_REF_NAME: ref,
            },
        )
        self.add_index(desc)
        return desc

    def add_oci_collection(self, collection: OCICollection) -> list[Descriptor]:
        """Add every artifact of a collection, keyed by its reference."""
        return [self.add_oci(oci, ref) for ref, oci in collection.contents().items()]

    def flush(self) -> None:
        """Delete the layout's blobs, index and layout file, and nothing else."""
        _remove_all(self.root / consts.IMAGE_BLOBS_DIR)
        _remove_all(self.root / consts.IMAGE_INDEX_FILE)
        _remove_all(self.root / consts.IMAGE_LAYOUT_FILE)

    def copy(self, ref: str, to: Any, to_ref: str = "") -> Descriptor:
        """Copy ``ref`` and everything it references into the target ``to``."""
        _, root = self.resolve(ref)
        fetcher = self.fetcher(ref)
        if fetcher is None:
            raise KeyError(f"reference not found: {ref}")
        pusher = to.pusher(f"{to_ref or ref}@{root.digest}")
        self._copy_node(fetcher, pusher, root, set())
        return root

    def _copy_node(self, fetcher: Any, pusher: Any, desc: Descriptor, seen: set[str]) -> None:
        seen.add(str(desc.digest))
        with fetcher.fetch(desc) as src:
            data = src.read()
        for child in _children(desc, data):
            if str(child.digest) not in seen:
                self._copy_node(fetcher, pusher, child, seen)
        with pusher.push(desc) as writer:
            writer.write(data)

    def copy_all(
        self, to: Any, to_mapper: Callable[[str], str] | None = None
    ) -> list[Descriptor]:
        """Copy every reference in the store to ``to``, renaming through ``to_mapper``."""
        descs: list[Descriptor] = []

        def copy_one(reference: str, _desc: Descriptor) -> None:
            to_ref = to_mapper(reference) if to_mapper is not None else ""
            descs.append(self.copy(reference, to, to_ref))

        self.walk(copy_one)
        return descs

    def identify(self, desc: Descriptor) -> str:
        """Config media type of the manifest behind ``desc``, or "" if unknown."""
        try:
            with self.fetch(desc) as fh:
                doc = json.load(fh)
        except (OSError, ValueError):
            return ""
        if not isinstance(doc, dict):
            return ""
        config = doc.get("config")
        if not isinstance(config, dict):
            return ""
        media_type = config.get("mediaType", "")
        return media_type if isinstance(media_type, str) else ""

    def _write_blob_data(self, data: bytes) -> None:
        self._write_layer(StaticLayer(data))

    def _write_layer(self, layer: Layer) -> None:
        digest = layer.digest()
        directory = self.root / consts.IMAGE_BLOBS_DIR / digest.algorithm
        directory.mkdir(parents=True, exist_ok=True)
        blob_path = directory / digest.hex
        if blob_path.exists():
            return
        with layer.compressed() as src, open(blob_path, "wb") as dst:
            shutil.copyfileobj(src, dst)