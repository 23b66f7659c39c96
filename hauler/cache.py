"""Layer caches, including one backed by the filesystem."""

from __future__ import annotations

import io
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO

from hauler.artifacts import OCI, Hash, Manifest
from hauler.layer import Layer, from_opener


class LayerNotFoundError(LookupError):
    """Raised when a cache holds no layer for a hash."""


class Cache(ABC):
    """Stores and retrieves layers by hash."""

    @abstractmethod
    def put(self, layer: Layer) -> Layer: ...

    @abstractmethod
    def get(self, digest: Hash) -> Layer: ...


class LazyLayer(Layer):
    """Reads a layer through a cache, filling the cache on a miss."""

    def __init__(self, inner: Layer, cache: Cache) -> None:
        self._inner = inner
        self._cache = cache

    def _get_or_put(self, h: Hash) -> Layer:
        try:
            return self._cache.get(h)
        except LayerNotFoundError:
            return self._cache.put(self._inner)

    def compressed(self) -> BinaryIO:
        return self._get_or_put(self._inner.digest()).compressed()

    def uncompressed(self) -> BinaryIO:
        return self._get_or_put(self._inner.diff_id()).uncompressed()

    def size(self) -> int:
        return self._inner.size()

    def diff_id(self) -> Hash:
        return self._inner.digest()

    def digest(self) -> Hash:
        return self._inner.digest()

    def media_type(self) -> str:
        return self._inner.media_type()


class CachedOCI(OCI):
    """An OCI artifact whose layers are read through a cache."""

    def __init__(self, oci: OCI, cache: Cache) -> None:
        self._oci = oci
        self._cache = cache

    def media_type(self) -> str:
        return self._oci.media_type()

    def manifest(self) -> Manifest:
        return self._oci.manifest()

    def raw_config(self) -> bytes:
        return self._oci.raw_config()

    def layers(self) -> list[Layer]:
        return [LazyLayer(layer, self._cache) for layer in self._oci.layers()]


def oci_cache(oci: OCI, cache: Cache) -> CachedOCI:
    """Wrap an artifact so its layers go through ``cache``."""
    return CachedOCI(oci, cache)


def _layer_path(root: Path, h: Hash) -> Path:
    return root / h.algorithm / h.hex


class _TeeReader(io.RawIOBase):
    def __init__(self, source: BinaryIO, sink: BinaryIO) -> None:
        self._source = source
        self._sink = sink

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        data = self._source.read(len(buffer))
        n = len(data)
        buffer[:n] = data
        if n:
            self._sink.write(data)
        return n

    def close(self) -> None:
        if not self.closed:
            try:
                self._source.close()
            finally:
                self._sink.close()
        super().close()


class CachedLayer(Layer):
    """A layer that writes its content into the cache as it is read."""

    def __init__(self, layer: Layer, root: Path, digest: Hash, diff_id: Hash) -> None:
        self._layer = layer
        self._root = root
        self._digest = digest
        self._diff_id = diff_id

    def _create(self, h: Hash) -> BinaryIO:
        path = _layer_path(self._root, h)
        path.parent.mkdir(parents=True, exist_ok=True)
        return open(path, "wb")

    def compressed(self) -> BinaryIO:
        sink = self._create(self._digest)
        try:
            source = self._layer.compressed()
        except BaseException:
            sink.close()
            raise
        return _TeeReader(source, sink)

    def uncompressed(self) -> BinaryIO:
        sink = self._create(self._diff_id)
        try:
            source = self._layer.uncompressed()
        except BaseException:
            sink.close()
            raise
        return _TeeReader(source, sink)

    def digest(self) -> Hash:
        return self._digest

    def diff_id(self) -> Hash:
        return self._diff_id

    def size(self) -> int:
        return self._layer.size()

    def media_type(self) -> str:
        return self._layer.media_type()


class FilesystemCache(Cache):
    """Caches layers as files under ``root/<algorithm>/<hex>``."""

    def __init__(self, root: str | os.PathLike) -> None:
        self.root = Path(root)

    def put(self, layer: Layer) -> Layer:
        return CachedLayer(layer, self.root, layer.digest(), layer.diff_id())

    def get(self, digest: Hash) -> Layer:
        path = _layer_path(self.root, digest)
        try:
            return from_opener(lambda: open(path, "rb"))
        except FileNotFoundError:
            raise LayerNotFoundError(f"layer not found: {digest}") from None