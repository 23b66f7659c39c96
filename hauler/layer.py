"""Layers: blobs with a digest, size and media type."""

from __future__ import annotations

import hashlib
import io
from abc import ABC, abstractmethod
from typing import BinaryIO, Callable

from hauler import consts
from hauler.artifacts import Descriptor, Hash

Opener = Callable[[], BinaryIO]


class Layer(ABC):
    """A blob that can be described and read."""

    def descriptor(self) -> Descriptor:
        return Descriptor(media_type=self.media_type(), size=self.size(), digest=self.digest())

    @abstractmethod
    def digest(self) -> Hash: ...

    @abstractmethod
    def diff_id(self) -> Hash: ...

    @abstractmethod
    def compressed(self) -> BinaryIO: ...

    @abstractmethod
    def uncompressed(self) -> BinaryIO: ...

    @abstractmethod
    def size(self) -> int: ...

    @abstractmethod
    def media_type(self) -> str: ...


class StaticLayer(Layer):
    """A layer held fully in memory."""

    def __init__(self, data: bytes, media_type: str = "") -> None:
        self._data = bytes(data)
        self._media_type = media_type
        self._hash = Hash.of(self._data)

    def descriptor(self) -> Descriptor:
        return Descriptor(media_type=self._media_type, size=len(self._data), digest=self._hash)

    def digest(self) -> Hash:
        return self._hash

    def diff_id(self) -> Hash:
        return self._hash

    def compressed(self) -> BinaryIO:
        return io.BytesIO(self._data)

    def uncompressed(self) -> BinaryIO:
        return io.BytesIO(self._data)

    def size(self) -> int:
        return len(self._data)

    def media_type(self) -> str:
        return self._media_type


def _compute(opener: Opener) -> tuple[Hash, int]:
    h = hashlib.sha256()
    total = 0
    with opener() as stream:
        for chunk in iter(lambda: stream.read(65536), b""):
            h.update(chunk)
            total += len(chunk)
    return Hash("sha256", h.hexdigest()), total


class _OpenerLayer(Layer):
    def __init__(self, opener: Opener, media_type: str, annotations: dict[str, str]) -> None:
        self._opener = opener
        self._media_type = media_type
        self._annotations = annotations
        self._digest, self._size = _compute(opener)
        self._diff_id, _ = _compute(opener)

    def descriptor(self) -> Descriptor:
        return Descriptor(
            media_type=self._media_type,
            size=self._size,
            digest=self._digest,
            annotations=self._annotations,
        )

    def digest(self) -> Hash:
        return self._digest

    def diff_id(self) -> Hash:
        return self._diff_id

    def compressed(self) -> BinaryIO:
        return self._opener()

    def uncompressed(self) -> BinaryIO:
        return self._opener()

    def size(self) -> int:
        return self._size

    def media_type(self) -> str:
        return self._media_type


def from_opener(
    opener: Opener,
    media_type: str = consts.UNKNOWN_LAYER,
    annotations: dict[str, str] | None = None,
) -> Layer:
    """Build a layer whose content is read through ``opener``; hashes it eagerly."""
    return _OpenerLayer(opener, media_type, dict(annotations) if annotations else {})