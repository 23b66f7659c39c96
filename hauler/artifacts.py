"""Content descriptors, manifests and config objects for OCI artifacts."""

from __future__ import annotations

import dataclasses
import hashlib
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from hauler import consts


@dataclass(frozen=True)
class Hash:
    """A content hash such as ``sha256:<hex>``."""

    algorithm: str
    hex: str

    def __str__(self) -> str:
        return f"{self.algorithm}:{self.hex}"

    @classmethod
    def parse(cls, text: str) -> Hash:
        algorithm, sep, hexpart = text.partition(":")
        if not sep or not algorithm or not hexpart:
            raise ValueError(f"cannot parse hash: {text!r}")
        if algorithm == "sha256":
            if len(hexpart) != 64 or any(c not in "0123456789abcdef" for c in hexpart):
                raise ValueError(f"invalid sha256 hex: {hexpart!r}")
        return cls(algorithm, hexpart)

    @classmethod
    def of(cls, data: bytes) -> Hash:
        return cls("sha256", hashlib.sha256(data).hexdigest())


@dataclass
class Descriptor:
    """Describes a blob by media type, size and digest."""

    media_type: str
    size: int
    digest: Hash
    annotations: dict[str, str] | None = None
    urls: list[str] | None = None
    platform: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "mediaType": self.media_type,
            "size": self.size,
            "digest": str(self.digest),
        }
        if self.urls:
            out["urls"] = list(self.urls)
        if self.annotations:
            out["annotations"] = dict(self.annotations)
        if self.platform:
            out["platform"] = dict(self.platform)
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Descriptor:
        return cls(
            media_type=data.get("mediaType", ""),
            size=int(data.get("size", 0)),
            digest=Hash.parse(data["digest"]),
            annotations=dict(data["annotations"]) if data.get("annotations") else None,
            urls=list(data["urls"]) if data.get("urls") else None,
            platform=dict(data["platform"]) if data.get("platform") else None,
        )


@dataclass
class Manifest:
    """An image manifest: one config descriptor and a list of layers."""

    config: Descriptor
    layers: list[Descriptor] = field(default_factory=list)
    media_type: str = consts.OCI_MANIFEST_SCHEMA1
    schema_version: int = 2
    annotations: dict[str, str] | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "schemaVersion": self.schema_version,
            "mediaType": self.media_type,
            "config": self.config.to_dict(),
            "layers": [layer.to_dict() for layer in self.layers],
        }
        if self.annotations:
            out["annotations"] = dict(self.annotations)
        return out

    def to_json(self) -> bytes:
        return json.dumps(self.to_dict(), separators=(",", ":")).encode()


class OCI(ABC):
    """The minimum needed to place an artifact in an OCI layout."""

    @abstractmethod
    def media_type(self) -> str: ...

    @abstractmethod
    def manifest(self) -> Manifest: ...

    @abstractmethod
    def raw_config(self) -> bytes: ...

    @abstractmethod
    def layers(self) -> list: ...


class OCICollection(ABC):
    """A collection of named OCI artifacts."""

    @abstractmethod
    def contents(self) -> dict[str, OCI]: ...


def _encode(obj: Any) -> Any:
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    raise TypeError(f"object of type {type(obj).__name__} is not JSON serializable")


class MarshallableConfig:
    """A config built from any JSON-serialisable object."""

    def __init__(self, obj: Any, media_type: str = "") -> None:
        self.obj = obj
        self._media_type = media_type

    def media_type(self) -> str:
        return self._media_type or consts.UNKNOWN_MANIFEST

    def raw(self) -> bytes:
        return json.dumps(self.obj, separators=(",", ":"), default=_encode).encode()

    def digest(self) -> Hash:
        return digest(self)

    def size(self) -> int:
        return size(self)


def to_config(obj: Any, media_type: str = "") -> MarshallableConfig:
    """Wrap a serialisable object as a config."""
    return MarshallableConfig(obj, media_type)


def digest(config: Any) -> Hash:
    """Digest of a config's raw bytes."""
    return Hash.of(config.raw())


def size(config: Any) -> int:
    """Length of a config's raw bytes."""
    return len(config.raw())


def describe(item: Any) -> Descriptor:
    """Build a descriptor for a layer or config."""
    if hasattr(item, "descriptor"):
        return item.descriptor()
    return Descriptor(media_type=str(item.media_type()), size=item.size(), digest=item.digest())