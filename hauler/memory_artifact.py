"""An OCI artifact holding a set of bytes in memory."""

from __future__ import annotations

from typing import Any

from hauler import consts
from hauler.artifacts import OCI, Manifest, describe, to_config
from hauler.layer import Layer, StaticLayer


class Memory(OCI):
    """Bytes in memory exposed as a single-layer artifact."""

    def __init__(
        self,
        data: bytes,
        media_type: str,
        *,
        config: Any = None,
        config_media_type: str = "",
        annotations: dict[str, str] | None = None,
    ) -> None:
        self._blob = StaticLayer(data, media_type)
        if config is None:
            self._config = to_config({"mediaType": consts.MEMORY_CONFIG_MEDIA_TYPE})
        else:
            self._config = to_config(config, config_media_type)
        self._annotations = annotations

    def media_type(self) -> str:
        return consts.OCI_MANIFEST_SCHEMA1

    def manifest(self) -> Manifest:
        return Manifest(
            config=describe(self._config),
            layers=[describe(self._blob)],
            media_type=self.media_type(),
            schema_version=2,
            annotations=self._annotations,
        )

    def raw_config(self) -> bytes:
        if self._config is None:
            return b"{}"
        return self._config.raw()

    def layers(self) -> list[Layer]:
        return [self._blob]