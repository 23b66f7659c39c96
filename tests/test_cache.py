import pytest

from hauler.artifacts import OCI, Descriptor, Hash, Manifest
from hauler.cache import FilesystemCache, LayerNotFoundError, oci_cache
from hauler.layer import StaticLayer

DATA = b"cached blob data"


class FakeOCI(OCI):
    def __init__(self, layer):
        self._layer = layer

    def media_type(self):
        return "application/fake"

    def manifest(self):
        return Manifest(config=Descriptor("application/c", 2, Hash.of(b"{}")))

    def raw_config(self):
        return b"{}"

    def layers(self):
        return [self._layer]


def test_get_missing_raises(tmp_path):
    with pytest.raises(LayerNotFoundError):
        FilesystemCache(tmp_path).get(Hash.of(b"nothing"))


def test_put_writes_on_read_then_get(tmp_path):
    cache = FilesystemCache(tmp_path)
    inner = StaticLayer(DATA)
    cached = cache.put(inner)
    with cached.compressed() as rc:
        assert rc.read() == DATA
    path = tmp_path / "sha256" / inner.digest().hex
    assert path.read_bytes() == DATA
    got = cache.get(inner.digest())
    assert got.digest() == inner.digest()
    with got.compressed() as rc:
        assert rc.read() == DATA


def test_oci_cache_lazy_layers(tmp_path):
    inner = StaticLayer(DATA, "application/l")
    wrapped = oci_cache(FakeOCI(inner), FilesystemCache(tmp_path))
    assert wrapped.raw_config() == b"{}"
    assert wrapped.media_type() == "application/fake"
    (layer,) = wrapped.layers()
    assert layer.diff_id() == inner.digest()
    assert layer.media_type() == "application/l"
    assert layer.size() == len(DATA)
    with layer.compressed() as rc:
        assert rc.read() == DATA
    assert (tmp_path / "sha256" / inner.digest().hex).exists()
    with layer.compressed() as rc:
        assert rc.read() == DATA