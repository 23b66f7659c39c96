import io

import pytest

from hauler import consts
from hauler.artifacts import Hash
from hauler.layer import StaticLayer, from_opener

DATA = b"some layer content"


def test_from_opener_hashes_and_reads():
    layer = from_opener(lambda: io.BytesIO(DATA))
    assert layer.digest() == Hash.of(DATA)
    assert layer.diff_id() == layer.digest()
    assert layer.size() == len(DATA)
    with layer.compressed() as rc:
        assert rc.read() == DATA
    with layer.uncompressed() as rc:
        assert rc.read() == DATA


def test_from_opener_descriptor():
    layer = from_opener(
        lambda: io.BytesIO(DATA),
        media_type=consts.FILE_LAYER_MEDIA_TYPE,
        annotations={consts.ANNOTATION_TITLE: "f.txt"},
    )
    desc = layer.descriptor()
    assert desc.media_type == consts.FILE_LAYER_MEDIA_TYPE
    assert desc.annotations == {consts.ANNOTATION_TITLE: "f.txt"}
    assert desc.size == len(DATA)
    assert desc.digest == layer.digest()


def test_from_opener_propagates_open_errors(tmp_path):
    missing = tmp_path / "missing"
    with pytest.raises(FileNotFoundError):
        from_opener(lambda: open(missing, "rb"))


def test_static_layer():
    layer = StaticLayer(DATA, "application/x")
    assert layer.digest() == Hash.of(DATA)
    assert layer.compressed().read() == DATA
    assert layer.descriptor().media_type == "application/x"
    assert layer.descriptor().size == len(DATA)