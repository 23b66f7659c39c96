import hashlib
import json
import os

from hauler import consts
from hauler.memory_artifact import Memory


def _setup():
    block = os.urandom(2048)
    return block, Memory(block, "random")


def test_layers_preserve_content():
    data, mem = _setup()
    layers = mem.layers()
    assert len(layers) == 1
    assert str(layers[0].digest()) == "sha256:" + hashlib.sha256(data).hexdigest()
    with layers[0].compressed() as stream:
        assert stream.read() == data


def test_manifest_describes_blob():
    data, mem = _setup()
    manifest = mem.manifest()
    assert manifest.media_type == consts.OCI_MANIFEST_SCHEMA1
    assert manifest.schema_version == 2
    assert len(manifest.layers) == 1
    assert manifest.layers[0].size == 2048
    assert manifest.layers[0].media_type == "random"
    assert manifest.annotations is None


def test_default_config():
    _, mem = _setup()
    raw = mem.raw_config()
    assert json.loads(raw) == {"mediaType": consts.MEMORY_CONFIG_MEDIA_TYPE}
    cfg = mem.manifest().config
    assert cfg.media_type == consts.UNKNOWN_MANIFEST
    assert cfg.size == len(raw)
    assert cfg.digest.hex == hashlib.sha256(raw).hexdigest()


def test_custom_config_and_annotations():
    mem = Memory(
        b"abc",
        "text/plain",
        config={"name": "thing"},
        config_media_type="application/x-test+json",
        annotations={"k": "v"},
    )
    assert json.loads(mem.raw_config()) == {"name": "thing"}
    manifest = mem.manifest()
    assert manifest.config.media_type == "application/x-test+json"
    assert manifest.annotations == {"k": "v"}
    assert manifest.to_dict()["annotations"] == {"k": "v"}


def test_media_type():
    _, mem = _setup()
    assert mem.media_type() == "application/vnd.oci.image.manifest.v1+json"