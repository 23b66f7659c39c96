import json

import pytest

from hauler import consts
from hauler.artifacts import (
    Descriptor,
    Hash,
    Manifest,
    MarshallableConfig,
    describe,
    digest,
    size,
    to_config,
)

EMPTY_SHA = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


def test_hash_of_empty():
    assert str(Hash.of(b"")) == "sha256:" + EMPTY_SHA


def test_hash_parse_round_trip():
    h = Hash.of(b"hello")
    assert Hash.parse(str(h)) == h


@pytest.mark.parametrize("text", ["nocolon", "sha256:xyz", ":abc"])
def test_hash_parse_invalid(text):
    with pytest.raises(ValueError):
        Hash.parse(text)


def test_config_raw_and_helpers():
    cfg = to_config({"a": 1}, media_type=consts.FILE_LOCAL_CONFIG_MEDIA_TYPE)
    assert cfg.raw() == b'{"a":1}'
    assert cfg.size() == len(cfg.raw()) == size(cfg)
    assert cfg.digest() == Hash.of(cfg.raw()) == digest(cfg)
    assert cfg.media_type() == consts.FILE_LOCAL_CONFIG_MEDIA_TYPE


def test_describe_config():
    cfg = MarshallableConfig({"reference": "x"}, "application/x")
    desc = describe(cfg)
    assert desc.media_type == "application/x"
    assert desc.size == cfg.size()
    assert desc.digest == cfg.digest()


def test_descriptor_round_trip():
    d = Descriptor("application/y", 3, Hash.of(b"abc"), annotations={"k": "v"})
    assert Descriptor.from_dict(d.to_dict()) == d


def test_descriptor_omits_empty_annotations():
    d = Descriptor("application/y", 0, Hash.of(b""))
    assert "annotations" not in d.to_dict()


def test_manifest_json_round_trip():
    cfg = Descriptor("application/c", 2, Hash.of(b"{}"))
    layer = Descriptor("application/l", 1, Hash.of(b"a"))
    m = Manifest(config=cfg, layers=[layer], annotations={"x": "y"})
    data = json.loads(m.to_json())
    assert data == m.to_dict()
    assert data["schemaVersion"] == 2
    assert data["mediaType"] == consts.OCI_MANIFEST_SCHEMA1
    assert Descriptor.from_dict(data["layers"][0]) == layer