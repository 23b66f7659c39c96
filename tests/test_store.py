import json

import pytest

from hauler import consts
from hauler.artifacts import OCICollection
from hauler.cache import FilesystemCache
from hauler.memory_artifact import Memory
from hauler.store import Layout

REF = "hello/world:v1"
KEY = f"{REF}-{consts.KIND_ANNOTATION_IMAGE}"


def blob_path(root, h):
    return root / consts.IMAGE_BLOBS_DIR / h.algorithm / h.hex


@pytest.fixture
def root(tmp_path):
    d = tmp_path / "store"
    d.mkdir()
    return d


def test_add_oci_twice(root):
    s = Layout(root)
    moci = Memory(b"layer data", "random")
    first = s.add_oci(moci, REF)
    second = s.add_oci(moci, REF)
    assert first.digest == second.digest
    assert first.annotations[consts.ANNOTATION_REF_NAME] == REF
    assert first.annotations[consts.KIND_ANNOTATION_NAME] == consts.KIND_ANNOTATION_IMAGE
    assert first.media_type == consts.OCI_MANIFEST_SCHEMA1


def test_add_oci_writes_all_blobs(root):
    s = Layout(root)
    moci = Memory(b"layer data", "random")
    desc = s.add_oci(moci, REF)
    manifest = moci.manifest()
    assert blob_path(root, desc.digest).read_bytes() == manifest.to_json()
    assert blob_path(root, manifest.config.digest).read_bytes() == moci.raw_config()
    assert blob_path(root, manifest.layers[0].digest).read_bytes() == b"layer data"


def test_index_reloaded_by_new_layout(root):
    desc = Layout(root).add_oci(Memory(b"abc", "random"), REF)
    _, found = Layout(root).resolve(KEY)
    assert found.digest == desc.digest


def test_identify(root):
    s = Layout(root)
    desc = s.add_oci(Memory(b"abc", "random"), REF)
    assert s.identify(desc) == consts.UNKNOWN_MANIFEST


def test_identify_missing_blob(root):
    s = Layout(root)
    desc = s.add_oci(Memory(b"abc", "random"), REF)
    s.flush()
    assert s.identify(desc) == ""


def test_flush_removes_layout_content(root):
    s = Layout(root)
    s.add_oci(Memory(b"abc", "random"), REF)
    (root / consts.IMAGE_LAYOUT_FILE).write_text("{}")
    keep = root / "keep.txt"
    keep.write_text("mine")
    s.flush()
    assert not (root / consts.IMAGE_BLOBS_DIR).exists()
    assert not (root / consts.IMAGE_INDEX_FILE).exists()
    assert not (root / consts.IMAGE_LAYOUT_FILE).exists()
    assert keep.read_text() == "mine"


def test_add_oci_with_cache_fills_cache(root, tmp_path):
    cache_root = tmp_path / "cache"
    s = Layout(root, cache=FilesystemCache(cache_root))
    moci = Memory(b"cached bytes", "random")
    s.add_oci(moci, REF)
    layer_digest = moci.layers()[0].digest()
    assert (cache_root / layer_digest.algorithm / layer_digest.hex).read_bytes() == b"cached bytes"
    assert blob_path(root, layer_digest).read_bytes() == b"cached bytes"


class _Collection(OCICollection):
    def __init__(self, items):
        self._items = items

    def contents(self):
        return self._items


def test_add_oci_collection(root):
    s = Layout(root)
    descs = s.add_oci_collection(
        _Collection({"a/one:v1": Memory(b"one", "random"), "a/two:v1": Memory(b"two", "random")})
    )
    refs = sorted(d.annotations[consts.ANNOTATION_REF_NAME] for d in descs)
    assert refs == ["a/one:v1", "a/two:v1"]
    index = json.loads((root / consts.IMAGE_INDEX_FILE).read_text())
    assert len(index["manifests"]) == 2


def test_copy_to_other_layout(root, tmp_path):
    src = Layout(root)
    moci = Memory(b"payload", "random")
    desc = src.add_oci(moci, REF)
    target_root = tmp_path / "target"
    target_root.mkdir()
    target = Layout(target_root)

    copied = src.copy(KEY, target, "mirror/app:v2")
    assert copied.digest == desc.digest
    assert target.resolve("mirror/app:v2")[1].digest == desc.digest
    layer_digest = moci.layers()[0].digest()
    assert blob_path(target_root, layer_digest).read_bytes() == b"payload"
    assert blob_path(target_root, desc.digest).read_bytes() == blob_path(root, desc.digest).read_bytes()


def test_copy_missing_ref(root, tmp_path):
    src = Layout(root)
    with pytest.raises(KeyError):
        src.copy("nope/nope:v1", Layout(tmp_path), "")


def test_copy_all_with_mapper(root, tmp_path):
    src = Layout(root)
    src.add_oci(Memory(b"one", "random"), "a/one:v1")
    src.add_oci(Memory(b"two", "random"), "a/two:v1")
    target_root = tmp_path / "target"
    target_root.mkdir()
    target = Layout(target_root)

    descs = src.copy_all(target, lambda r: "mirror/" + r.split("-", 1)[0])
    assert len(descs) == 2
    assert target.resolve("mirror/a/one:v1")[1].digest in {d.digest for d in descs}
    assert target.resolve("mirror/a/two:v1")[1].digest in {d.digest for d in descs}


def test_copy_all_mapper_error(root, tmp_path):
    src = Layout(root)
    src.add_oci(Memory(b"one", "random"), "a/one:v1")

    def mapper(ref):
        raise ValueError("cannot map")

    with pytest.raises(RuntimeError, match="cannot map"):
        src.copy_all(Layout(tmp_path), mapper)