# hauler

`hauler` gathers content (local files, whole directories, files served over
HTTP, and bytes held in memory) and stores it as OCI artifacts in a local OCI
image layout on disk. Each stored artifact has a manifest, a config blob and
its layers, all written under `blobs/sha256/<hex>`, and is listed in the
layout's `index.json` with its reference name in the
`org.opencontainers.image.ref.name` annotation.

## Installation

```
pip install .
```

The tests need the `test` extra:

```
pip install ".[test]"
pytest
```

## Usage

### Storing a file

```python
from hauler.store import Layout
from hauler.file_artifact import File

store = Layout("./store")
artifact = File("./config.yaml")
descriptor = store.add_oci(artifact, "hauler/config.yaml:latest")
print(descriptor.digest)
```

`File` picks a getter for its source through `hauler.getter.Client`:

- a regular file on disk (`FileGetter`),
- a directory (`DirectoryGetter`), stored as a gzipped tar archive whose
  layer carries the annotation `io.deis.oras.content.unpack: "true"`,
- an `http://` or `https://` URL (`HttpGetter`, using `requests`).

The layer's `org.opencontainers.image.title` annotation is the source's name
(the file or directory base name), unless the client was created with
`ClientOptions(name_override=...)`. A source that no getter recognises raises
`GetterTypeUnknownError`.

### Storing bytes from memory

```python
from hauler.memory_artifact import Memory

blob = Memory(b"hello world", "text/plain")
store.add_oci(blob, "hauler/hello:v1")
```

`Memory` and `File` both accept keyword arguments `config`,
`config_media_type` and `annotations` to set the config object and the
manifest annotations.

### References

`hauler.reference.parse` normalises references, putting them in the `hauler`
namespace when they have none and using the `latest` tag by default:

```python
from hauler import reference

reference.parse("myfile").name()      # "hauler/myfile:latest"
reference.new_tagged("My+Chart", "1.0+build")   # hauler/my-chart:1.0-build
reference.relocate("rancher/rancher:v2", "registry.example.com")
```

Unparseable references raise `InvalidReferenceError`.

### Inspecting and copying a store

Entries in a store are keyed by `<reference>-<kind>`, where the kind comes
from the descriptor's `kind` annotation (`dev.cosignproject.cosign/image` for
artifacts added with `add_oci`).

```python
store.walk(lambda key, desc: print(key, desc.digest))
store.identify(descriptor)            # media type of the artifact's config, or ""
store.copy_all(other_store, None)     # copy every entry to another store
store.flush()                         # remove blobs/, index.json and oci-layout only
```

`copy` and `copy_all` copy the manifest and every blob it refers to; the
target only needs a `pusher(ref)` method returning an object whose
`push(descriptor)` gives a writer, as `OCIStore` and `Layout` do. Blobs
written through `OCIStore.pusher` are checked against their digest and raise
`DigestMismatchError` on a mismatch.

### Layer cache

Pass a `hauler.cache.FilesystemCache` when opening a layout so that layer
content read during `add_oci` is also written under the cache directory and
read from there later:

```python
from hauler.cache import FilesystemCache

store = Layout("./store", cache=FilesystemCache("./cache"))
```

### Logging

`hauler.log.new_logger()` returns a console `Logger` with `debug`, `info`,
`warning` and `error` methods and a global level set by `set_level`.
`capture_output(logger, debug, fn)` runs `fn` with standard output and
standard error sent line by line to the logger, raising
`FunctionExecutionError` if `fn` fails.

## What this package does not do

- It does not pull container images from, or push them to, a remote registry.
- It does not handle Helm charts or image lists.
- It does not sign or verify signatures.
- It has no command-line program, and serves no registry or file server; it
  is used as a library.