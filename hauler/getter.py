"""Getters that turn a source string (file, directory or URL) into content."""

from __future__ import annotations

import gzip
import os
import stat
import tarfile
import tempfile
from dataclasses import dataclass, field
from typing import Any, BinaryIO
from urllib.parse import SplitResult, unquote, urlsplit

import requests

from hauler import consts
from hauler.artifacts import MarshallableConfig, to_config
from hauler.layer import Layer, from_opener

ANNOTATION_UNPACK = "io.deis.oras.content.unpack"


class GetterTypeUnknownError(LookupError):
    """Raised when no getter recognises a source."""


@dataclass
class ClientOptions:
    """Options for a getter client."""

    name_override: str = ""


def _base(path: str) -> str:
    """Last element of a slash-separated path, ignoring trailing slashes."""
    if not path:
        return "."
    stripped = path.rstrip("/")
    if not stripped:
        return "/"
    return stripped.rsplit("/", 1)[-1]


def _reference_config(url: SplitResult, media_type: str) -> MarshallableConfig:
    return to_config({"reference": url.geturl()}, media_type)


class FileGetter:
    """Reads a single local file."""

    @staticmethod
    def _path(url: SplitResult) -> str:
        host, path = url.netloc, url.path
        if host and path:
            return os.path.normpath(f"{host}/{path}")
        joined = host or path
        return os.path.normpath(joined) if joined else ""

    def name(self, url: SplitResult) -> str:
        return _base(self._path(url))

    def open(self, url: SplitResult) -> BinaryIO:
        return open(self._path(url), "rb")

    def detect(self, url: SplitResult) -> bool:
        path = self._path(url)
        if not path:
            return False
        try:
            st = os.stat(path)
        except OSError:
            return False
        return not stat.S_ISDIR(st.st_mode)

    def config(self, url: SplitResult) -> MarshallableConfig:
        return _reference_config(url, consts.FILE_LOCAL_CONFIG_MEDIA_TYPE)


class DirectoryGetter(FileGetter):
    """Reads a local directory as a gzipped tar archive."""

    def open(self, url: SplitResult) -> BinaryIO:
        tmp = tempfile.TemporaryFile()
        try:
            with gzip.GzipFile(filename="", mode="wb", fileobj=tmp, mtime=0) as zw:
                tar_dir(self._path(url), self.name(url), zw, False)
            tmp.flush()
            tmp.seek(0)
        except BaseException:
            tmp.close()
            raise
        return tmp

    def detect(self, url: SplitResult) -> bool:
        path = self._path(url)
        if not path:
            return False
        return os.path.isdir(path)

    def config(self, url: SplitResult) -> MarshallableConfig:
        return _reference_config(url, consts.FILE_DIRECTORY_CONFIG_MEDIA_TYPE)


class HttpGetter:
    """Reads content over HTTP or HTTPS."""

    def name(self, url: SplitResult) -> str:
        try:
            requests.head(url.geturl())
        except requests.RequestException:
            return ""
        return _base(unquote(url.geturl()))

    def open(self, url: SplitResult) -> BinaryIO:
        resp = requests.get(url.geturl(), stream=True)
        resp.raw.decode_content = True
        return resp.raw

    def detect(self, url: SplitResult) -> bool:
        return url.scheme in ("http", "https")

    def config(self, url: SplitResult) -> MarshallableConfig:
        return _reference_config(url, consts.FILE_HTTP_CONFIG_MEDIA_TYPE)


def _default_getters() -> dict[str, Any]:
    return {"file": FileGetter(), "directory": DirectoryGetter(), "http": HttpGetter()}


@dataclass
class Client:
    """Chooses a getter for a source and fetches content through it."""

    getters: dict[str, Any] = field(default_factory=_default_getters)
    options: ClientOptions = field(default_factory=ClientOptions)

    def _getter_from(self, url: SplitResult) -> Any:
        for getter in self.getters.values():
            if getter.detect(url):
                return getter
        raise GetterTypeUnknownError(
            f"source {url.geturl()}: no getter type found matching reference"
        )

    def layer_from(self, source: str) -> Layer:
        """Build a file layer from a source."""
        url = urlsplit(source)
        getter = self._getter_from(url)
        annotations = {consts.ANNOTATION_TITLE: self.name(source)}
        if isinstance(getter, DirectoryGetter):
            annotations[ANNOTATION_UNPACK] = "true"
        return from_opener(
            lambda: getter.open(url),
            media_type=consts.FILE_LAYER_MEDIA_TYPE,
            annotations=annotations,
        )

    def content_from(self, source: str) -> BinaryIO:
        """Open the content behind a source."""
        try:
            url = urlsplit(source)
        except ValueError as exc:
            raise ValueError(f"parse source {source}: {exc}") from exc
        return self._getter_from(url).open(url)

    def name(self, source: str) -> str:
        """Name for a source, honouring the name override."""
        if self.options.name_override:
            return self.options.name_override
        try:
            url = urlsplit(source)
        except ValueError:
            return source
        for getter in self.getters.values():
            if getter.detect(url):
                return getter.name(url)
        return source

    def config(self, source: str) -> MarshallableConfig | None:
        """Config describing a source, or None when no getter matches."""
        try:
            url = urlsplit(source)
        except ValueError:
            return None
        for getter in self.getters.values():
            if getter.detect(url):
                return getter.config(url)
        return None


def new_client(options: ClientOptions | None = None) -> Client:
    """Create a client with the file, directory and http getters."""
    return Client(options=options or ClientOptions())


def _walk(path: str):
    yield path
    if os.path.isdir(path) and not os.path.islink(path):
        for entry in sorted(os.listdir(path)):
            yield from _walk(os.path.join(path, entry))


def _tar_info(path: str, name: str, strip_times: bool) -> tarfile.TarInfo:
    st = os.lstat(path)
    info = tarfile.TarInfo(name)
    info.mode = stat.S_IMODE(st.st_mode)
    info.mtime = 0 if strip_times else int(st.st_mtime)
    mode = st.st_mode
    if stat.S_ISREG(mode):
        info.type = tarfile.REGTYPE
        info.size = st.st_size
    elif stat.S_ISDIR(mode):
        info.type = tarfile.DIRTYPE
    elif stat.S_ISLNK(mode):
        info.type = tarfile.SYMTYPE
        info.linkname = os.readlink(path)
    elif stat.S_ISFIFO(mode):
        info.type = tarfile.FIFOTYPE
    elif stat.S_ISCHR(mode) or stat.S_ISBLK(mode):
        info.type = tarfile.CHRTYPE if stat.S_ISCHR(mode) else tarfile.BLKTYPE
        info.devmajor = os.major(st.st_rdev)
        info.devminor = os.minor(st.st_rdev)
    else:
        raise OSError(f"{path}: unsupported file type")
    info.uid = info.gid = 0
    info.uname = info.gname = ""
    return info


def tar_dir(root: str | os.PathLike, prefix: str, out: BinaryIO, strip_times: bool = False) -> None:
    """Write ``root`` as a tar stream to ``out`` with entries placed under ``prefix``."""
    root = os.fspath(root)
    with tarfile.open(fileobj=out, mode="w|", format=tarfile.PAX_FORMAT) as tw:
        for path in _walk(root):
            rel = os.path.relpath(path, root)
            name = os.path.normpath(os.path.join(prefix, rel)).replace(os.sep, "/")
            info = _tar_info(path, name, strip_times)
            if info.isreg():
                with open(path, "rb") as fh:
                    tw.addfile(info, fh)
            else:
                tw.addfile(info)