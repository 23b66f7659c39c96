"""Parsing of image references with hauler's default namespace."""

from __future__ import annotations

import re
from dataclasses import dataclass

from hauler import consts

DEFAULT_REGISTRY = "index.docker.io"

_REPO_CHARS = set("abcdefghijklmnopqrstuvwxyz0123456789_-./")
_TAG_RE = re.compile(r"^[\w][\w.-]{0,127}$")
_DIGEST_RE = re.compile(r"^sha256:[0-9a-f]{64}$")


class InvalidReferenceError(ValueError):
    """Raised when a reference cannot be parsed."""


@dataclass(frozen=True)
class Repository:
    """A registry plus repository path."""

    registry: str
    repository: str

    @property
    def registry_str(self) -> str:
        return self.registry or DEFAULT_REGISTRY

    @property
    def repository_str(self) -> str:
        if "/" not in self.repository and self.registry_str == DEFAULT_REGISTRY:
            return "library/" + self.repository
        return self.repository

    @property
    def name(self) -> str:
        if self.registry:
            return f"{self.registry}/{self.repository_str}"
        return self.repository_str

    def __str__(self) -> str:
        return self.name

    def tag(self, tag: str) -> Tag:
        return Tag(self, tag)

    def digest(self, digest: str) -> Digest:
        return Digest(self, digest)


@dataclass(frozen=True)
class Tag:
    """A repository with a tag."""

    repository: Repository
    tag: str
    original: str = ""

    def context(self) -> Repository:
        return self.repository

    def identifier(self) -> str:
        return self.tag

    def name(self) -> str:
        return f"{self.repository.name}:{self.tag}"

    def __str__(self) -> str:
        return self.original or self.name()


@dataclass(frozen=True)
class Digest:
    """A repository pinned to a content digest."""

    repository: Repository
    digest: str
    original: str = ""

    def context(self) -> Repository:
        return self.repository

    def identifier(self) -> str:
        return self.digest

    def name(self) -> str:
        return f"{self.repository.name}@{self.digest}"

    def __str__(self) -> str:
        return self.original or self.name()


def _new_repository(name: str, default_registry: str) -> Repository:
    first, sep, rest = name.partition("/")
    if sep and ("." in first or ":" in first or first == "localhost"):
        registry, repo = first, rest
    else:
        registry, repo = default_registry, name
    if not repo:
        raise InvalidReferenceError(f"a repository name must be specified: {name!r}")
    if any(c not in _REPO_CHARS for c in repo):
        raise InvalidReferenceError(f"repository can only contain [a-z0-9_-./]: {repo!r}")
    if any(not part for part in repo.split("/")):
        raise InvalidReferenceError(f"invalid repository: {repo!r}")
    return Repository(registry, repo)


def _new_tag(ref: str, default_registry: str, default_tag: str) -> Tag:
    base, tag = ref, default_tag
    head, sep, last = ref.rpartition(":")
    if sep and "/" not in last:
        base, tag = head, last
    if not _TAG_RE.match(tag):
        raise InvalidReferenceError(f"invalid tag: {tag!r}")
    return Tag(_new_repository(base, default_registry), tag, ref)


def _new_digest(ref: str, default_registry: str) -> Digest:
    base, sep, dig = ref.partition("@")
    if not sep:
        raise InvalidReferenceError(f"a digest must contain exactly one '@': {ref!r}")
    if not _DIGEST_RE.match(dig):
        raise InvalidReferenceError(f"invalid digest: {dig!r}")
    # A tag may precede the digest; it is dropped.
    head, tsep, last = base.rpartition(":")
    if tsep and "/" not in last:
        base = head
    return Digest(_new_repository(base, default_registry), dig, ref)


def parse_reference(
    ref: str, default_registry: str = DEFAULT_REGISTRY, default_tag: str = consts.DEFAULT_TAG
) -> Tag | Digest:
    """Parse a reference as a tag, falling back to a digest."""
    try:
        return _new_tag(ref, default_registry, default_tag)
    except InvalidReferenceError:
        pass
    try:
        return _new_digest(ref, default_registry)
    except InvalidReferenceError:
        raise InvalidReferenceError(f"could not parse reference: {ref}") from None


def parse(ref: str) -> Tag | Digest:
    """Parse a reference, placing it in the default namespace when it has none."""
    r = parse_reference(ref, "", consts.DEFAULT_TAG)
    if "/" not in str(r):
        return parse_reference(f"{consts.DEFAULT_NAMESPACE}/{r}", "", consts.DEFAULT_TAG)
    return r


def new_tagged(name: str, tag: str) -> Tag:
    """Build a tagged reference from a path component and tag."""
    repo = parse(name.lower().replace("+", "-"))
    return repo.context().tag(tag.replace("+", "-"))


def relocate(reference: str, registry: str) -> Tag | Digest:
    """Move a reference onto another registry."""
    ref = parse_reference(reference)
    relocated = parse_reference(ref.context().repository_str, default_registry=registry)
    if isinstance(ref, Digest):
        return relocated.context().digest(ref.identifier())
    return relocated.context().tag(ref.identifier())