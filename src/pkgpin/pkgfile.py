"""Pkgfile model: the identity record stored inside every package.

A Pkgfile records where a package came from so it can later be diffed,
updated or re-fetched:

- ``metadata.name``: the package name
- ``upstream.git.repo`` / ``directory`` / ``ref``: what was requested
- ``upstream.git.commit``: the immutable commit that was fetched

Fields this module does not know about are kept as-is, so tools that add
their own sections to a Pkgfile do not lose them on re-fetch.
"""
import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from pkgpin.core.errors import RecordFormatError, UnknownRecordVersionError

logger = logging.getLogger(__name__)

PKGFILE_NAME = "Pkgfile"
API_VERSION = "pkgpin.dev/v1alpha1"
KIND = "Pkgfile"
SUPPORTED_API_VERSIONS = frozenset({API_VERSION})

GIT_ORIGIN = "git"


class GitUpstream(BaseModel):
    """Git coordinates of a package."""

    model_config = ConfigDict(extra="allow")

    repo: str = Field(default="", description="Remote repository location")
    directory: str = Field(default="", description="Subdirectory inside the repository")
    ref: str = Field(default="", description="Requested branch/tag/ref")
    commit: str = Field(default="", description="Resolved immutable commit SHA")

    @field_validator("commit")
    @classmethod
    def validate_commit_sha(cls, v: str) -> str:
        """Ensure commit looks like a git SHA when set."""
        if not v:
            return v
        if len(v) < 7 or len(v) > 64:
            raise ValueError(f"commit must be 7-64 hex characters; got '{v}' (len={len(v)})")
        if not all(c in "0123456789abcdef" for c in v.lower()):
            raise ValueError(f"commit must be hexadecimal; got '{v}'")
        return v


class Upstream(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str = Field(default=GIT_ORIGIN, description="Origin kind")
    git: Optional[GitUpstream] = None


class PackageMeta(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = ""


class Pkgfile(BaseModel):
    """Package identity record (YAML on disk)."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    api_version: str = Field(default=API_VERSION, alias="apiVersion")
    kind: str = Field(default=KIND)
    metadata: PackageMeta = Field(default_factory=PackageMeta)
    upstream: Optional[Upstream] = None

    @classmethod
    def default(cls, name: str) -> "Pkgfile":
        """Minimal record for a package that ships without a Pkgfile."""
        return cls(metadata=PackageMeta(name=name))

    def to_dict(self) -> dict:
        data = self.model_dump(by_alias=True)
        # Unset optional sections are omitted; explicit nulls in extra fields are kept
        if data.get("upstream") is None:
            data.pop("upstream", None)
        elif data["upstream"].get("git") is None:
            data["upstream"].pop("git", None)
        return data


class _PkgfileLoader(yaml.SafeLoader):
    """SafeLoader that reads ``upstream.git.commit`` as its raw text.

    YAML 1.1 resolves a plain all-digit SHA to an int (an octal one when it
    starts with 0), which would change the commit.
    """

    def construct_document(self, node):
        commit = _find_node(node, "upstream", "git", "commit")
        if isinstance(commit, yaml.ScalarNode) and commit.style is None:
            commit.tag = "tag:yaml.org,2002:str"
        return super().construct_document(node)


def _find_node(node, *keys):
    for key in keys:
        if not isinstance(node, yaml.MappingNode):
            return None
        for key_node, value_node in node.value:
            if isinstance(key_node, yaml.ScalarNode) and key_node.value == key:
                node = value_node
                break
        else:
            return None
    return node


def read_pkgfile(directory: Path) -> Pkgfile:
    """Read the Pkgfile in ``directory``.

    Raises:
        FileNotFoundError: no Pkgfile (or no directory) exists
        UnknownRecordVersionError: apiVersion is not supported
        RecordFormatError: the file is not a valid Pkgfile document
    """
    path = Path(directory) / PKGFILE_NAME
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise RecordFormatError(str(path), f"not valid UTF-8: {e}")
    except IsADirectoryError:
        raise RecordFormatError(str(path), "is a directory, not a file")

    try:
        data = yaml.load(text, Loader=_PkgfileLoader)
    except yaml.YAMLError as e:
        raise RecordFormatError(str(path), f"malformed YAML: {e}")

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise RecordFormatError(str(path), "document must be a mapping")

    api_version = data.get("apiVersion")
    if api_version not in SUPPORTED_API_VERSIONS:
        raise UnknownRecordVersionError(str(path), str(api_version or ""))

    try:
        return Pkgfile.model_validate(data)
    except ValidationError as e:
        raise RecordFormatError(str(path), str(e))


def write_pkgfile(directory: Path, pkgfile: Pkgfile) -> Path:
    """Write ``pkgfile`` into ``directory`` and return the file path."""
    path = Path(directory) / PKGFILE_NAME
    path.write_text(
        yaml.safe_dump(
            pkgfile.to_dict(),
            sort_keys=False,
            default_flow_style=False,
            allow_unicode=True,
        ),
        encoding="utf-8",
    )
    logger.debug(f"Wrote {path}")
    return path
