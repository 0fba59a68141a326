"""Repository references and materialized scratch clones."""
import logging
import posixpath
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pkgpin.core.fsutil import remove_tree

logger = logging.getLogger(__name__)


def normalize_directory(directory: str) -> str:
    """Normalize a repo subdirectory to a relative POSIX path ('' is the root).

    Examples:
        /foo/bar/ -> foo/bar
        ./foo//bar -> foo/bar
        / -> ''
    """
    clean = directory.strip().replace("\\", "/").strip("/")
    if not clean:
        return ""
    clean = posixpath.normpath(clean)
    if clean == ".":
        return ""
    if clean == ".." or clean.startswith("../"):
        raise ValueError(f"directory must not escape the repository root, got: {directory}")
    return clean


class RepoReference(BaseModel):
    """Where a package lives: remote repo, subdirectory and requested ref."""

    model_config = ConfigDict(frozen=True)

    repo: str = Field(..., description="Remote location (org/name, URL or local path)")
    directory: str = Field(default="", description="Subdirectory inside the repo ('' for root)")
    ref: str = Field(default="", description="Branch, tag or ref ('' for the default branch)")

    @field_validator("directory")
    @classmethod
    def validate_directory(cls, v: str) -> str:
        return normalize_directory(v)

    @property
    def clone_url(self) -> str:
        return self.repo.rstrip("/")

    def display(self) -> str:
        """Human-readable location, e.g. ``https://host/repo.git/foo@v1``."""
        text = self.clone_url
        if self.directory:
            text = f"{text}/{self.directory}"
        if self.ref:
            text = f"{text}@{self.ref}"
        return text


@dataclass(frozen=True)
class Materialization:
    """A scratch clone checked out at the requested revision.

    Owns ``scratch_dir``; call :meth:`cleanup` once the package has been
    copied out.
    """

    reference: RepoReference
    scratch_dir: Path
    resolved_ref: str

    @property
    def package_dir(self) -> Path:
        if not self.reference.directory:
            return self.scratch_dir
        return self.scratch_dir.joinpath(*self.reference.directory.split("/"))

    def cleanup(self) -> None:
        """Remove the scratch clone; failures are logged, never raised."""
        if remove_tree(self.scratch_dir):
            logger.debug(f"Removed scratch directory {self.scratch_dir}")
