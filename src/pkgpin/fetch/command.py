"""Fetch command: copy a package out of a git repo and pin its upstream."""
import logging
import posixpath
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from pydantic import BaseModel, Field

from pkgpin.core.errors import (
    DestinationCollisionError,
    InputValidationError,
    PackageIOError,
    SubdirectoryNotFoundError,
)
from pkgpin.core.fsutil import copy_dir, remove_tree
from pkgpin.fetch.git import GitClient
from pkgpin.fetch.reconcile import upsert_pkgfile
from pkgpin.fetch.reference import RepoReference, normalize_directory
from pkgpin.pkgfile import GitUpstream, Pkgfile

logger = logging.getLogger(__name__)


def default_destination(repo: str, directory: str = "") -> str:
    """Pick a destination name for a package.

    Examples:
        ("https://github.com/org/configs.git", "apps/web") -> web
        ("https://github.com/org/configs.git", "/") -> configs
        ("/local/path/to/repo", "") -> repo
    """
    try:
        directory = normalize_directory(directory)
    except ValueError:
        directory = ""
    if directory:
        return posixpath.basename(directory)

    clean_url = repo.rstrip("/")
    if clean_url.endswith(".git"):
        clean_url = clean_url[:-4]

    parsed = urlparse(clean_url)
    if parsed.netloc:
        return parsed.path.strip("/").split("/")[-1]
    # scp-like "git@host:org/repo" or a local path
    return Path(clean_url.split(":")[-1]).name


def _occupied(path: Path) -> bool:
    # A dangling symlink still blocks the destination
    return path.exists() or path.is_symlink()


class FetchCommand(BaseModel):
    """Fetch ``directory`` of ``repo`` at ``ref`` into ``destination``.

    Steps: validate inputs, refuse to touch an existing destination unless
    ``clean`` is set, clone into a scratch directory, copy the package out,
    then write its Pkgfile with the resolved commit. The scratch directory is
    removed whatever the outcome.
    """

    repo: str = Field(default="", description="Remote repository location")
    directory: str = Field(default="", description="Package subdirectory ('/' for the root)")
    ref: str = Field(default="", description="Branch, tag or ref to fetch")
    destination: str = Field(default="", description="Local directory to create")
    name: Optional[str] = Field(default=None, description="Package name (defaults to destination name)")
    clean: bool = Field(default=False, description="Replace an existing destination")

    def default_values(self) -> RepoReference:
        """Validate mandatory inputs and fill in defaults."""
        if not self.repo:
            raise InputValidationError("must specify repo")
        if not self.ref:
            raise InputValidationError("must specify ref")
        if not self.destination:
            raise InputValidationError("must specify destination")
        if not self.directory:
            raise InputValidationError("must specify remote subdirectory")

        if not self.name:
            self.name = Path(self.destination).resolve().name

        try:
            directory = normalize_directory(self.directory)
        except ValueError as e:
            raise InputValidationError(str(e))
        return RepoReference(repo=self.repo, directory=directory, ref=self.ref)

    def run(self, client: Optional[GitClient] = None) -> Pkgfile:
        """Run the fetch and return the Pkgfile written to ``destination``.

        Raises:
            InputValidationError: a mandatory input is missing
            DestinationCollisionError: destination exists and ``clean`` is False
            RevisionControlError: git could not fetch the revision
            SubdirectoryNotFoundError: the revision has no such subdirectory
            RecordFormatError: the package's Pkgfile is unreadable
            PackageIOError: copying or writing files failed
        """
        reference = self.default_values()
        destination = Path(self.destination)

        if _occupied(destination) and not self.clean:
            raise DestinationCollisionError(self.destination)

        client = client or GitClient()
        materialization = client.materialize(reference)
        try:
            source = materialization.package_dir
            if not source.is_dir():
                raise SubdirectoryNotFoundError(
                    reference.repo, materialization.resolved_ref, reference.directory
                )

            if self.clean and _occupied(destination):
                logger.info(f"Removing existing {destination}")
                if not remove_tree(destination):
                    raise PackageIOError("failed to remove existing destination", str(destination))

            logger.info(f"Copying {reference.display()} to {destination}")
            try:
                copy_dir(source, destination)
            except OSError as e:
                raise PackageIOError(f"failed to copy package ({e})", str(destination))

            upstream = GitUpstream(
                repo=reference.repo,
                directory=reference.directory,
                ref=reference.ref,
                commit=client.head_commit(materialization.scratch_dir),
            )
            return upsert_pkgfile(destination, self.name, upstream)
        finally:
            materialization.cleanup()
