"""Git client: materialize a repo reference into a scratch clone."""
import logging
import re
import tempfile
from pathlib import Path
from typing import List, Optional

from pkgpin.config import FetchSettings
from pkgpin.core.errors import GitNotFoundError, RecordFormatError, RevisionControlError
from pkgpin.core.fsutil import remove_tree
from pkgpin.core.process import ProcessResult, ProcessRunner, SubprocessRunner
from pkgpin.fetch.reference import Materialization, RepoReference
from pkgpin.fetch.resolver import candidate_refs
from pkgpin.pkgfile import read_pkgfile

logger = logging.getLogger(__name__)

CREDENTIALS_HINT = "please run 'git clone <REPO>; stat <DIR/SUBDIR>' to verify credentials"

_SHA_RE = re.compile(r"^(?:[0-9a-f]{40}|[0-9a-f]{64})$")
_SYMREF_RE = re.compile(r"^ref:\s+refs/heads/(\S+)\s+HEAD$")


class GitClient:
    """Fetch packages by shelling out to git.

    Each call to :meth:`materialize` initializes a fresh repository in its
    own scratch directory, fetches the requested revision into it and
    initializes submodules. The scratch directory is removed again if any
    step fails; on success ownership passes to the returned
    :class:`Materialization`.
    """

    def __init__(
        self,
        runner: Optional[ProcessRunner] = None,
        settings: Optional[FetchSettings] = None,
    ):
        self.runner = runner or SubprocessRunner()
        self.settings = settings or FetchSettings()
        self._git_program: Optional[str] = None

    @property
    def git_program(self) -> str:
        if self._git_program is None:
            program = self.runner.which(self.settings.git_program)
            if program is None:
                raise GitNotFoundError(
                    f"no {self.settings.git_program!r} program on path"
                )
            self._git_program = program
        return self._git_program

    def _git(self, *args: str, cwd: Optional[Path] = None, network: bool = False) -> ProcessResult:
        timeout = self.settings.fetch_timeout if network else self.settings.command_timeout
        return self.runner.run([self.git_program, *args], cwd=cwd, timeout=timeout)

    def materialize(self, reference: RepoReference) -> Materialization:
        """Clone ``reference`` into a new scratch directory.

        Raises:
            GitNotFoundError: git is not installed
            RevisionControlError: init, fetch, reset or submodule update failed
            RecordFormatError: the package's Pkgfile is malformed or has an
                unsupported version (reported against ``reference``)
        """
        # Fail before allocating anything if git is missing
        self.git_program

        scratch_dir = Path(
            tempfile.mkdtemp(
                prefix=self.settings.scratch_prefix,
                dir=str(self.settings.scratch_root) if self.settings.scratch_root else None,
            )
        )
        logger.info(f"Cloning {reference.display()} into {scratch_dir}")

        try:
            resolved_ref = self._checkout(reference, scratch_dir)
            self._update_submodules(reference, resolved_ref, scratch_dir)
            materialization = Materialization(
                reference=reference,
                scratch_dir=scratch_dir,
                resolved_ref=resolved_ref,
            )
            self._check_pkgfile(materialization)
        except BaseException:
            remove_tree(scratch_dir)
            raise

        return materialization

    def head_commit(self, scratch_dir: Path) -> str:
        """Return the full commit SHA checked out in ``scratch_dir``."""
        result = self._git("rev-parse", "--verify", "HEAD", cwd=scratch_dir)
        commit = result.stdout.strip()
        if not result.ok or not _SHA_RE.match(commit):
            raise RevisionControlError(
                "failed to resolve the fetched commit",
                output=result.output,
            )
        return commit

    def default_ref(self, reference: RepoReference, scratch_dir: Path) -> str:
        """Return the default branch name of the remote."""
        result = self._git("ls-remote", "--symref", "origin", "HEAD", cwd=scratch_dir, network=True)
        if result.ok:
            for line in result.stdout.splitlines():
                match = _SYMREF_RE.match(line.strip())
                if match:
                    return match.group(1)
        raise RevisionControlError(
            "trouble determining the default branch",
            repo=reference.repo,
            hint=CREDENTIALS_HINT,
            output=result.output,
        )

    def _checkout(self, reference: RepoReference, scratch_dir: Path) -> str:
        """Fetch and hard reset to the requested revision, returning the ref used."""
        result = self._git("init", "--quiet", str(scratch_dir))
        if not result.ok:
            raise RevisionControlError(
                "trouble initializing empty git repo",
                repo=reference.repo,
                output=result.output,
            )

        result = self._git("remote", "add", "origin", reference.clone_url, cwd=scratch_dir)
        if not result.ok:
            raise RevisionControlError(
                f"trouble adding remote {reference.clone_url!r}",
                repo=reference.repo,
                output=result.output,
            )

        ref = reference.ref or self.default_ref(reference, scratch_dir)
        candidates = candidate_refs(reference.directory, ref)

        for candidate in candidates:
            if self._fetch_shallow(candidate, scratch_dir):
                logger.info(f"Fetched {candidate}")
                return candidate

        logger.warning(
            f"Shallow fetch failed for {', '.join(candidates)}; fetching all of origin"
        )
        return self._fetch_full(reference, ref, candidates, scratch_dir)

    def _fetch_shallow(self, candidate: str, scratch_dir: Path) -> bool:
        result = self._git("fetch", "origin", "--depth=1", candidate, cwd=scratch_dir, network=True)
        if not result.ok:
            logger.debug(f"Shallow fetch of {candidate} failed: {result.output}")
            return False
        result = self._git("reset", "--hard", "FETCH_HEAD", cwd=scratch_dir)
        if not result.ok:
            logger.debug(f"Reset to {candidate} failed: {result.output}")
            return False
        return True

    def _fetch_full(
        self,
        reference: RepoReference,
        ref: str,
        candidates: List[str],
        scratch_dir: Path,
    ) -> str:
        result = self._git("fetch", "origin", cwd=scratch_dir, network=True)
        if not result.ok:
            raise RevisionControlError(
                "trouble fetching origin",
                repo=reference.repo,
                refs=candidates,
                hint=self._hint(reference, scratch_dir),
                output=result.output,
            )

        # A branch only exists as a remote-tracking ref after a plain fetch
        for target in (ref, f"origin/{ref}"):
            result = self._git("reset", "--hard", target, cwd=scratch_dir)
            if result.ok:
                logger.info(f"Checked out {target}")
                return ref

        raise RevisionControlError(
            f"trouble hard resetting empty repository to {ref!r}",
            repo=reference.repo,
            refs=candidates,
            hint=self._hint(reference, scratch_dir),
            output=result.output,
        )

    def _update_submodules(self, reference: RepoReference, ref: str, scratch_dir: Path) -> None:
        result = self._git("submodule", "update", "--init", "--recursive", cwd=scratch_dir, network=True)
        if not result.ok:
            raise RevisionControlError(
                f"trouble fetching submodules for {ref!r}",
                repo=reference.repo,
                refs=[ref],
                hint=CREDENTIALS_HINT,
                output=result.output,
            )

    def _check_pkgfile(self, materialization: Materialization) -> None:
        """Reject packages whose Pkgfile this version cannot read."""
        try:
            read_pkgfile(materialization.package_dir)
        except (FileNotFoundError, NotADirectoryError):
            # Plain directories without a Pkgfile are valid packages
            return
        except RecordFormatError as e:
            raise e.with_reference(materialization.reference) from e

    def _hint(self, reference: RepoReference, scratch_dir: Path) -> str:
        if reference.directory.startswith("blob/"):
            default = reference.ref
            try:
                default = self.default_ref(reference, scratch_dir)
            except RevisionControlError as e:
                logger.debug(f"Could not determine default branch: {e}")
            return (
                "failed to clone git repo containing /blob/, "
                f"you may need to remove /blob/{default} from the url"
            )
        return CREDENTIALS_HINT
