"""Core exception types for pkgpin."""
from typing import List, Optional


class PkgpinError(Exception):
    """Base exception for all pkgpin errors."""
    pass


class InputValidationError(PkgpinError):
    """Raised when a mandatory command input is missing."""
    pass


class DestinationCollisionError(PkgpinError):
    """Raised when the destination exists and overwriting was not requested."""

    def __init__(self, destination: str):
        self.destination = destination
        super().__init__(f"destination directory {destination!r} already exists")


class RevisionControlError(PkgpinError):
    """Raised when a git operation fails.

    Carries the remote, the refs that were attempted and a hint telling a
    human what to check.
    """

    def __init__(
        self,
        message: str,
        repo: str = "",
        refs: Optional[List[str]] = None,
        hint: str = "",
        output: str = "",
    ):
        self.repo = repo
        self.refs = list(refs or [])
        self.hint = hint
        self.output = output
        super().__init__(message)

    def __str__(self) -> str:
        parts = [self.args[0] if self.args else ""]
        if self.repo:
            parts.append(f"repo: {self.repo}")
        if self.refs:
            parts.append(f"attempted refs: {', '.join(self.refs)}")
        if self.output:
            parts.append(self.output)
        if self.hint:
            parts.append(self.hint)
        return "\n".join(p for p in parts if p)


class GitNotFoundError(RevisionControlError):
    """Raised when no git executable can be found on PATH."""
    pass


class SubdirectoryNotFoundError(PkgpinError):
    """Raised when the ref exists but the requested subdirectory does not."""

    def __init__(self, repo: str, ref: str, directory: str):
        self.repo = repo
        self.ref = ref
        self.directory = directory
        super().__init__(
            f"missing subdirectory {directory!r} in repo {repo!r} at ref {ref!r}"
        )


class RecordFormatError(PkgpinError):
    """Raised when a Pkgfile cannot be parsed.

    ``reference`` is attached once the error leaves a scratch clone, so the
    message names the remote package instead of a temporary path.
    """

    def __init__(self, path: str, reason: str, reference=None):
        self.path = path
        self.reason = reason
        self.reference = reference
        super().__init__(path, reason)

    def location(self) -> str:
        if self.reference is None:
            return self.path
        return self.reference.display()

    def with_reference(self, reference) -> "RecordFormatError":
        """Return a copy of this error pointing at ``reference``."""
        return type(self)(self.path, self.reason, reference=reference)

    def __str__(self) -> str:
        return f"invalid Pkgfile in {self.location()}: {self.reason}"


class UnknownRecordVersionError(RecordFormatError):
    """Raised when a Pkgfile declares an unsupported apiVersion."""

    def __init__(self, path: str, api_version: str, reference=None):
        self.api_version = api_version
        super().__init__(path, f"unknown apiVersion {api_version!r}", reference=reference)

    def with_reference(self, reference) -> "UnknownRecordVersionError":
        return UnknownRecordVersionError(self.path, self.api_version, reference=reference)


class PackageIOError(PkgpinError):
    """Raised when copying or persisting package files fails."""

    def __init__(self, message: str, path: str = ""):
        self.path = path
        super().__init__(f"{message}: {path}" if path else message)
