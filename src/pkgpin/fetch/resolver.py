"""Turn a (subdirectory, ref) pair into the git refs to try, in order."""
import posixpath
from typing import List

# Refs containing this are fully qualified (refs/heads/..., refs/tags/...)
QUALIFIED_REF_MARKER = "refs"


def candidate_refs(directory: str, ref: str) -> List[str]:
    """Return the refs to fetch for a package, most specific first.

    Monorepos tag sub-packages independently by prefixing the tag with the
    package directory, so ``("foo", "v1.0.0")`` tries ``foo/v1.0.0`` before
    ``v1.0.0``. Fully qualified refs and root packages are used unmodified.

    Examples:
        ("foo", "v1") -> ["foo/v1", "v1"]
        ("", "v1") -> ["v1"]
        ("foo", "refs/tags/v1") -> ["refs/tags/v1"]
    """
    candidates = []
    directory = directory.lstrip("/")
    if directory and QUALIFIED_REF_MARKER not in ref:
        candidates.append(posixpath.join(directory, ref))
    if ref not in candidates:
        candidates.append(ref)
    return candidates
