"""Create or update a package's Pkgfile with its git upstream."""
import logging
from pathlib import Path

from pkgpin.core.errors import PackageIOError
from pkgpin.pkgfile import GIT_ORIGIN, GitUpstream, Pkgfile, Upstream, read_pkgfile, write_pkgfile

logger = logging.getLogger(__name__)


def upsert_pkgfile(destination: Path, name: str, upstream: GitUpstream) -> Pkgfile:
    """Record ``upstream`` in the Pkgfile at ``destination``.

    An existing Pkgfile is loaded and only its ``upstream`` section is
    replaced; all other fields are kept. Without one, a default record named
    ``name`` is created.

    Args:
        destination: Package directory
        name: Package name used when no Pkgfile exists
        upstream: Observed git origin, including the resolved commit

    Returns:
        The Pkgfile as written

    Raises:
        RecordFormatError: the existing Pkgfile cannot be read
        PackageIOError: the Pkgfile cannot be written
    """
    destination = Path(destination)

    try:
        pkgfile = read_pkgfile(destination)
        logger.debug(f"Updating existing Pkgfile in {destination}")
    except FileNotFoundError:
        logger.debug(f"No Pkgfile in {destination}, creating one for {name!r}")
        pkgfile = Pkgfile.default(name)

    pkgfile.upstream = Upstream(type=GIT_ORIGIN, git=upstream)

    try:
        path = write_pkgfile(destination, pkgfile)
    except OSError as e:
        raise PackageIOError(f"failed to write Pkgfile ({e.strerror or e})", str(destination))

    logger.info(f"Pinned {upstream.repo}@{upstream.ref} to {upstream.commit[:12]} in {path}")
    return pkgfile
