"""Filesystem helpers for copying and removing package directories."""
import logging
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)

# Never copied into a package destination
IGNORED_NAMES = (".git",)


def copy_dir(src: Path, dst: Path) -> None:
    """Recursively copy ``src`` into a new directory ``dst``.

    Relative structure and file contents are preserved, symlinks are copied
    as symlinks, and ``.git`` entries are skipped.
    """
    src = Path(src)
    dst = Path(dst)
    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copytree(
        src,
        dst,
        symlinks=True,
        ignore=shutil.ignore_patterns(*IGNORED_NAMES),
    )


def remove_tree(path: Path) -> bool:
    """Remove whatever is at ``path``, logging instead of raising on failure.

    Directories are removed recursively; files and symlinks (including
    symlinks to directories) are unlinked. Returns True when nothing is left
    at ``path``.
    """
    path = Path(path)
    if not path.exists() and not path.is_symlink():
        return True
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    except OSError as e:
        logger.warning(f"Failed to remove {path}: {e}")
        return False
    return True
