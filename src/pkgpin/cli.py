"""pkgpin CLI - Command line interface for pkgpin."""
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from pkgpin.config import FetchSettings
from pkgpin.core.errors import (
    DestinationCollisionError,
    InputValidationError,
    RecordFormatError,
    RevisionControlError,
    SubdirectoryNotFoundError,
)
from pkgpin.fetch import FetchCommand, GitClient, default_destination

logger = logging.getLogger("pkgpin")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_REVISION = 3
EXIT_COLLISION = 4
EXIT_MISSING_SUBDIRECTORY = 5
EXIT_BAD_PKGFILE = 6


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log git commands and their output")
def main(verbose: bool):
    """pkgpin - Fetch configuration packages from git and pin their upstream."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(name)s: %(message)s",
    )


@main.command()
@click.argument("repo")
@click.argument("destination", required=False)
@click.option(
    "--directory",
    "-d",
    default="/",
    show_default=True,
    help="Package subdirectory inside the repo",
)
@click.option(
    "--ref",
    "-r",
    required=True,
    help="Branch, tag, or ref to fetch",
)
@click.option(
    "--name",
    default=None,
    help="Package name (default: destination directory name)",
)
@click.option(
    "--clean",
    is_flag=True,
    help="Replace the destination if it already exists",
)
@click.option(
    "--git-program",
    envvar="PKGPIN_GIT",
    default="git",
    show_default=True,
    help="git executable to use",
)
@click.option(
    "--scratch-dir",
    envvar="PKGPIN_SCRATCH_DIR",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Where temporary clones are created (default: system temp dir)",
)
def get(
    repo: str,
    destination: Optional[str],
    directory: str,
    ref: str,
    name: Optional[str],
    clean: bool,
    git_program: str,
    scratch_dir: Optional[Path],
):
    """Fetch a package from a git repository into DESTINATION.

    DESTINATION defaults to the base name of the package directory, or of
    the repository when fetching its root.

    Examples:
        pkgpin get https://github.com/org/configs.git -d apps/web -r v1.0.0
        pkgpin get ../configs web --directory apps/web --ref main --clean

    Exit codes:
        0: Success
        1: Generic runtime failure
        2: Invalid CLI usage
        3: git could not fetch the revision
        4: Destination already exists
        5: Subdirectory missing at the fetched revision
        6: Unreadable Pkgfile
    """
    if scratch_dir is not None:
        scratch_dir.mkdir(parents=True, exist_ok=True)
    settings = FetchSettings(git_program=git_program, scratch_root=scratch_dir)

    command = FetchCommand(
        repo=repo,
        directory=directory,
        ref=ref,
        destination=destination or default_destination(repo, directory),
        name=name,
        clean=clean,
    )

    try:
        pkgfile = command.run(client=GitClient(settings=settings))
    except InputValidationError as e:
        logger.error(f"Invalid input: {e}")
        sys.exit(EXIT_USAGE)
    except DestinationCollisionError as e:
        logger.error(f"{e}; pass --clean to replace it")
        sys.exit(EXIT_COLLISION)
    except RevisionControlError as e:
        logger.error(f"Failed to fetch {repo}@{ref}: {e}")
        sys.exit(EXIT_REVISION)
    except SubdirectoryNotFoundError as e:
        logger.error(str(e))
        sys.exit(EXIT_MISSING_SUBDIRECTORY)
    except RecordFormatError as e:
        logger.error(str(e))
        sys.exit(EXIT_BAD_PKGFILE)
    except Exception as e:
        logger.error(f"Fetch of {repo}@{ref} ({directory}) failed: {e}")
        sys.exit(EXIT_FAILURE)

    commit = pkgfile.upstream.git.commit
    click.echo(f"[OK] Package fetched: {pkgfile.metadata.name}")
    click.echo(f"  Destination: {command.destination}")
    click.echo(f"  Ref: {ref}")
    click.echo(f"  Commit: {commit[:12]}")
    sys.exit(EXIT_OK)


if __name__ == "__main__":
    main()
