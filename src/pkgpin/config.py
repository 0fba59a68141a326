"""Runtime settings for fetching packages."""
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class FetchSettings(BaseModel):
    """Knobs for the git client and scratch directories.

    The CLI builds one of these from its options (and their environment
    variables); library callers can construct it directly.
    """

    git_program: str = Field(default="git", description="git executable name or path")
    scratch_root: Optional[Path] = Field(
        default=None,
        description="Parent of scratch clones (system temp dir if unset)",
    )
    scratch_prefix: str = Field(default="pkgpin-get-", description="Scratch dir name prefix")
    fetch_timeout: float = Field(default=300, gt=0, description="Seconds for network git commands")
    command_timeout: float = Field(default=60, gt=0, description="Seconds for local git commands")
