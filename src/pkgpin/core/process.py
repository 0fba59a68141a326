"""Process runner used for every git invocation.

The runner is passed into :class:`pkgpin.fetch.git.GitClient` so that tests
can substitute scripted output for real subprocesses.
"""
import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of one process invocation."""

    args: Sequence[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Combined stdout and stderr, stripped."""
        return "\n".join(s.strip() for s in (self.stdout, self.stderr) if s.strip())


class ProcessRunner(Protocol):
    def which(self, program: str) -> Optional[str]:
        ...

    def run(
        self,
        args: Sequence[str],
        cwd: Optional[Path] = None,
        timeout: Optional[float] = None,
    ) -> ProcessResult:
        ...


class SubprocessRunner:
    """Run commands with :func:`subprocess.run`, capturing text output."""

    def which(self, program: str) -> Optional[str]:
        return shutil.which(program)

    def run(
        self,
        args: Sequence[str],
        cwd: Optional[Path] = None,
        timeout: Optional[float] = None,
    ) -> ProcessResult:
        logger.debug(f"Running {' '.join(args)} (cwd={cwd})")
        try:
            result = subprocess.run(
                list(args),
                cwd=str(cwd) if cwd is not None else None,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            return ProcessResult(
                args=tuple(args),
                returncode=-1,
                stderr=f"timed out after {timeout}s",
            )

        if result.returncode != 0:
            logger.debug(f"Exit {result.returncode}: {result.stderr.strip()}")
        return ProcessResult(
            args=tuple(args),
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )
