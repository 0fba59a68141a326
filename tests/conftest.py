"""Pytest fixtures for pkgpin tests."""
import subprocess
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

import pytest

from pkgpin.config import FetchSettings
from pkgpin.core.process import ProcessResult

HEAD_SHA = "0123456789abcdef0123456789abcdef01234567"


def _git(repo_path: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=repo_path,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def _commit_all(repo_path: Path, message: str) -> str:
    _git(repo_path, "add", "-A")
    _git(repo_path, "commit", "-m", message)
    return _git(repo_path, "rev-parse", "HEAD")


@pytest.fixture
def git_repo_fixture(tmp_path: Path) -> Dict[str, any]:
    """Create a monorepo with two packages, tags and a dev branch.

    Layout at the first commit:
        apps/web/deploy.yaml
        apps/web/Pkgfile      (custom "pipeline" field)
        apps/api/service.yaml (no Pkgfile)
        legacy/Pkgfile        (unsupported apiVersion)

    Returns dict with:
        - path: Path to repo
        - v1_sha: commit tagged v1 and apps/web/v1
        - main_sha: tip of main (tagged v2 only, apps/web/v1 stays behind)
        - dev_sha: tip of dev branch (adds apps/web/extra.yaml)
    """
    repo_path = tmp_path / "configs"
    repo_path.mkdir()

    _git(repo_path, "init", "--quiet")
    _git(repo_path, "symbolic-ref", "HEAD", "refs/heads/main")
    _git(repo_path, "config", "user.email", "test@example.com")
    _git(repo_path, "config", "user.name", "Test User")
    _git(repo_path, "config", "commit.gpgsign", "false")
    _git(repo_path, "config", "tag.gpgsign", "false")

    web = repo_path / "apps" / "web"
    web.mkdir(parents=True)
    (web / "deploy.yaml").write_text("kind: Deployment\nreplicas: 1\n")
    (web / "Pkgfile").write_text(
        "apiVersion: pkgpin.dev/v1alpha1\n"
        "kind: Pkgfile\n"
        "metadata:\n"
        "  name: web\n"
        "pipeline:\n"
        "  mutators:\n"
        "  - image: set-namespace\n"
    )
    api = repo_path / "apps" / "api"
    api.mkdir(parents=True)
    (api / "service.yaml").write_text("kind: Service\n")
    legacy = repo_path / "legacy"
    legacy.mkdir()
    (legacy / "Pkgfile").write_text("apiVersion: pkgpin.dev/v0\nkind: Pkgfile\n")
    v1_sha = _commit_all(repo_path, "Initial packages")
    _git(repo_path, "tag", "v1")
    _git(repo_path, "tag", "apps/web/v1")

    (web / "deploy.yaml").write_text("kind: Deployment\nreplicas: 3\n")
    main_sha = _commit_all(repo_path, "Scale web")
    _git(repo_path, "tag", "v2")

    _git(repo_path, "checkout", "--quiet", "-b", "dev")
    (web / "extra.yaml").write_text("kind: ConfigMap\n")
    dev_sha = _commit_all(repo_path, "Add extra on dev")
    _git(repo_path, "checkout", "--quiet", "main")

    return {
        "path": repo_path,
        "v1_sha": v1_sha,
        "main_sha": main_sha,
        "dev_sha": dev_sha,
    }


@pytest.fixture
def scratch_root(tmp_path: Path) -> Path:
    """Directory that receives every scratch clone made during a test."""
    path = tmp_path / "scratch"
    path.mkdir()
    return path


@pytest.fixture
def settings(scratch_root: Path) -> FetchSettings:
    return FetchSettings(scratch_root=scratch_root)


Response = Union[ProcessResult, Callable[[Sequence[str], Optional[Path]], ProcessResult]]


class ScriptedRunner:
    """Fake process runner answering git commands from a script.

    ``rules`` maps a prefix of the git arguments (without the program) to a
    result, or to a callable producing one. Unmatched commands succeed;
    ``rev-parse`` prints HEAD_SHA.
    """

    def __init__(self, rules: Optional[List[Tuple[Tuple[str, ...], Response]]] = None, git: Optional[str] = "/usr/bin/git"):
        self.rules = list(rules or [])
        self.git = git
        self.calls: List[List[str]] = []

    def which(self, program: str) -> Optional[str]:
        return self.git

    def run(self, args, cwd=None, timeout=None) -> ProcessResult:
        git_args = list(args[1:])
        self.calls.append(git_args)
        for prefix, response in self.rules:
            if tuple(git_args[: len(prefix)]) == prefix:
                if callable(response):
                    return response(args, cwd)
                return response
        if git_args[:1] == ["rev-parse"]:
            return ProcessResult(args=args, returncode=0, stdout=HEAD_SHA + "\n")
        return ProcessResult(args=args, returncode=0)

    def commands(self, name: str) -> List[List[str]]:
        return [c for c in self.calls if c and c[0] == name]


def fail(stderr: str = "fatal: error", returncode: int = 128) -> ProcessResult:
    return ProcessResult(args=(), returncode=returncode, stderr=stderr)
