"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import sys
from collections.abc import Callable, Generator
from pathlib import Path

import pygit2
import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local impactlens package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of impactlens modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("impactlens"):
        del sys.modules[module_name]

CommitFile = Callable[[pygit2.Repository, str, str, str], str]


def _commit_file(repo: pygit2.Repository, rel_path: str, content: str, message: str) -> str:
    """Write, stage and commit one file on the current branch; return the commit id."""
    workdir = Path(repo.workdir)
    target = workdir / rel_path
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content)
    repo.index.add(rel_path)
    repo.index.write()
    tree = repo.index.write_tree()
    sig = pygit2.Signature("Test User", "test@example.com")
    parents = [] if repo.head_is_unborn else [repo.head.target]
    oid = repo.create_commit("HEAD", sig, sig, message, tree, parents)
    return str(oid)


@pytest.fixture
def commit_file() -> CommitFile:
    return _commit_file


@pytest.fixture
def temp_repo(tmp_path: Path) -> Generator[pygit2.Repository, None, None]:
    """Create a temporary git repository with initial commit."""
    repo_path = tmp_path / "repo"
    repo_path.mkdir()

    repo = pygit2.init_repository(str(repo_path), initial_head="main")

    # Configure user
    repo.config["user.name"] = "Test User"
    repo.config["user.email"] = "test@example.com"

    # Create initial commit
    (repo_path / "README.md").write_text("# Test Repo\n")
    repo.index.add("README.md")
    repo.index.write()
    tree = repo.index.write_tree()
    sig = pygit2.Signature("Test User", "test@example.com")
    repo.create_commit("refs/heads/main", sig, sig, "Initial commit", tree, [])

    # Set HEAD to main
    repo.set_head("refs/heads/main")

    yield repo


@pytest.fixture
def unborn_repo(tmp_path: Path) -> pygit2.Repository:
    """Repository with no commits."""
    repo_path = tmp_path / "unborn"
    repo_path.mkdir()
    return pygit2.init_repository(str(repo_path), initial_head="main")
