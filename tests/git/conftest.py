"""Test fixtures for git module."""

from __future__ import annotations

import pygit2
import pytest


@pytest.fixture
def repo_with_feature(temp_repo: pygit2.Repository, commit_file) -> pygit2.Repository:
    """main has src/a.ts; feature branches off and edits it; HEAD is feature."""
    commit_file(temp_repo, "src/a.ts", "export const v = 1;\n", "Add a.ts")
    main_commit = temp_repo.head.peel(pygit2.Commit)
    temp_repo.branches.local.create("feature", main_commit)
    temp_repo.checkout(temp_repo.branches.local["feature"])
    commit_file(temp_repo, "src/a.ts", "export const v = 2;\n", "Edit on feature")
    return temp_repo
