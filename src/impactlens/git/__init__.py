"""Git access for baseline resolution."""

from impactlens.git.client import GitVcsClient, VcsClient
from impactlens.git.errors import (
    GitError,
    NotARepositoryError,
    PathNotInTreeError,
    RefNotFoundError,
)

__all__ = [
    "GitVcsClient",
    "VcsClient",
    "GitError",
    "NotARepositoryError",
    "PathNotInTreeError",
    "RefNotFoundError",
]
