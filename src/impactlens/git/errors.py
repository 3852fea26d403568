"""Git module error types.

Raised inside the access layer only; ``GitVcsClient`` converts them into
``None``/``False`` results.
"""


class GitError(Exception):
    """Base error for git operations."""

    pass


class NotARepositoryError(GitError):
    """Path is not a git repository."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Not a git repository: {path}")
        self.path = path


class RefNotFoundError(GitError):
    """Reference (branch, tag, commit) not found."""

    def __init__(self, ref: str) -> None:
        super().__init__(f"Reference not found: {ref}")
        self.ref = ref


class PathNotInTreeError(GitError):
    """File does not exist in the tree of a commit."""

    def __init__(self, path: str, ref: str) -> None:
        super().__init__(f"Path {path!r} not found at {ref}")
        self.path = path
        self.ref = ref
