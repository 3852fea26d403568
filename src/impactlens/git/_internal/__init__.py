"""Internal components for git operations - not part of public API."""

from impactlens.git._internal.access import RepoAccess

__all__ = ["RepoAccess"]
