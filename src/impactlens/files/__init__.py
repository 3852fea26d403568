"""Filesystem access."""

from impactlens.files.ops import DirEntry, FileRead, Filesystem, LocalFilesystem

__all__ = ["DirEntry", "FileRead", "Filesystem", "LocalFilesystem"]
