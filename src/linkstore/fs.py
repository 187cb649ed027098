"""Filesystem primitives shared by the collector, linker and uninstall."""

from __future__ import annotations

import errno
import os
import shutil
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

PARTIAL_SUFFIX = ".partial-"


def make_symlink(src: Path, dest: Path) -> bool:
    """Create *dest* pointing at *src*.

    Returns False without touching anything when *dest* already exists (as a
    link, a dangling link or a real entry). Any other OSError propagates.
    """
    try:
        os.symlink(src, dest, target_is_directory=True)
    except OSError as exc:
        if exc.errno == errno.EEXIST:
            return False
        raise
    return True


def remove_entry(path: Path) -> None:
    """Remove a symlink, file or directory tree. A missing path is not an error."""
    if path.is_symlink() or path.is_file():
        path.unlink(missing_ok=True)
    elif path.is_dir():
        shutil.rmtree(path)


def staging_path(dest: Path) -> Path:
    """Hidden sibling of *dest* that a cross-filesystem copy is assembled in.

    The leading dot keeps it out of store scans, so a copy cut short is never
    mistaken for a complete entry.
    """
    return dest.with_name(f".{dest.name}{PARTIAL_SUFFIX}{os.getpid()}")


def move_into_store(src: Path, dest: Path) -> None:
    """Relocate *src* to *dest*, creating the parent directory if needed.

    On one filesystem this is an atomic rename. Across filesystems the tree
    is copied into :func:`staging_path` first and renamed into place, and
    *src* is removed only after *dest* exists in full.
    """
    dest.parent.mkdir(parents=True, exist_ok=True)
    try:
        os.rename(src, dest)
        return
    except OSError as exc:
        if exc.errno != errno.EXDEV:
            raise

    staging = staging_path(dest)
    remove_entry(staging)
    try:
        shutil.copytree(src, staging, symlinks=True)
        os.replace(staging, dest)
    except BaseException:
        remove_entry(staging)
        raise
    remove_entry(src)
