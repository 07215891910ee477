"""Filesystem helpers for materializing and removing template directories."""

import os
import shutil
import stat
from collections.abc import Callable, Iterable
from pathlib import Path


def make_ignore(excluded_dirs: Iterable[str], excluded_files: Iterable[str]) -> Callable[[str, list[str]], set[str]]:
    """
    Build a ``shutil.copytree`` ignore callback.

    Args:
        excluded_dirs: Names skipped wherever they appear as a path segment
        excluded_files: File names skipped at any depth

    Returns:
        Callback returning the names to skip in a directory
    """
    dir_names = set(excluded_dirs)
    file_names = set(excluded_files)

    def _ignore(directory: str, names: list[str]) -> set[str]:
        ignored = set()
        for name in names:
            if name in dir_names:
                ignored.add(name)
            elif name in file_names and os.path.isfile(os.path.join(directory, name)):
                ignored.add(name)
        return ignored

    return _ignore


def copy_filtered(
    source: Path,
    destination: Path,
    excluded_dirs: Iterable[str] = (),
    excluded_files: Iterable[str] = (),
) -> None:
    """
    Copy every file under ``source`` into ``destination`` keeping relative structure.

    ``destination`` is created if missing; existing files are overwritten.
    Symbolic links are copied as links, never followed.
    """
    shutil.copytree(
        source,
        destination,
        symlinks=True,
        ignore=make_ignore(excluded_dirs, excluded_files),
        dirs_exist_ok=True,
    )


def force_remove_tree(directory: Path) -> None:
    """
    Recursively delete a directory, clearing read-only attributes first.

    Git marks object files read-only on Windows, which makes a plain
    ``shutil.rmtree`` fail. Subdirectories are removed before the files of
    their parent (post-order). A missing directory is a no-op.
    """
    if not directory.is_dir() or directory.is_symlink():
        return

    os.chmod(directory, stat.S_IRWXU)
    with os.scandir(directory) as it:
        entries = list(it)

    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            force_remove_tree(Path(entry.path))

    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            continue
        if not entry.is_symlink():
            os.chmod(entry.path, stat.S_IWRITE | stat.S_IREAD)
        os.unlink(entry.path)

    directory.rmdir()
