"""Filesystem primitives used to materialize and inspect installed skills."""

from __future__ import annotations

import asyncio
import os
import shutil
from pathlib import Path

import aiofiles.os

from ai_agents_skills.exception import FilesystemOperationFailed


def exists(path: Path) -> bool:
    """True if an entry exists at `path`, including a symlink whose destination is gone."""
    return path.is_symlink() or path.exists()


def is_symlink(path: Path) -> bool:
    return path.is_symlink()


def is_directory(path: Path) -> bool:
    """True for real directories and for symlinks pointing at one."""
    return path.is_dir()


def read_link_target(path: Path) -> Path | None:
    """Return the fully resolved destination of a symlink, or None if `path` is not one."""
    if not path.is_symlink():
        return None
    return Path(os.path.realpath(path))


async def ensure_dir(path: Path) -> None:
    try:
        await aiofiles.os.makedirs(path, exist_ok=True)
    except OSError as e:
        raise FilesystemOperationFailed("create directory", path, str(e)) from e


async def copy_tree(source: Path, dest: Path) -> None:
    """Recursively copy a skill directory. Symlinks inside the source are copied as links."""
    await ensure_dir(dest.parent)
    try:
        await asyncio.to_thread(shutil.copytree, source, dest, symlinks=True)
    except (OSError, shutil.Error) as e:
        raise FilesystemOperationFailed("copy", dest, str(e)) from e


async def create_symlink(source: Path, link: Path) -> None:
    """Create `link` as a relative symlink to the `source` directory."""
    await ensure_dir(link.parent)
    relative = os.path.relpath(source, link.parent)
    try:
        await aiofiles.os.symlink(relative, link, target_is_directory=True)
    except OSError as e:
        raise FilesystemOperationFailed("symlink", link, str(e)) from e


async def remove_path(path: Path) -> None:
    """Remove a symlink, file or directory tree. Missing paths are ignored."""
    try:
        if path.is_symlink() or path.is_file():
            await aiofiles.os.unlink(path)
        elif path.is_dir():
            await asyncio.to_thread(shutil.rmtree, path)
    except FileNotFoundError:
        pass
    except OSError as e:
        raise FilesystemOperationFailed("remove", path, str(e)) from e
