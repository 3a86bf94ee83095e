import io
import logging
import tarfile
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from tempfile import TemporaryDirectory

import pytest

from unpack_unitypackage.unitypackage.types import DirectoryContents

WOOD_BYTES = bytes(range(10))
GRASS_GUID = "0f1e2d3c4b5a69788796a5b4c3d2e1f0"
GRASS_BYTES = b"\x89PNG\r\n\x1a\n fake image data"
GRASS_META = f"fileFormatVersion: 2\nguid: {GRASS_GUID}\n".encode()


@dataclass(frozen=True)
class Symlink:
    """A symbolic link entry for `write_unitypackage()`."""

    target: str


class Directory:
    """A directory entry for `write_unitypackage()`."""


EntryData = bytes | Symlink | type[Directory]


def write_unitypackage(dest: Path, entries: Sequence[tuple[str, EntryData]]) -> Path:
    """
    Write a gzip-compressed tar archive containing `entries`, in order.

    Args:
        dest: Path of the archive to create.
        entries: Pairs of entry name and contents. `bytes` give a regular file,
            `Directory` a directory and `Symlink(...)` a symbolic link.

    Returns:
        `dest`

    """
    with tarfile.open(dest, "w:gz") as tar:
        for name, data in entries:
            info = tarfile.TarInfo(name)
            if isinstance(data, bytes):
                info.size = len(data)
                info.mode = 0o644
                tar.addfile(info, io.BytesIO(data))
            elif isinstance(data, Symlink):
                info.type = tarfile.SYMTYPE
                info.linkname = data.target
                tar.addfile(info)
            else:
                info.type = tarfile.DIRTYPE
                info.mode = 0o755
                tar.addfile(info)
    return dest


def asset_group(
    group_id: str, pathname: str, asset: bytes | None, meta: bytes | None = None
) -> list[tuple[str, EntryData]]:
    """Return the entries Unity writes for one asset, in Unity's order."""
    entries: list[tuple[str, EntryData]] = [(f"{group_id}/", Directory)]
    if asset is not None:
        entries.append((f"{group_id}/asset", asset))
    if meta is not None:
        entries.append((f"{group_id}/asset.meta", meta))
    entries.append((f"{group_id}/pathname", pathname.encode()))
    return entries


def assert_log(caplog: pytest.LogCaptureFixture, level: int, message: str):
    """
    Assert that a message was logged.

    Args:
        caplog: The `LogCaptureFixture` to check.
        level: The log level (e.g., `logging.INFO`).
        message: The log message.

    Returns:
        The first matching log record.

    Raises:
        ValueError: If no matching log record is found.

    """
    for record in caplog.records:
        if record.levelno == level and record.message == message:
            return record
    raise ValueError(f"'{logging.getLevelName(level)}' message not found: {message}")


def list_files(root: Path) -> list[Path]:
    """List the files under `root`, relative to it."""
    return sorted(p.relative_to(root) for p in root.rglob("*") if p.is_file())


def write_contents(contents: DirectoryContents, dest_dir: Path) -> None:
    """Write `contents` into `dest_dir`, creating it even if `contents` is empty."""
    dest_dir.mkdir(parents=True, exist_ok=True)
    for rel_path, data in contents.files.items():
        full_path = dest_dir / rel_path
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_bytes(data)


@contextmanager
def unpacked(contents: DirectoryContents) -> Iterator[Path]:
    """Write `contents` to a temporary directory, removed on exit."""
    with TemporaryDirectory() as tmp:
        tmp_dir = Path(tmp).resolve()  # Don't return symlinks on macOS
        write_contents(contents, tmp_dir)
        yield tmp_dir
