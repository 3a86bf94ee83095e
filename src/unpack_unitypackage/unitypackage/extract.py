import logging
import shutil
import tarfile
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import IO, BinaryIO

from unpack_unitypackage.utils import UnpackError, split_entry_name

from .types import ASSET_FILE_NAME, META_FILE_NAME, PATHNAME_FILE_NAME, AssetRecord

logger = logging.getLogger(__name__)

STAGED_MEMBER_NAMES = (ASSET_FILE_NAME, META_FILE_NAME)
STREAM_NAME = "<stream>"


class ArchiveOpenError(UnpackError):
    """Raised when a package file cannot be opened or read."""

    def __init__(self, source: Path | str):
        super().__init__(f"Failed to open or read archive '{source}'")


class ArchiveFormatError(UnpackError):
    """Raised when a package is not a well-formed gzip-compressed tar archive."""

    def __init__(self, source: Path | str):
        super().__init__(f"'{source}' is not a valid gzip-compressed tar archive")


class StagingError(UnpackError):
    """Raised when an archive entry cannot be written to the staging area."""

    def __init__(self, entry_name: str, dest: Path):
        super().__init__(f"Failed to stage archive entry '{entry_name}' to '{dest}'")


@dataclass
class _PendingAsset:
    """The parts of an asset group seen so far in the archive."""

    group_id: str
    payload_location: Path | None = None
    sidecar_location: Path | None = None
    logical_path: str = ""

    def finalize(self) -> AssetRecord:
        return AssetRecord(
            group_id=self.group_id,
            payload_location=self.payload_location,
            sidecar_location=self.sidecar_location,
            logical_path=self.logical_path,
        )


def _read_logical_path(fileobj: IO[bytes], entry_name: str) -> str:
    """
    Read the destination-relative path stored in a "pathname" entry.

    Only the first line is used, as some Unity versions append a second line
    to the file. Returns an empty string if the content is not valid UTF-8.
    """
    raw = fileobj.read()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        logger.warning("Ignoring non UTF-8 pathname in entry '%s'", entry_name)
        return ""
    return text.partition("\n")[0].rstrip("\r")


def _stage_member(fileobj: IO[bytes], entry_name: str, dest: Path) -> None:
    """Stream the contents of an archive entry to `dest`."""
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        with dest.open("wb") as f:
            shutil.copyfileobj(fileobj, f)
    except OSError as e:
        raise StagingError(entry_name, dest) from e


def _process_member(
    tar: tarfile.TarFile,
    member: tarfile.TarInfo,
    staging_dir: Path,
    pending: dict[str, _PendingAsset],
) -> None:
    """Stage or record a single archive entry as part of its asset group."""
    if member.isdir():
        logger.debug("Skipping directory entry: %s", member.name)
        return
    if not member.isfile():
        logger.warning("Skipping unsupported entry type for %s", member.name)
        return
    parts = split_entry_name(member.name)
    if parts is None:
        logger.debug("Ignoring entry outside of any asset group: %s", member.name)
        return
    group_id, member_name = parts
    if member_name not in (*STAGED_MEMBER_NAMES, PATHNAME_FILE_NAME):
        logger.debug("Ignoring unrecognised entry: %s", member.name)
        return

    fileobj = tar.extractfile(member)
    if fileobj is None:  # Only happens for non-regular entries
        return
    asset = pending.get(group_id)
    if asset is None:
        asset = pending[group_id] = _PendingAsset(group_id)

    if member_name == PATHNAME_FILE_NAME:
        if asset.logical_path != "":
            logger.warning("Duplicate pathname entry for asset %s", group_id)
        asset.logical_path = _read_logical_path(fileobj, member.name)
        return

    dest = staging_dir / group_id / member_name
    previous = (
        asset.payload_location
        if member_name == ASSET_FILE_NAME
        else asset.sidecar_location
    )
    if previous is not None:
        logger.warning("Duplicate '%s' entry for asset %s", member_name, group_id)
    _stage_member(fileobj, member.name, dest)
    if member_name == ASSET_FILE_NAME:
        asset.payload_location = dest
    else:
        asset.sidecar_location = dest


def _extract_from_stream(
    stream: BinaryIO, staging_dir: Path, source: Path | str
) -> list[AssetRecord]:
    pending: dict[str, _PendingAsset] = {}
    try:
        with tarfile.open(fileobj=stream, mode="r|gz") as tar:
            for member in tar:
                _process_member(tar, member, staging_dir, pending)
    except (tarfile.TarError, EOFError, zlib.error) as e:
        raise ArchiveFormatError(source) from e
    except OSError as e:
        raise ArchiveOpenError(source) from e
    # Every group is finalised once the whole archive has been read, so the
    # order of the entries within a group does not matter.
    return [asset.finalize() for asset in pending.values()]


def extract_assets(source: Path | BinaryIO, staging_dir: Path) -> list[AssetRecord]:
    """
    Extract the assets of a Unity package into a staging directory.

    The archive is read in a single forward pass. Entries are grouped by the
    first segment of their name; each group's "asset" and "asset.meta" entries
    are written to `staging_dir/<group>/`, and its "pathname" entry is read
    into the record's `logical_path`.

    Args:
        source: Path to the package, or a readable binary stream of its
            (compressed) contents.
        staging_dir: Directory to write the extracted files to.

    Returns:
        One record per asset group, in order of first appearance in the archive.

    Raises:
        ArchiveOpenError: If the package cannot be opened or read.
        ArchiveFormatError: If the gzip or tar data is invalid or truncated.
        StagingError: If an entry cannot be written to `staging_dir`.

    """
    if not isinstance(source, Path):
        records = _extract_from_stream(source, staging_dir, STREAM_NAME)
        logger.info("Extracted %d assets from %s", len(records), STREAM_NAME)
        return records
    try:
        stream = source.open("rb")
    except OSError as e:
        raise ArchiveOpenError(source) from e
    with stream:
        records = _extract_from_stream(stream, staging_dir, source)
    logger.info("Extracted %d assets from %s", len(records), source)
    return records
