import io
import logging
import tarfile
import uuid
from pathlib import Path
from typing import BinaryIO

from unpack_unitypackage.utils import UnpackError

from .extract import extract_assets
from .reconstruct import reconstruct_structure
from .types import (
    ASSET_FILE_NAME,
    META_FILE_NAME,
    META_SUFFIX,
    PATHNAME_FILE_NAME,
    ReconstructionSummary,
    StagingArea,
    get_contents,
)

logger = logging.getLogger(__name__)


class PackageExistsError(UnpackError):
    """Raised when packing would overwrite an existing package."""

    def __init__(self, path: Path):
        super().__init__(f"'{path}' already exists. Re-run with --force to overwrite it")


class SourceDirectoryError(UnpackError):
    """Raised when the directory to pack does not exist."""

    def __init__(self, path: Path):
        super().__init__(f"'{path}' is not a directory")


class SourceReadError(UnpackError):
    """Raised when the files to pack cannot be read."""

    def __init__(self, path: Path):
        super().__init__(f"Failed to read the files under '{path}'")


class PackageWriteError(UnpackError):
    """Raised when a package cannot be written."""

    def __init__(self, path: Path):
        super().__init__(f"Failed to write package '{path}'")


def unpack_unitypackage(
    archive: Path | BinaryIO,
    dest_dir: Path,
    *,
    staging_parent: Path | None = None,
    keep_going: bool = False,
) -> ReconstructionSummary:
    """
    Unpack a Unity package into a project tree rooted at `dest_dir`.

    The archive is first extracted into a temporary staging directory (created
    under `staging_parent`, if given), then each asset is moved to the path
    recorded for it in the package. The staging directory is always removed
    before returning.
    """
    with StagingArea(staging_parent) as staging_dir:
        records = extract_assets(archive, staging_dir)
        return reconstruct_structure(records, dest_dir, keep_going=keep_going)


def _guid_from_meta(meta: bytes) -> str | None:
    """Return the value of the `guid:` line of a Unity .meta file, if any."""
    for line in meta.decode("utf-8", errors="replace").splitlines():
        if line.startswith("guid:"):
            guid = line.removeprefix("guid:").strip()
            if guid not in ("", ".", "..") and "/" not in guid:
                return guid
    return None


def _is_sidecar(rel_path: Path, files: dict[Path, bytes]) -> bool:
    """
    Whether `rel_path` is the .meta file of another file being packed.

    `X.meta` belongs to `X` only if `X` is itself packed as an asset, so in
    `{a, a.meta, a.meta.meta}` the last file is an asset of its own.
    """
    if rel_path.suffix != META_SUFFIX:
        return False
    companion = rel_path.with_suffix("")
    return companion in files and not _is_sidecar(companion, files)


def _add_entry(tar: tarfile.TarFile, name: str, data: bytes) -> None:
    info = tarfile.TarInfo(name)
    info.size = len(data)
    info.mode = 0o644
    tar.addfile(info, io.BytesIO(data))


def _add_group(
    tar: tarfile.TarFile, group_id: str, rel_path: Path, asset: bytes, meta: bytes | None
) -> None:
    dir_info = tarfile.TarInfo(f"{group_id}/")
    dir_info.type = tarfile.DIRTYPE
    dir_info.mode = 0o755
    tar.addfile(dir_info)
    _add_entry(tar, f"{group_id}/{ASSET_FILE_NAME}", asset)
    if meta is not None:
        _add_entry(tar, f"{group_id}/{META_FILE_NAME}", meta)
    _add_entry(tar, f"{group_id}/{PATHNAME_FILE_NAME}", rel_path.as_posix().encode())


def pack_unitypackage(src_dir: Path, dest_file: Path, *, force: bool = False) -> int:
    """
    Pack a project tree into a Unity package.

    Each file becomes one asset. A sibling `<file>.meta` is packed as the
    asset's metadata, and its `guid` is used to name the asset's group; files
    without one get a GUID derived from their relative path. A `.meta` file
    with no companion file, or whose companion is itself a .meta file packed as
    metadata, is packed as an ordinary asset.

    Args:
        src_dir: Root of the tree to pack.
        dest_file: Path of the package to create.
        force: Overwrite `dest_file` if it already exists.

    Returns:
        The number of assets packed.

    Raises:
        SourceDirectoryError: If `src_dir` is not a directory.
        PackageExistsError: If `dest_file` exists and `force` is unset.
        SourceReadError: If a file under `src_dir` cannot be read.
        PackageWriteError: If the package cannot be written.

    """
    if not src_dir.is_dir():
        raise SourceDirectoryError(src_dir)
    if dest_file.exists() and not force:
        raise PackageExistsError(dest_file)
    try:
        files = get_contents(src_dir).files
    except OSError as e:
        raise SourceReadError(src_dir) from e
    used_guids: set[str] = set()
    count = 0
    try:
        dest_file.parent.mkdir(parents=True, exist_ok=True)
        with tarfile.open(dest_file, "w:gz") as tar:
            for rel_path, data in files.items():
                if _is_sidecar(rel_path, files):
                    continue  # Packed alongside its companion file
                meta = files.get(rel_path.with_name(rel_path.name + META_SUFFIX))
                guid = None if meta is None else _guid_from_meta(meta)
                if guid is None or guid in used_guids:
                    if guid is not None:
                        logger.warning(
                            "Duplicate guid %s in metadata for '%s'; generating a new one",
                            guid,
                            rel_path,
                        )
                    guid = uuid.uuid5(uuid.NAMESPACE_URL, rel_path.as_posix()).hex
                used_guids.add(guid)
                _add_group(tar, guid, rel_path, data, meta)
                logger.debug("Packed '%s' as %s", rel_path, guid)
                count += 1
    except OSError as e:
        dest_file.unlink(missing_ok=True)
        raise PackageWriteError(dest_file) from e
    logger.info("Packed %d assets from %s into %s", count, src_dir, dest_file)
    return count
