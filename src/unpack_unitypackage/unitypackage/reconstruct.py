import logging
from collections.abc import Sequence
from pathlib import Path

from tqdm import tqdm
from tqdm.contrib.logging import logging_redirect_tqdm

from unpack_unitypackage.utils import UnpackError, is_safe_relative_path

from .relocate import RelocationError, move_file
from .types import META_SUFFIX, AssetRecord, ReconstructionSummary

logger = logging.getLogger(__name__)


class OutputDirectoryError(UnpackError):
    """Raised when the output directory cannot be created."""

    def __init__(self, path: Path):
        super().__init__(f"Failed to create output directory '{path}'")


def ensure_output_dir(path: Path) -> None:
    """Create `path` and its parents if they do not exist."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OutputDirectoryError(path) from e


def _path_problem(logical_path: str) -> str | None:
    """Return why `logical_path` cannot be used as a destination, if it can't."""
    if logical_path == "":
        return "it has no pathname"
    if not is_safe_relative_path(logical_path):
        return (
            f"its pathname {logical_path!r} is not a relative path inside the "
            "output directory"
        )
    return None


def _relocate_record(record: AssetRecord, payload: Path, dest_dir: Path) -> None:
    """Move `payload` and the record's sidecar (if any) to the record's path."""
    target = dest_dir / record.logical_path
    move_file(payload, target)
    if record.sidecar_location is None:
        logger.info(
            "No %s file for '%s'; moved asset only", META_SUFFIX, record.logical_path
        )
    else:
        move_file(record.sidecar_location, target.with_name(target.name + META_SUFFIX))
    logger.info("Moved %s -> %s", record.group_id, target)


def reconstruct_structure(
    records: Sequence[AssetRecord], dest_dir: Path, *, keep_going: bool = False
) -> ReconstructionSummary:
    """
    Move extracted assets to their logical paths under `dest_dir`.

    Each complete record's payload is moved to `dest_dir/<logical_path>` and
    its sidecar, if any, to `dest_dir/<logical_path>.meta`. Incomplete records
    are skipped with a warning.

    Args:
        records: The records produced by `extract_assets()`.
        dest_dir: Root of the project tree to reconstruct. Created if needed.
        keep_going: If `True`, log relocation failures and carry on with the
            remaining records instead of aborting.

    Returns:
        A summary of which records were moved, skipped, or failed.

    Raises:
        OutputDirectoryError: If `dest_dir` cannot be created.
        RelocationError: If a file cannot be moved and `keep_going` is unset.

    """
    ensure_output_dir(dest_dir)
    summary = ReconstructionSummary()
    written: set[str] = set()
    with logging_redirect_tqdm():
        for record in tqdm(records, desc="Reconstructing assets", unit="asset"):
            payload = record.payload_location
            if payload is None:
                reason = "it has no asset file"
            else:
                reason = _path_problem(record.logical_path)
            if payload is None or reason is not None:
                logger.warning("Skipping asset %s because %s", record.group_id, reason)
                summary.skipped.append(record.group_id)
                continue
            if record.logical_path in written:
                logger.warning(
                    "Asset %s overwrites '%s' written by an earlier asset",
                    record.group_id,
                    record.logical_path,
                )
            try:
                _relocate_record(record, payload, dest_dir)
            except RelocationError:
                if not keep_going:
                    raise
                logger.exception("Error reconstructing asset %s", record.group_id)
                summary.failed.append(record.group_id)
                continue
            written.add(record.logical_path)
            summary.moved.append(record.group_id)
    if not summary.ok:
        logger.warning(
            "Failed to reconstruct %d of %d assets.", len(summary.failed), len(records)
        )
    logger.info(
        "Reconstructed %d assets into %s (%d skipped)",
        len(summary.moved),
        dest_dir,
        len(summary.skipped),
    )
    return summary
