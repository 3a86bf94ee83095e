import logging
import os
import shutil
import tempfile
from pathlib import Path

from unpack_unitypackage.utils import UnpackError

logger = logging.getLogger(__name__)


class RelocationError(UnpackError):
    """Raised when a staged file cannot be moved to its destination."""

    def __init__(self, source: Path, destination: Path):
        super().__init__(f"Failed to move '{source}' to '{destination}'")


def _copy_durably(source: Path, destination: Path) -> None:
    """
    Copy `source` to `destination`, syncing the data to disk.

    The data is written to a temporary file in the destination directory which
    is then renamed over `destination`, so `destination` never holds a partial
    copy. The temporary file is removed if anything goes wrong.
    """
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{destination.name}.", suffix=".tmp", dir=destination.parent
    )
    tmp_path = Path(tmp_name)
    try:
        with source.open("rb") as src, os.fdopen(fd, "wb") as dst:
            shutil.copyfileobj(src, dst)
            dst.flush()
            os.fsync(dst.fileno())
        os.replace(tmp_path, destination)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def move_file(source: Path, destination: Path) -> None:
    """
    Move a file, creating the destination's parent directories if needed.

    The file is renamed if possible. Otherwise (e.g. if `source` and
    `destination` are on different volumes) it is copied, synced to disk and
    the source is deleted. An existing file at `destination` is replaced.

    Raises:
        RelocationError: If the move fails for any reason. `destination` is
            left untouched by a failed copy.

    """
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
    except (OSError, ValueError) as e:  # ValueError for embedded NUL bytes
        raise RelocationError(source, destination) from e
    try:
        os.replace(source, destination)
    except (OSError, ValueError) as rename_error:
        logger.debug(
            "Could not rename '%s' to '%s' (%s); copying instead",
            source,
            destination,
            rename_error,
        )
        try:
            _copy_durably(source, destination)
            source.unlink()
        except (OSError, ValueError) as e:
            raise RelocationError(source, destination) from e
