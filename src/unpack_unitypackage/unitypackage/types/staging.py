from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

STAGING_DIR_PREFIX = "unpack-unitypackage-"


class StagingArea:
    """
    Context manager owning the temporary directory that extracted files are
    staged in before being moved to their final locations.

    Returns the `Path` to a fresh directory on entry, and deletes it (with
    everything still inside) on exit, whether or not the block raised. Failure
    to delete the directory is only logged.

    Args:
        parent: Directory to create the staging directory in. Defaults to the
            system temp directory. Choosing a directory on the same volume as
            the output lets files be moved by renaming instead of copying.

    """

    parent: Path | None
    path: Path | None

    def __init__(self, parent: Path | None = None):
        self.parent = parent
        self.path = None

    def __enter__(self) -> Path:
        self.path = Path(tempfile.mkdtemp(prefix=STAGING_DIR_PREFIX, dir=self.parent))
        self.path = self.path.resolve()  # Don't return symlinks on macOS
        logger.debug("Created staging directory %s", self.path)
        return self.path

    def __exit__(self, exc_type, exc_value, traceback):
        if self.path is None:
            return
        try:
            shutil.rmtree(self.path)
        except OSError as e:
            logger.warning(
                "Failed to delete staging directory '%s': %s", self.path, e
            )
        else:
            logger.debug("Deleted staging directory %s", self.path)
        self.path = None
