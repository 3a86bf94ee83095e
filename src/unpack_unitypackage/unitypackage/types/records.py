"""Records describing the assets found in a Unity package."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict

# Each asset in a package is a directory named after its GUID, containing:
# - "pathname": the asset's path relative to the project root
# - "asset": the asset's contents (absent for folders)
# - "asset.meta": Unity's import settings for the asset (optional)
ASSET_FILE_NAME = "asset"
META_FILE_NAME = "asset.meta"
PATHNAME_FILE_NAME = "pathname"
META_SUFFIX = ".meta"


class AssetRecord(BaseModel):
    """
    One logical asset discovered in a Unity package.

    Attributes:
        group_id (str): The name of the directory holding the asset's entries
            in the archive (normally the asset's GUID).
        payload_location (Path | None): Staged copy of the "asset" entry, or
            `None` if the group had no such entry.
        sidecar_location (Path | None): Staged copy of the "asset.meta" entry,
            or `None` if the group had no such entry.
        logical_path (str): Destination-relative path read from the "pathname"
            entry. An empty string means the path is unknown.

    """

    model_config = ConfigDict(frozen=True)

    group_id: str
    payload_location: Path | None = None
    sidecar_location: Path | None = None
    logical_path: str = ""

    @property
    def is_complete(self) -> bool:
        """Whether the record has everything needed to reconstruct it."""
        return self.logical_path != "" and self.payload_location is not None


class ReconstructionSummary(BaseModel):
    """
    The outcome of reconstructing a project tree from a list of records.

    Each list holds the `group_id`s of the records concerned, in the order they
    were processed.
    """

    moved: list[str] = []
    skipped: list[str] = []
    failed: list[str] = []

    @property
    def ok(self) -> bool:
        return len(self.failed) == 0
